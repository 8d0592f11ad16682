"""Taproot utilities for key-path only outputs."""

import coincurve

from coldstd.utils.hashes import tagged_hash


def taproot_tweak(pubkey_bytes, merkle_root=b""):
    """Compute the output key of a Taproot, as per BIP341.

    Without a script path the output key commits to an empty merkle root (see BIP86).
    """
    assert isinstance(pubkey_bytes, bytes) and len(pubkey_bytes) == 32
    assert isinstance(merkle_root, bytes) and len(merkle_root) in (0, 32)

    t = tagged_hash("TapTweak", pubkey_bytes + merkle_root)
    xonly_pubkey = coincurve.PublicKeyXOnly(pubkey_bytes)
    # Only fails for a tweak larger than the curve order, which would be a hash collision.
    xonly_pubkey.tweak_add(t)

    return xonly_pubkey
