from __future__ import annotations

from typing import Optional, Tuple

import coincurve
from bip32 import BIP32
from bip32.utils import _deriv_path_str_to_list

from coldstd.derivation import InvalidIndex, NormalIndex, XkeyOrigin
from coldstd.utils.hashes import hash160


class DescriptorKeyError(Exception):
    def __init__(self, message: str):
        self.message: str = message


class CompressedPk(bytes):
    """A 33 bytes compressed secp256k1 public key."""

    def __new__(cls, data: bytes) -> CompressedPk:
        if not isinstance(data, bytes) or len(data) != 33 or data[0] not in (2, 3):
            raise DescriptorKeyError("Only compressed keys are supported")
        try:
            coincurve.PublicKey(data)
        except ValueError as e:
            raise DescriptorKeyError(f"Public key parsing error: '{str(e)}'")
        return super().__new__(cls, data)

    def to_xonly(self) -> XOnlyPk:
        return XOnlyPk(self[1:])

    def __repr__(self) -> str:
        return f"CompressedPk({self.hex()})"


class XOnlyPk(bytes):
    """A 32 bytes x-only public key, as used by Taproot (BIP340)."""

    def __new__(cls, data: bytes) -> XOnlyPk:
        if not isinstance(data, bytes) or len(data) != 32:
            raise DescriptorKeyError("X-only keys must be 32 bytes long")
        try:
            coincurve.PublicKeyXOnly(data)
        except ValueError as e:
            raise DescriptorKeyError(f"Public key parsing error: '{str(e)}'")
        return super().__new__(cls, data)

    def __repr__(self) -> str:
        return f"XOnlyPk({self.hex()})"


def origin_from_str(origin_str: str) -> XkeyOrigin:
    """Parse a key origin such as '[aabbccdd/84h/0h/0h]'."""
    # Origin starts and ends with brackets
    if not origin_str.startswith("[") or not origin_str.endswith("]"):
        raise DescriptorKeyError(f"Insane origin: '{origin_str}'")
    # At least 8 hex characters + brackets
    if len(origin_str) < 10:
        raise DescriptorKeyError(f"Insane origin: '{origin_str}'")

    # For the fingerprint, just read the 4 bytes.
    try:
        fingerprint = bytes.fromhex(origin_str[1:9])
    except ValueError:
        raise DescriptorKeyError(f"Insane fingerprint in origin: '{origin_str}'")
    # For the path, reuse an internal helper from python-bip32.
    path = []
    if len(origin_str) > 10:
        if origin_str[9] != "/":
            raise DescriptorKeyError(f"Insane path in origin: '{origin_str}'")
        # The helper operates on "m/10h/11/12'/13", so give it a "m".
        try:
            path = _deriv_path_str_to_list("m" + origin_str[9:-1])
        except ValueError:
            raise DescriptorKeyError(f"Insane path in origin: '{origin_str}'")

    return XkeyOrigin(fingerprint, path)


class XpubSpec:
    """An extended public key along with its origin."""

    def __init__(self, xpub: BIP32, origin: Optional[XkeyOrigin] = None):
        assert isinstance(xpub, BIP32)
        assert origin is None or isinstance(origin, XkeyOrigin)

        # Never keep a private key around, even if we were handed one.
        self.xpub: BIP32 = BIP32.from_xpub(xpub.get_xpub())
        # Without origin information, the xpub is its own master.
        if origin is None:
            origin = XkeyOrigin(hash160(self.xpub.pubkey)[:4], [])
        self.origin: XkeyOrigin = origin

    @classmethod
    def from_str(cls, spec_str: str) -> XpubSpec:
        """Parse an optional origin followed by an xpub: '[aabbccdd/1h]xpub...'."""
        origin = None
        splitted = spec_str.split("]", maxsplit=1)
        if len(splitted) == 2:
            origin_str, spec_str = splitted
            origin = origin_from_str(origin_str + "]")
        try:
            xpub = BIP32.from_xpub(spec_str)
        except ValueError as e:
            raise DescriptorKeyError(f"Xpub parsing error: '{str(e)}'")
        return cls(xpub, origin)

    def __repr__(self) -> str:
        return f"{self.origin}{self.xpub.get_xpub()}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, XpubSpec):
            return NotImplemented
        return repr(self) == repr(other)

    def __hash__(self) -> int:
        return hash(repr(self))


class DeriveCompr:
    """A key which can be derived into compressed public keys, for pre-Taproot scripts."""

    def keychains(self) -> range:
        """The keychains this key may be derived at."""
        raise NotImplementedError

    def derive_compr(self, keychain: int, index: int) -> CompressedPk:
        """Derive the compressed public key at this keychain and normal index."""
        raise NotImplementedError

    def xpub_spec(self) -> XpubSpec:
        raise NotImplementedError


class DeriveXOnly:
    """A key which can be derived into x-only public keys, for Taproot scripts."""

    def keychains(self) -> range:
        """The keychains this key may be derived at."""
        raise NotImplementedError

    def derive_xonly(self, keychain: int, index: int) -> XOnlyPk:
        """Derive the x-only public key at this keychain and normal index."""
        raise NotImplementedError

    def xpub_spec(self) -> XpubSpec:
        raise NotImplementedError


class DeriveSet:
    """A key that has both a compressed and an x-only representation, so that a single
    master key may be used with any script template."""

    def compr(self) -> DeriveCompr:
        raise NotImplementedError

    def xonly(self) -> DeriveXOnly:
        raise NotImplementedError


def keychains_from_str(seg_str: str) -> Tuple[int, ...]:
    """Parse the keychain step of a key expression: either '0' or '<0;1>'."""
    if seg_str.startswith("<") and seg_str.endswith(">"):
        elems = seg_str[1:-1].split(";")
        if len(elems) < 2:
            raise DescriptorKeyError(f"Insane multipath step: '{seg_str}'")
    else:
        elems = [seg_str]

    keychains = []
    for elem in elems:
        if not elem.isascii() or not elem.isdigit():
            raise DescriptorKeyError(f"Invalid keychain: '{elem}'")
        keychains.append(int(elem))
    return tuple(keychains)


class XpubDerivable(DeriveCompr, DeriveXOnly, DeriveSet):
    """An extended public key to be derived at '<keychain>/<index>', for instance the
    account-level xpub of a BIP84 or BIP86 wallet with keychains 0 (receive) and 1
    (change).
    """

    def __init__(self, spec: XpubSpec, keychains: Tuple[int, ...] = (0, 1)):
        assert isinstance(spec, XpubSpec)
        keychains = tuple(keychains)
        if len(keychains) == 0:
            raise DescriptorKeyError("At least one keychain is required")
        if any(not 0 <= k <= 0xFF for k in keychains):
            raise DescriptorKeyError(f"Invalid keychains: {keychains}")
        # Keychains must form a range.
        if list(keychains) != list(range(keychains[0], keychains[0] + len(keychains))):
            raise DescriptorKeyError(
                f"Keychains must be consecutive and increasing: {keychains}"
            )

        self.spec: XpubSpec = spec
        self._keychains: Tuple[int, ...] = keychains

    @classmethod
    def from_str(cls, key_str: str) -> XpubDerivable:
        """Parse a key expression like '[aabbccdd/86h/0h/0h]xpub.../<0;1>/*'."""
        # The origin may contain slashes too, only look for the steps after it.
        slash = key_str.find("/", key_str.find("]") + 1)
        if slash == -1:
            raise DescriptorKeyError(f"Missing derivation steps in key: '{key_str}'")
        spec_str, path_str = key_str[:slash], key_str[slash + 1 :]

        if path_str[-2:] in ["*'", "*h", "*H"]:
            raise DescriptorKeyError(
                f"Hardened wildcard can't be derived from an xpub: '{key_str}'"
            )
        if not path_str.endswith("/*"):
            raise DescriptorKeyError(f"Key must end with an unhardened wildcard: '{key_str}'")
        keychains = keychains_from_str(path_str[:-2])

        return cls(XpubSpec.from_str(spec_str), keychains)

    def keychains(self) -> range:
        return range(self._keychains[0], self._keychains[-1] + 1)

    def xpub_spec(self) -> XpubSpec:
        return self.spec

    def derive_compr(self, keychain: int, index: int) -> CompressedPk:
        if keychain not in self.keychains():
            raise InvalidIndex(f"Invalid keychain: {keychain}")
        index = NormalIndex(index)
        return CompressedPk(self.spec.xpub.get_pubkey_from_path([keychain, int(index)]))

    def derive_xonly(self, keychain: int, index: int) -> XOnlyPk:
        return self.derive_compr(keychain, index).to_xonly()

    def compr(self) -> XpubDerivable:
        return self

    def xonly(self) -> XpubDerivable:
        return self

    def __repr__(self) -> str:
        if len(self._keychains) == 1:
            keychains = f"{self._keychains[0]}"
        else:
            keychains = "<" + ";".join(str(k) for k in self._keychains) + ">"
        return f"{self.spec}/{keychains}/*"

    def __eq__(self, other) -> bool:
        if not isinstance(other, XpubDerivable):
            return NotImplemented
        return repr(self) == repr(other)

    def __hash__(self) -> int:
        return hash(repr(self))
