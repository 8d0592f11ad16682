"""
Derivation paths, leaves and the origin metadata a signer needs to find a key.
"""

from __future__ import annotations

from collections import namedtuple
from enum import Enum, auto
from typing import List, Sequence, Tuple

from bip32 import HARDENED_INDEX


class InvalidIndex(ValueError):
    def __init__(self, message: str):
        self.message: str = message


class NormalIndex(int):
    """A non-hardened BIP32 child index, in [0, 2**31).

    Deriving without the private key must never reach a hardened index, so this is
    the only index type the public derivation API accepts.
    """

    def __new__(cls, index: int) -> NormalIndex:
        if isinstance(index, NormalIndex):
            return index
        if not isinstance(index, int) or isinstance(index, bool):
            raise InvalidIndex(f"Derivation index must be an int, not '{index!r}'")
        if not 0 <= index < HARDENED_INDEX:
            raise InvalidIndex(f"Invalid derivation index: {index} is not a normal index")
        return super().__new__(cls, index)

    def __repr__(self) -> str:
        return f"NormalIndex({int(self)})"


class Terminal(namedtuple("Terminal", ["keychain", "index"])):
    """One derivation leaf under a descriptor: a keychain and an index within it.

    The index is always stored as a NormalIndex.
    """

    __slots__ = ()

    def __new__(cls, keychain: int, index: int) -> Terminal:
        if not isinstance(keychain, int) or isinstance(keychain, bool):
            raise InvalidIndex(f"Keychain must be an int, not '{keychain!r}'")
        if not 0 <= keychain <= 0xFF:
            raise InvalidIndex(f"Invalid keychain: {keychain}")
        return super().__new__(cls, keychain, NormalIndex(index))

    def __str__(self) -> str:
        return f"{self.keychain}/{self.index}"


def path_to_str(path: Sequence[int]) -> str:
    """Serialize a list of child numbers as '/0h/1/2h' (leading slash included)."""
    res = ""
    for i in path:
        if i < HARDENED_INDEX:
            res += f"/{i}"
        else:
            res += f"/{i - HARDENED_INDEX}h"
    return res


class XkeyOrigin:
    """Where an extended key comes from: the master fingerprint and the path from the
    master key.

    See https://github.com/bitcoin/bips/blob/master/bip-0380.mediawiki#key-expressions.
    """

    def __init__(self, fingerprint: bytes, path: Sequence[int]):
        assert isinstance(fingerprint, bytes) and len(fingerprint) == 4
        assert isinstance(path, (list, tuple)) and all(0 <= i < 2 ** 32 for i in path)

        self.fingerprint: bytes = fingerprint
        # Immutable, shared by every KeyOrigin derived from this key.
        self.path: Tuple[int, ...] = tuple(path)

    def __repr__(self) -> str:
        return f"[{self.fingerprint.hex()}{path_to_str(self.path)}]"

    def __eq__(self, other) -> bool:
        if not isinstance(other, XkeyOrigin):
            return NotImplemented
        return self.fingerprint == other.fingerprint and self.path == other.path

    def __hash__(self) -> int:
        return hash((self.fingerprint, self.path))


class KeyOrigin:
    """The origin of a single derived public key: the extended key it comes from and the
    leaf it was derived at."""

    def __init__(self, origin: XkeyOrigin, terminal: Terminal):
        assert isinstance(origin, XkeyOrigin) and isinstance(terminal, Terminal)
        self.origin: XkeyOrigin = origin
        self.terminal: Terminal = terminal

    @property
    def fingerprint(self) -> bytes:
        return self.origin.fingerprint

    def derivation(self) -> List[int]:
        """The full path from the master key, as it goes in a PSBT BIP32 derivation field."""
        return list(self.origin.path) + [self.terminal.keychain, int(self.terminal.index)]

    def __repr__(self) -> str:
        return f"[{self.fingerprint.hex()}{path_to_str(self.derivation())}]"

    def __eq__(self, other) -> bool:
        if not isinstance(other, KeyOrigin):
            return NotImplemented
        return self.origin == other.origin and self.terminal == other.terminal

    def __hash__(self) -> int:
        return hash((self.origin, self.terminal))


class TapKeyRole(Enum):
    # Only the internal key for now. Leaf keys would come with script-path spending.
    INTERNAL = auto()


class TapDerivation:
    """The Taproot flavour of a KeyOrigin, with the hashes of the leaves the key is used in.

    An empty list of leaf hashes means the key is the internal key.
    """

    def __init__(self, leaf_hashes: List[bytes], origin: KeyOrigin):
        assert isinstance(leaf_hashes, list) and isinstance(origin, KeyOrigin)
        self.leaf_hashes: List[bytes] = leaf_hashes
        self.origin: KeyOrigin = origin

    @classmethod
    def with_internal_pk(cls, xpub_origin: XkeyOrigin, terminal: Terminal) -> TapDerivation:
        return cls([], KeyOrigin(xpub_origin, terminal))

    @property
    def role(self) -> TapKeyRole:
        assert not self.leaf_hashes, "Script path keys are not supported"
        return TapKeyRole.INTERNAL

    def is_internal_pk(self) -> bool:
        return len(self.leaf_hashes) == 0

    def __repr__(self) -> str:
        return f"TapDerivation({self.role.name.lower()}, {self.origin})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, TapDerivation):
            return NotImplemented
        return self.leaf_hashes == other.leaf_hashes and self.origin == other.origin

    def __hash__(self) -> int:
        return hash((tuple(self.leaf_hashes), self.origin))
