from typing import Dict, Generic, List, TypeVar

from coldstd.derivation import KeyOrigin, NormalIndex, TapDerivation, Terminal
from coldstd.key import (
    CompressedPk,
    DeriveCompr,
    DeriveSet,
    DeriveXOnly,
    XOnlyPk,
    XpubDerivable,
    XpubSpec,
)
from coldstd.utils.hashes import hash160
from coldstd.utils.script import p2wpkh

from .checksum import descsum_create
from .derived import Bare, DerivedScript, TaprootKeyOnly
from .errors import DescriptorParsingError
from .parsing import descriptor_from_str


K = TypeVar("K", bound=DeriveCompr)
X = TypeVar("X", bound=DeriveXOnly)
S = TypeVar("S", bound=DeriveSet)
# The key type of any descriptor, and the type of its auxiliary variables.
T = TypeVar("T")
V = TypeVar("V")


class Descriptor(Generic[T, V]):
    """A Bitcoin Output Script Descriptor.

    This is what the signing layer relies upon: it does not need to know which script
    template it is dealing with to derive scripts and to get the origin of the keys.
    It is generic over the key type T, usually XpubDerivable, and over the type V of
    the auxiliary variables. Descriptors don't have any variable yet, so V is always
    None and vars() is always empty.
    """

    @staticmethod
    def from_str(desc_str, strict=False):
        """Parse a Bitcoin Output Script Descriptor from its string representation.

        :param strict: whether to require the presence of a checksum.
        """
        return descriptor_from_str(desc_str, strict)

    def keychains(self) -> range:
        """The keychains this descriptor may be derived at."""
        # To be implemented by derived classes
        raise NotImplementedError

    def derive(self, keychain: int, index: int) -> DerivedScript:
        """Derive the script at this keychain and normal index."""
        # To be implemented by derived classes
        raise NotImplementedError

    def script_pubkey(self, keychain: int, index: int) -> bytes:
        """Get the ScriptPubKey (output 'locking' Script) at this keychain and index."""
        return self.derive(keychain, index).script_pubkey()

    def keys(self) -> List[T]:
        """Get the list of all keys from this descriptor, in order of apparition."""
        # To be implemented by derived classes
        raise NotImplementedError

    def vars(self) -> List[V]:
        return []

    def xpubs(self) -> List[XpubSpec]:
        """Get the extended keys of this descriptor along with their origin."""
        # To be implemented by derived classes
        raise NotImplementedError

    def compr_keyset(self, terminal: Terminal) -> Dict[CompressedPk, KeyOrigin]:
        """The compressed keys at this terminal along with their origin."""
        # To be implemented by derived classes
        raise NotImplementedError

    def xonly_keyset(self, terminal: Terminal) -> Dict[XOnlyPk, TapDerivation]:
        """The x-only keys at this terminal along with their Taproot derivation."""
        # To be implemented by derived classes
        raise NotImplementedError


class Wpkh(Descriptor[K, None]):
    """A Segwit v0 P2WPKH Output Script Descriptor."""

    def __init__(self, key: K):
        assert isinstance(key, DeriveCompr)
        self.key = key

    def __repr__(self):
        return descsum_create(f"wpkh({self.key})")

    def __eq__(self, other):
        if not isinstance(other, Wpkh):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash((Wpkh, self.key))

    def as_key(self) -> K:
        return self.key

    def keychains(self) -> range:
        return self.key.keychains()

    def derive(self, keychain: int, index: int) -> Bare:
        key = self.key.derive_compr(keychain, NormalIndex(index))
        return Bare(p2wpkh(hash160(key)))

    def keys(self) -> List[K]:
        return [self.key]

    def xpubs(self) -> List[XpubSpec]:
        return [self.key.xpub_spec()]

    def compr_keyset(self, terminal: Terminal) -> Dict[CompressedPk, KeyOrigin]:
        assert isinstance(terminal, Terminal)
        key = self.key.derive_compr(terminal.keychain, terminal.index)
        return {key: KeyOrigin(self.key.xpub_spec().origin, terminal)}

    def xonly_keyset(self, terminal: Terminal) -> Dict[XOnlyPk, TapDerivation]:
        return {}


class TrKey(Descriptor[X, None]):
    """A Pay-to-Taproot Output Script Descriptor, with no script path."""

    def __init__(self, internal_key: X):
        assert isinstance(internal_key, DeriveXOnly)
        self.internal_key = internal_key

    def __repr__(self):
        return descsum_create(f"tr({self.internal_key})")

    def __eq__(self, other):
        if not isinstance(other, TrKey):
            return NotImplemented
        return self.internal_key == other.internal_key

    def __hash__(self):
        return hash((TrKey, self.internal_key))

    def as_internal_key(self) -> X:
        return self.internal_key

    def keychains(self) -> range:
        return self.internal_key.keychains()

    def derive(self, keychain: int, index: int) -> TaprootKeyOnly:
        internal_key = self.internal_key.derive_xonly(keychain, NormalIndex(index))
        return TaprootKeyOnly(internal_key)

    def keys(self) -> List[X]:
        return [self.internal_key]

    def xpubs(self) -> List[XpubSpec]:
        return [self.internal_key.xpub_spec()]

    def compr_keyset(self, terminal: Terminal) -> Dict[CompressedPk, KeyOrigin]:
        return {}

    def xonly_keyset(self, terminal: Terminal) -> Dict[XOnlyPk, TapDerivation]:
        assert isinstance(terminal, Terminal)
        key = self.internal_key.derive_xonly(terminal.keychain, terminal.index)
        origin = self.internal_key.xpub_spec().origin
        return {key: TapDerivation.with_internal_pk(origin, terminal)}


class DescriptorStd(Descriptor[S, None]):
    """One of the standard single-key descriptors: either a Wpkh or a TrKey.

    Only these two templates may be wrapped, every operation is forwarded to the wrapped
    descriptor.
    """

    def __init__(self, inner):
        assert isinstance(inner, (Wpkh, TrKey))
        self.inner = inner

    @classmethod
    def wpkh(cls, key_set: S):
        assert isinstance(key_set, DeriveSet)
        return cls(Wpkh(key_set.compr()))

    @classmethod
    def tr_key(cls, key_set: S):
        assert isinstance(key_set, DeriveSet)
        return cls(TrKey(key_set.xonly()))

    @staticmethod
    def from_str(desc_str, strict=False):
        """Parse a 'wpkh()' or 'tr()' descriptor.

        :param strict: whether to require the presence of a checksum.
        """
        return DescriptorStd(descriptor_from_str(desc_str, strict))

    def __repr__(self):
        return repr(self.inner)

    def __eq__(self, other):
        if not isinstance(other, DescriptorStd):
            return NotImplemented
        return self.inner == other.inner

    def __hash__(self):
        return hash((DescriptorStd, self.inner))

    def is_wpkh(self) -> bool:
        return isinstance(self.inner, Wpkh)

    def is_tr_key(self) -> bool:
        return isinstance(self.inner, TrKey)

    def keychains(self) -> range:
        return self.inner.keychains()

    def derive(self, keychain: int, index: int) -> DerivedScript:
        return self.inner.derive(keychain, index)

    def keys(self) -> list:
        return list(self.inner.keys())

    def xpubs(self) -> List[XpubSpec]:
        return list(self.inner.xpubs())

    def compr_keyset(self, terminal: Terminal) -> Dict[CompressedPk, KeyOrigin]:
        return self.inner.compr_keyset(terminal)

    def xonly_keyset(self, terminal: Terminal) -> Dict[XOnlyPk, TapDerivation]:
        return self.inner.xonly_keyset(terminal)


__all__ = [
    "Bare",
    "Descriptor",
    "DescriptorParsingError",
    "DescriptorStd",
    "DerivedScript",
    "TaprootKeyOnly",
    "TrKey",
    "Wpkh",
    "XpubDerivable",
]
