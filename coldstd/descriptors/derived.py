"""
The result of deriving a descriptor at a given leaf.

Exactly two forms exist: a Bare script for templates whose output is a standard script,
and a TaprootKeyOnly internal key for Taproot outputs without a script path.
"""

from coldstd.key import XOnlyPk
from coldstd.utils.script import p2tr

from .utils import taproot_tweak


class DerivedScript:
    """A script derived from a descriptor."""

    def script_pubkey(self) -> bytes:
        """Get the ScriptPubKey (output 'locking' Script) for this derived script."""
        # To be implemented by derived classes
        raise NotImplementedError


class Bare(DerivedScript):
    """A standard output script, used as is."""

    def __init__(self, script: bytes):
        assert isinstance(script, bytes)
        self.script = script

    def script_pubkey(self) -> bytes:
        return self.script

    def __repr__(self):
        return f"Bare({self.script.hex()})"

    def __eq__(self, other):
        if not isinstance(other, Bare):
            return NotImplemented
        return self.script == other.script

    def __hash__(self):
        return hash((Bare, self.script))


class TaprootKeyOnly(DerivedScript):
    """A Taproot output committing to an internal key and no script path."""

    def __init__(self, internal_key: XOnlyPk):
        assert isinstance(internal_key, XOnlyPk)
        self.internal_key = internal_key

    def output_key(self) -> bytes:
        """The tweaked key which goes in the output, see BIP86."""
        return taproot_tweak(bytes(self.internal_key)).format()

    def script_pubkey(self) -> bytes:
        return p2tr(self.output_key())

    def __repr__(self):
        return f"TaprootKeyOnly({self.internal_key.hex()})"

    def __eq__(self, other):
        if not isinstance(other, TaprootKeyOnly):
            return NotImplemented
        return self.internal_key == other.internal_key

    def __hash__(self):
        return hash((TaprootKeyOnly, self.internal_key))
