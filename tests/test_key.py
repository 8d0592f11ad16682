import pytest

from bip32 import BIP32, HARDENED_INDEX
from coldstd.derivation import (
    InvalidIndex,
    KeyOrigin,
    NormalIndex,
    Terminal,
    XkeyOrigin,
)
from coldstd.key import (
    CompressedPk,
    DescriptorKeyError,
    XOnlyPk,
    XpubDerivable,
    XpubSpec,
    origin_from_str,
)
from coldstd.utils.hashes import hash160


XPUB = "xpub6BgBgsespWvERF3LHQu6CnqdvfEvtMcQjYrcRzx53QJjSxarj2afYWcLteoGVky7D3UKDP9QyrLprQ3VCECoY49yfdDEHGCtMMj92pReUsQ"
H = HARDENED_INDEX


def test_normal_index():
    assert NormalIndex(0) == 0
    assert NormalIndex(H - 1) == H - 1
    assert NormalIndex(NormalIndex(5)) == 5
    for index in [H, H + 1, 2 ** 32, -1]:
        with pytest.raises(InvalidIndex, match="not a normal index"):
            NormalIndex(index)
    for index in ["1", 1.0, True, None]:
        with pytest.raises(InvalidIndex, match="must be an int"):
            NormalIndex(index)


def test_terminal():
    terminal = Terminal(1, 42)
    assert isinstance(terminal.index, NormalIndex)
    assert terminal == (1, 42)
    assert terminal.keychain == 1 and terminal.index == 42
    assert str(terminal) == "1/42"
    assert Terminal(0, 3) < Terminal(1, 0)
    assert len({Terminal(0, 1), Terminal(0, 1), Terminal(1, 1)}) == 2
    with pytest.raises(InvalidIndex, match="Invalid keychain"):
        Terminal(-1, 0)
    with pytest.raises(InvalidIndex, match="must be an int"):
        Terminal("0", 0)


def test_origin_parsing():
    origin = origin_from_str("[aabbccdd]")
    assert origin.fingerprint == bytes.fromhex("aabbccdd") and origin.path == ()
    origin = origin_from_str("[00aabbcc/108765H/578h/9897'/23]")
    assert origin.path == (H + 108765, H + 578, H + 9897, 23)
    assert str(origin) == "[00aabbcc/108765h/578h/9897h/23]"
    assert origin == XkeyOrigin(bytes.fromhex("00aabbcc"), [H + 108765, H + 578, H + 9897, 23])

    for origin_str in ["aabbccdd", "[aabbcc]", "[aabbccxx]", "[aabbccdd0]", "[aabbccdd/0//]"]:
        with pytest.raises(DescriptorKeyError, match="Insane"):
            origin_from_str(origin_str)


def test_key_origin_derivation():
    xkey_origin = XkeyOrigin(bytes.fromhex("73c5da0a"), [86 + H, H, H])
    origin = KeyOrigin(xkey_origin, Terminal(1, 7))
    assert origin.fingerprint == bytes.fromhex("73c5da0a")
    assert origin.derivation() == [86 + H, H, H, 1, 7]
    assert str(origin) == "[73c5da0a/86h/0h/0h/1/7]"
    origin.derivation().append(5)
    # The extended key origin is left untouched.
    assert xkey_origin.path == (86 + H, H, H)


def test_pubkeys():
    raw = bytes.fromhex("02e20e746af365e86647826397ba1c0e0d5cb685752976fe2f326ab76bdc4d6ee9")
    pubkey = CompressedPk(raw)
    assert pubkey == raw
    assert pubkey.to_xonly() == raw[1:]
    assert isinstance(pubkey.to_xonly(), XOnlyPk)
    assert {pubkey: 1}[raw] == 1

    with pytest.raises(DescriptorKeyError, match="Only compressed keys"):
        CompressedPk(b"\x04" + raw[1:])
    with pytest.raises(DescriptorKeyError, match="Only compressed keys"):
        CompressedPk(raw[1:])
    with pytest.raises(DescriptorKeyError, match="X-only keys must be 32 bytes"):
        XOnlyPk(raw)
    # Not on the curve
    with pytest.raises(DescriptorKeyError, match="parsing error"):
        XOnlyPk(b"\x00" * 32)


def test_xpub_spec():
    spec = XpubSpec.from_str(f"[73c5da0a/86h/0h/0h]{XPUB}")
    assert spec.origin == XkeyOrigin(bytes.fromhex("73c5da0a"), [86 + H, H, H])
    assert spec.xpub.get_xpub() == XPUB
    assert str(spec) == f"[73c5da0a/86h/0h/0h]{XPUB}"

    # Without origin, the xpub is its own master.
    spec = XpubSpec.from_str(XPUB)
    assert spec.origin.fingerprint == hash160(BIP32.from_xpub(XPUB).pubkey)[:4]
    assert spec.origin.path == ()

    # Private keys are never kept.
    hd = BIP32.from_seed(bytes(32))
    spec = XpubSpec(hd)
    assert spec.xpub.privkey is None
    assert spec.xpub.get_xpub() == hd.get_xpub()

    with pytest.raises(DescriptorKeyError, match="Xpub parsing error"):
        XpubSpec.from_str(XPUB[:-1])


def test_xpub_derivable():
    key = XpubDerivable.from_str(f"[73c5da0a/86h/0h/0h]{XPUB}/<0;1>/*")
    assert key.keychains() == range(0, 2)
    assert key.compr() is key and key.xonly() is key
    assert str(key) == f"[73c5da0a/86h/0h/0h]{XPUB}/<0;1>/*"
    assert key == XpubDerivable(XpubSpec.from_str(f"[73c5da0a/86h/0h/0h]{XPUB}"))

    xpub = BIP32.from_xpub(XPUB)
    compr = key.derive_compr(1, 9)
    assert compr == xpub.get_pubkey_from_path("m/1/9")
    assert key.derive_xonly(1, 9) == compr[1:]

    key = XpubDerivable.from_str(f"{XPUB}/<2;3;4>/*")
    assert key.keychains() == range(2, 5)
    assert str(key).endswith("/<2;3;4>/*")
    key = XpubDerivable.from_str(f"{XPUB}/7/*")
    assert key.keychains() == range(7, 8)
    assert str(key) == f"{key.spec}/7/*"
    with pytest.raises(InvalidIndex, match="Invalid keychain"):
        key.derive_compr(0, 0)
    with pytest.raises(InvalidIndex, match="Invalid keychain"):
        key.derive_xonly(8, 0)
    with pytest.raises(InvalidIndex):
        key.derive_compr(7, H)

    for key_str, err in [
        (f"{XPUB}/<0;2>/*", "consecutive"),
        (f"{XPUB}/<1;0>/*", "consecutive"),
        (f"{XPUB}/<0;0>/*", "consecutive"),
        (f"{XPUB}/<0>/*", "Insane multipath"),
        (f"{XPUB}/<0;1h>/*", "Invalid keychain"),
        (f"{XPUB}/<0;256>/*", "Invalid keychains"),
        (f"{XPUB}/0/1/*", "Invalid keychain"),
        (f"{XPUB}/0/*'", "Hardened wildcard"),
        (f"{XPUB}/0/*H", "Hardened wildcard"),
        (f"{XPUB}/0", "unhardened wildcard"),
        (f"[73c5da0a/86h/0h/0h]{XPUB}", "Missing derivation steps"),
    ]:
        with pytest.raises(DescriptorKeyError, match=err):
            XpubDerivable.from_str(key_str)
