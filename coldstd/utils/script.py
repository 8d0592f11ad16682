"""
The few Bitcoin Script pieces needed to build standard output scripts.
"""

OP_0 = 0x00
OP_1 = 0x51


def push_data(data: bytes) -> bytes:
    """Direct push of up to 75 bytes, the only pushes standard outputs use."""
    assert isinstance(data, bytes) and len(data) <= 75
    return bytes([len(data)]) + data


def witness_program(version: int, program: bytes) -> bytes:
    """The scriptPubKey of a native segwit output."""
    assert 0 <= version <= 16
    assert 2 <= len(program) <= 40
    version_op = OP_0 if version == 0 else OP_1 + version - 1
    return bytes([version_op]) + push_data(program)


def p2wpkh(pubkey_hash: bytes) -> bytes:
    """OP_0 <20-byte key hash>"""
    assert len(pubkey_hash) == 20
    return witness_program(0, pubkey_hash)


def p2tr(output_key: bytes) -> bytes:
    """OP_1 <32-byte x-only output key>"""
    assert len(output_key) == 32
    return witness_program(1, output_key)
