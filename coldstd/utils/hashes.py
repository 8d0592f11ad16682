"""
Common Bitcoin hashes.
"""

import hashlib


def sha256(data: bytes) -> bytes:
    """{data} must be bytes, returns sha256(data)"""
    assert isinstance(data, bytes)
    return hashlib.sha256(data).digest()


def hash160(data: bytes) -> bytes:
    """{data} must be bytes, returns ripemd160(sha256(data))"""
    assert isinstance(data, bytes)
    return hashlib.new("ripemd160", sha256(data)).digest()


def tagged_hash(tag: str, data: bytes) -> bytes:
    """BIP340 tagged hash: sha256(sha256(tag) || sha256(tag) || data)."""
    tag_hash = sha256(tag.encode("utf-8"))
    return sha256(tag_hash + tag_hash + data)
