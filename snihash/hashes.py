"""32-bit key hash functions used to place entries in hash buckets.

Every function takes a bytes-like key (a ``str`` is hashed as its UTF-8
encoding) and returns an unsigned 32-bit integer.  Multi-byte words are
read little-endian.
"""

from __future__ import annotations

import struct
from typing import Callable, Union

__all__ = [
    "Key",
    "HashFunction",
    "hash_ber",
    "hash_sax",
    "hash_fnv",
    "hash_oat",
    "hash_jen",
    "hash_sfh",
    "hash_mur",
    "HASH_FUNCTIONS",
    "DEFAULT_HASH",
]

Key = Union[bytes, bytearray, memoryview, str]
HashFunction = Callable[[Key], int]

_MASK = 0xFFFFFFFF

_FNV_OFFSET_BASIS = 2166136261
_FNV_PRIME = 16777619

_JEN_GOLDEN = 0x9E3779B9
_JEN_INIT = 0xFEEDBEEF

_SFH_INIT = 0xCAFEBABE

_MUR_SEED = 0xF88D5353
_MUR_C1 = 0xCC9E2D51
_MUR_C2 = 0x1B873593


def _as_bytes(key: Key) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8")
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key)
    raise TypeError(f"hash key must be bytes-like or str, not {type(key).__name__}")


def hash_ber(key: Key) -> int:
    """Bernstein hash: ``h = h * 33 + byte``."""
    hashv = 0
    for byte in _as_bytes(key):
        hashv = (hashv * 33 + byte) & _MASK
    return hashv


def hash_sax(key: Key) -> int:
    """Shift-add-xor hash."""
    hashv = 0
    for byte in _as_bytes(key):
        hashv ^= ((hashv << 5) + (hashv >> 2) + byte) & _MASK
    return hashv


def hash_fnv(key: Key) -> int:
    """FNV-1a hash."""
    hashv = _FNV_OFFSET_BASIS
    for byte in _as_bytes(key):
        hashv = ((hashv ^ byte) * _FNV_PRIME) & _MASK
    return hashv


def hash_oat(key: Key) -> int:
    """Jenkins one-at-a-time hash."""
    hashv = 0
    for byte in _as_bytes(key):
        hashv = (hashv + byte) & _MASK
        hashv = (hashv + (hashv << 10)) & _MASK
        hashv ^= hashv >> 6
    hashv = (hashv + (hashv << 3)) & _MASK
    hashv ^= hashv >> 11
    hashv = (hashv + (hashv << 15)) & _MASK
    return hashv


def _jen_mix(a: int, b: int, c: int) -> tuple[int, int, int]:
    a = (a - b - c) & _MASK
    a ^= c >> 13
    b = (b - c - a) & _MASK
    b ^= (a << 8) & _MASK
    c = (c - a - b) & _MASK
    c ^= b >> 13
    a = (a - b - c) & _MASK
    a ^= c >> 12
    b = (b - c - a) & _MASK
    b ^= (a << 16) & _MASK
    c = (c - a - b) & _MASK
    c ^= b >> 5
    a = (a - b - c) & _MASK
    a ^= c >> 3
    b = (b - c - a) & _MASK
    b ^= (a << 10) & _MASK
    c = (c - a - b) & _MASK
    c ^= b >> 15
    return a, b, c


def hash_jen(key: Key) -> int:
    """Bob Jenkins' lookup2 hash; the default bucket hash."""
    data = _as_bytes(key)
    length = len(data)
    a = b = _JEN_GOLDEN
    c = _JEN_INIT

    full = length - length % 12
    for wa, wb, wc in struct.iter_unpack("<III", data[:full]):
        a = (a + wa) & _MASK
        b = (b + wb) & _MASK
        c = (c + wc) & _MASK
        a, b, c = _jen_mix(a, b, c)

    tail = data[full:]
    c = (c + length) & _MASK
    # The low byte of c is taken by the length, so its tail bytes start at bit 8.
    c = (c + (int.from_bytes(tail[8:11], "little") << 8)) & _MASK
    b = (b + int.from_bytes(tail[4:8], "little")) & _MASK
    a = (a + int.from_bytes(tail[0:4], "little")) & _MASK
    _, _, c = _jen_mix(a, b, c)
    return c


def hash_sfh(key: Key) -> int:
    """Paul Hsieh's SuperFastHash."""
    data = _as_bytes(key)
    remainder = len(data) & 3
    full = len(data) - remainder
    hashv = _SFH_INIT

    for low, high in struct.iter_unpack("<HH", data[:full]):
        hashv = (hashv + low) & _MASK
        tmp = ((high << 11) & _MASK) ^ hashv
        hashv = ((hashv << 16) & _MASK) ^ tmp
        hashv = (hashv + (hashv >> 11)) & _MASK

    tail = data[full:]
    if remainder == 3:
        hashv = (hashv + int.from_bytes(tail[0:2], "little")) & _MASK
        hashv ^= (hashv << 16) & _MASK
        hashv ^= (tail[2] << 18) & _MASK
        hashv = (hashv + (hashv >> 11)) & _MASK
    elif remainder == 2:
        hashv = (hashv + int.from_bytes(tail[0:2], "little")) & _MASK
        hashv ^= (hashv << 11) & _MASK
        hashv = (hashv + (hashv >> 17)) & _MASK
    elif remainder == 1:
        hashv = (hashv + tail[0]) & _MASK
        hashv ^= (hashv << 10) & _MASK
        hashv = (hashv + (hashv >> 1)) & _MASK

    hashv ^= (hashv << 3) & _MASK
    hashv = (hashv + (hashv >> 5)) & _MASK
    hashv ^= (hashv << 4) & _MASK
    hashv = (hashv + (hashv >> 17)) & _MASK
    hashv ^= (hashv << 25) & _MASK
    hashv = (hashv + (hashv >> 6)) & _MASK
    return hashv


def _rotl32(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (32 - shift))) & _MASK


def _mur_scramble(k1: int) -> int:
    k1 = (k1 * _MUR_C1) & _MASK
    k1 = _rotl32(k1, 15)
    return (k1 * _MUR_C2) & _MASK


def _mur_fmix(h: int) -> int:
    h ^= h >> 16
    h = (h * 0x85EBCA6B) & _MASK
    h ^= h >> 13
    h = (h * 0xC2B2AE35) & _MASK
    h ^= h >> 16
    return h


def hash_mur(key: Key) -> int:
    """MurmurHash3 (32-bit) with a fixed seed."""
    data = _as_bytes(key)
    length = len(data)
    remainder = length & 3
    full = length - remainder
    h1 = _MUR_SEED

    for (block,) in struct.iter_unpack("<I", data[:full]):
        h1 ^= _mur_scramble(block)
        h1 = _rotl32(h1, 13)
        h1 = (h1 * 5 + 0xE6546B64) & _MASK

    if remainder:
        h1 ^= _mur_scramble(int.from_bytes(data[full:], "little"))

    h1 ^= length & _MASK
    return _mur_fmix(h1)


HASH_FUNCTIONS: dict[str, HashFunction] = {
    "ber": hash_ber,
    "sax": hash_sax,
    "fnv": hash_fnv,
    "oat": hash_oat,
    "jen": hash_jen,
    "sfh": hash_sfh,
    "mur": hash_mur,
}

DEFAULT_HASH: HashFunction = hash_jen