"""TLS ClientHello server-name extraction, 32-bit string hashes and an ordered hash table."""

__version__ = "0.1.0"
__all__ = ["buckets", "hashes", "table", "tls"]