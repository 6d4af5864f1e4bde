# snihash

A small library with no dependencies. It has two parts:

* **SNI extraction** (`snihash.tls`): reads the server name from a TLS
  ClientHello. A proxy can use it to find the target host before it forwards
  a connection.
* **Hashing and an ordered hash table** (`snihash.hashes`, `snihash.buckets`,
  `snihash.table`): classic 32-bit string hash functions, a chained bucket
  array that doubles its bucket count as chains fill, and a hash table that
  keeps its entries in application order.

## Installation

```
pip install .
```

To run the tests, install the test extra and run pytest:

```
pip install ".[test]"
pytest
```

## Extracting the server name

```python
from snihash.tls import (
    parse_tls_header,
    IncompleteRequestError,
    NoHostnameError,
    InvalidClientHelloError,
)

try:
    hostname = parse_tls_header(first_bytes_from_client)
except IncompleteRequestError:
    ...  # fewer than 5 bytes, or the TLS record is not complete yet
except NoHostnameError:
    ...  # no server name: SSL 2.0, SSL 3.0 without extensions, no server_name entry
except InvalidClientHelloError:
    ...  # not a TLS handshake record, not a ClientHello, or malformed
```

All three exceptions derive from `TlsParseError`, which is a `ValueError`.
The name that is returned is the first `host_name` entry of the
`server_name` extension, decoded as Latin-1 and cut at the first NUL byte.
Bytes after the end of the first TLS record are ignored.

The lower-level functions `parse_extensions` (takes the raw extensions
block) and `parse_server_name_extension` (takes the raw body of the
`server_name` extension) raise the same exceptions.

`Protocol` is a frozen dataclass with a `default_port` and a `parse_packet`
callable. `TLS_PROTOCOL` is the instance for TLS: port 443 with
`parse_tls_header` as its parser.

The parser logs why it rejected a packet at DEBUG level on the
`snihash.tls` logger.

## Hash functions

```python
from snihash.hashes import hash_jen, hash_fnv, hash_mur

hash_jen(b"example.com")   # unsigned 32-bit int
hash_fnv("example.com")    # str keys are hashed as their UTF-8 bytes
```

The module has `hash_ber` (Bernstein), `hash_sax` (shift-add-xor),
`hash_fnv` (FNV-1a), `hash_oat` (one-at-a-time), `hash_jen` (Jenkins
lookup2), `hash_sfh` (Hsieh SuperFastHash) and `hash_mur` (32-bit
MurmurHash3 with a fixed seed). Each one takes `bytes`, `bytearray`,
`memoryview` or `str` and returns an unsigned 32-bit integer. Any other
type raises `TypeError`. Multi-byte words are read little-endian.
`HASH_FUNCTIONS` maps short names (`"ber"`, `"jen"`, ...) to the functions,
and `DEFAULT_HASH` is `hash_jen`.

## Hash table

```python
from snihash.hashes import hash_jen
from snihash.table import HashTable

table = HashTable(hash_jen)            # hash_jen is also the default
table.add(b"b.example.com", 2)
table.add(b"a.example.com", 1)

table.find(b"a.example.com").value    # 1  (find returns an Entry or None)
b"b.example.com" in table             # True
list(table)                           # keys in application order
list(table.items())                   # (key, value) pairs in application order

table.sort(lambda x, y: (x.key > y.key) - (x.key < y.key))
table.delete(b"a.example.com")        # returns the Entry; KeyError if absent
```

Comparison functions receive two `Entry` objects (`key`, `hashv`, `value`)
and return a negative number, zero or a positive number.

* `add(key, value)` appends a new entry and does not check whether the key
  is already present. It returns the new `Entry`.
* `add_inorder(key, value, cmp)` inserts the new entry before the first
  existing entry that `cmp(existing, new)` ranks above it.
* `replace(key, value)` and `replace_inorder(key, value, cmp)` remove any
  entry for the key, add the new one, and return the removed entry or
  `None`.
* `sort(cmp)` reorders the entries stably.
* `select(cond)` returns a new `HashTable` with the same hash function. It
  holds the same `Entry` objects for which `cond(entry)` is true, taken in
  bucket order.
* `clear()` drops every entry and goes back to the initial 32 buckets.
* `entries()` yields the `Entry` objects in application order.
* `num_buckets` gives the current bucket count. `expansion_inhibited` is
  true once bucket growth has stopped because it did not help.

### Buckets

`snihash.buckets` can also be used on its own. `BucketArray` starts with 32
`Bucket` chains. `add(entry)` puts an `Entry` at the head of its chain, and
`remove(entry)` takes it out by identity (`ValueError` if it is not there).
`find(key, hashv)` returns the matching entry or `None`. Iterating yields
the entries in bucket order, and `len()` gives the entry count. When a chain
reaches `(expand_mult + 1) * 10` entries, the bucket count doubles. If two
expansions in a row leave more than half of the entries in over-long
chains, expansion stops for good. `bucket_index(hashv, num_buckets)` maps a
hash to a bucket and raises `ValueError` unless the bucket count is a power
of two.

## What this package does not do

It is a library only. It opens no sockets, runs no proxy or server, forwards
no traffic, and installs no command. To use the server name, a caller reads
the first bytes of a connection, passes them to `parse_tls_header`, and then
routes the connection itself.