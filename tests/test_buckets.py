import pytest
from hypothesis import given, strategies as st

from snihash.buckets import (
    BKT_CAPACITY_THRESH,
    INITIAL_NUM_BUCKETS,
    Bucket,
    BucketArray,
    Entry,
    bucket_index,
)
from snihash.hashes import hash_jen


def test_bucket_index_masks_low_bits():
    assert bucket_index(INITIAL_NUM_BUCKETS + 3, INITIAL_NUM_BUCKETS) == 3
    assert bucket_index(0xFFFFFFFF, 1) == 0


@pytest.mark.parametrize("count", [0, -4, 3, 48])
def test_bucket_index_rejects_non_power_of_two(count):
    with pytest.raises(ValueError):
        bucket_index(7, count)


def test_new_array_is_empty():
    arr = BucketArray()
    assert len(arr) == 0
    assert arr.num_buckets == INITIAL_NUM_BUCKETS
    assert list(arr) == []


def test_add_and_find():
    arr = BucketArray()
    entry = Entry(b"example.com", hash_jen(b"example.com"), 1)
    arr.add(entry)
    assert arr.find(b"example.com", hash_jen(b"example.com")) is entry
    assert arr.find(b"other", hash_jen(b"other")) is None
    assert len(arr) == 1


def test_same_hash_different_keys_are_distinguished():
    arr = BucketArray()
    a = Entry(b"a", 5, "A")
    b = Entry(b"b", 5, "B")
    arr.add(a)
    arr.add(b)
    assert arr.find(b"a", 5) is a
    assert arr.find(b"b", 5) is b
    assert arr.find(b"a", 6) is None


def test_newest_entry_heads_the_chain():
    arr = BucketArray()
    first = Entry(b"x", 0)
    second = Entry(b"y", 0)
    arr.add(first)
    arr.add(second)
    assert arr.buckets[0].entries == [second, first]


def test_remove():
    arr = BucketArray()
    entry = Entry(b"k", 9)
    arr.add(entry)
    arr.remove(entry)
    assert len(arr) == 0
    assert arr.find(b"k", 9) is None


def test_remove_missing_raises():
    arr = BucketArray()
    arr.add(Entry(b"k", 9))
    with pytest.raises(ValueError):
        arr.remove(Entry(b"k", 9))
    assert len(arr) == 1


def test_expansion_splits_chain():
    arr = BucketArray()
    entries = [Entry(i, i * INITIAL_NUM_BUCKETS) for i in range(BKT_CAPACITY_THRESH)]
    for entry in entries[:-1]:
        arr.add(entry)
    assert arr.num_buckets == INITIAL_NUM_BUCKETS
    arr.add(entries[-1])
    assert arr.num_buckets == 2 * INITIAL_NUM_BUCKETS
    assert len(arr) == BKT_CAPACITY_THRESH
    for entry in entries:
        assert arr.find(entry.key, entry.hashv) is entry
    assert {e.key for e in arr} == {e.key for e in entries}
    assert all(b.count < BKT_CAPACITY_THRESH for b in arr.buckets)


def test_ineffective_expansions_stop_growth():
    arr = BucketArray()
    for i in range(BKT_CAPACITY_THRESH):
        arr.add(Entry(i, 0))
    assert arr.num_buckets == 2 * INITIAL_NUM_BUCKETS
    assert arr.ineff_expands == 1
    assert not arr.noexpand
    assert arr.buckets[0].expand_mult == BKT_CAPACITY_THRESH

    limit = (BKT_CAPACITY_THRESH + 1) * BKT_CAPACITY_THRESH
    for i in range(BKT_CAPACITY_THRESH, limit):
        arr.add(Entry(i, 0))
    assert arr.num_buckets == 4 * INITIAL_NUM_BUCKETS
    assert arr.noexpand

    for i in range(limit, limit * 3):
        arr.add(Entry(i, 0))
    assert arr.num_buckets == 4 * INITIAL_NUM_BUCKETS
    assert len(arr) == limit * 3
    assert arr.find(0, 0).key == 0


def test_bucket_overfull_threshold():
    bucket = Bucket([Entry(i, 0) for i in range(BKT_CAPACITY_THRESH)])
    assert bucket.is_overfull()
    bucket.expand_mult = 1
    assert not bucket.is_overfull()


@given(st.lists(st.binary(max_size=8), unique=True, max_size=200), st.data())
def test_add_remove_invariants(keys, data):
    arr = BucketArray()
    entries = {key: Entry(key, hash_jen(key)) for key in keys}
    for entry in entries.values():
        arr.add(entry)
    removed = data.draw(st.lists(st.sampled_from(keys), unique=True) if keys else st.just([]))
    for key in removed:
        arr.remove(entries[key])
    remaining = set(keys) - set(removed)
    assert len(arr) == len(remaining)
    assert {e.key for e in arr} == remaining
    for key in keys:
        found = arr.find(key, hash_jen(key))
        if key in remaining:
            assert found is entries[key]
        else:
            assert found is None
    n = arr.num_buckets
    assert n & (n - 1) == 0
    for idx, bucket in enumerate(arr.buckets):
        assert all(bucket_index(e.hashv, n) == idx for e in bucket.entries)