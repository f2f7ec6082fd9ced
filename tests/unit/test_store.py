"""
Unit tests for intermediate store backends
"""

import json
import os
from unittest.mock import patch

import pytest

from mrwordfreq.common.store import (
    MemoryStore, DiskStore, encode_table, decode_table, discover_records, create_store
)
from mrwordfreq.config import JobConfig
from mrwordfreq.errors import SerializationError


@pytest.fixture(params=['memory', 'disk'])
def store(request, temp_dir):
    if request.param == 'memory':
        return MemoryStore()
    return DiskStore(os.path.join(temp_dir, 'intermediate'), 'job-test')


class TestStoreContract:
    """Behaviour shared by every backend"""

    def test_put_then_get(self, store):
        store.put(0, {'cat': 1, 'sat': 2})
        assert store.get(0) == {'cat': 1, 'sat': 2}

    def test_get_returns_independent_copies(self, store):
        store.put(3, {'a': 1})
        first = store.get(3)
        first['a'] = 99
        assert store.get(3) == {'a': 1}

    def test_put_returns_encoded_size(self, store):
        size = store.put(1, {'word': 5})
        assert size == len(encode_table(1, {'word': 5}))
        assert store.size_bytes() == size

    def test_missing_key_is_serialization_error(self, store):
        with pytest.raises(SerializationError) as exc_info:
            store.get(7)
        assert exc_info.value.index == 7

    def test_second_write_to_same_partition_rejected(self, store):
        store.put(0, {'a': 1})
        with pytest.raises(ValueError):
            store.put(0, {'b': 1})

    def test_keys_delete_and_clear(self, store):
        for i in (2, 0, 1):
            store.put(i, {'w': i})
        assert store.keys() == [0, 1, 2]
        assert 1 in store

        assert store.delete(1) is True
        assert store.delete(1) is False
        assert 1 not in store

        assert store.clear() == 2
        assert store.keys() == []

    def test_empty_table(self, store):
        store.put(0, {})
        assert store.get(0) == {}

    def test_unicode_words(self, store):
        store.put(0, {'über': 2, 'café': 1})
        assert store.get(0) == {'über': 2, 'café': 1}


class TestCodec:

    def test_encoding_is_deterministic(self):
        assert encode_table(0, {'b': 1, 'a': 2}) == encode_table(0, {'a': 2, 'b': 1})

    def test_rejects_garbage(self):
        with pytest.raises(SerializationError):
            decode_table(0, b'\xff\xfe not json')

    def test_rejects_truncated_record(self):
        data = encode_table(0, {'cat': 1})
        with pytest.raises(SerializationError):
            decode_table(0, data[:-3])

    def test_rejects_record_of_another_partition(self):
        with pytest.raises(SerializationError):
            decode_table(1, encode_table(2, {'a': 1}))

    @pytest.mark.parametrize("table", [
        ['a', 1],
        {'a': -1},
        {'a': 1.5},
        {'a': 'one'},
        {'a': True},
    ])
    def test_rejects_malformed_tables(self, table):
        data = json.dumps({'partition': 0, 'table': table}).encode('utf-8')
        with pytest.raises(SerializationError):
            decode_table(0, data)

    def test_rejects_record_without_table(self):
        with pytest.raises(SerializationError):
            decode_table(0, b'{"partition": 0}')


class TestDiskStore:

    def test_one_json_file_per_partition(self, temp_dir):
        store = DiskStore(temp_dir, 'job-abc')
        store.put(4, {'x': 1})
        path = os.path.join(temp_dir, 'job-abc_part_4.json')
        assert store.path_for(4) == path
        with open(path) as f:
            assert json.load(f) == {'partition': 4, 'table': {'x': 1}}
        assert not os.path.exists(path + '.tmp')

    def test_corrupted_file_is_serialization_error(self, temp_dir):
        store = DiskStore(temp_dir, 'job-abc')
        store.put(0, {'x': 1})
        with open(store.path_for(0), 'w') as f:
            f.write('{"partition": 0, "tab')
        with pytest.raises(SerializationError):
            store.get(0)

    def test_failed_write_leaves_no_temp_file(self, temp_dir):
        store = DiskStore(temp_dir, 'job-abc')
        with patch('mrwordfreq.common.store.os.replace', side_effect=OSError('disk full')):
            with pytest.raises(OSError):
                store.put(0, {'x': 1})

        assert os.listdir(temp_dir) == []
        assert store.keys() == []

    def test_jobs_do_not_see_each_other(self, temp_dir):
        first = DiskStore(temp_dir, 'job-1')
        second = DiskStore(temp_dir, 'job-2')
        first.put(0, {'a': 1})
        assert second.keys() == []
        with pytest.raises(SerializationError):
            second.get(0)

    def test_discover_records(self, temp_dir):
        DiskStore(temp_dir, 'job-1').put(1, {'a': 1})
        DiskStore(temp_dir, 'job-1').put(0, {'a': 1})
        DiskStore(temp_dir, 'job-2').put(0, {'b': 1})
        with open(os.path.join(temp_dir, 'unrelated.txt'), 'w') as f:
            f.write('x')

        assert discover_records(temp_dir) == {'job-1': [0, 1], 'job-2': [0]}

    def test_discover_missing_directory(self, temp_dir):
        assert discover_records(os.path.join(temp_dir, 'nope')) == {}


def test_create_store_follows_config(temp_dir):
    assert isinstance(create_store(JobConfig(), 'job-x'), MemoryStore)

    disk = create_store(JobConfig(store='disk', intermediate_dir=temp_dir), 'job-x')
    assert isinstance(disk, DiskStore)
    assert disk.directory == temp_dir
