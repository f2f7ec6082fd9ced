"""
Unit tests for job configuration and errors
"""

import json
import os

import pytest

from mrwordfreq.config import JobConfig, DEFAULT_CHUNK_SIZE
from mrwordfreq.errors import ConfigurationError, InputIOError, SerializationError, JobError


class TestJobConfig:

    def test_defaults_are_valid(self):
        config = JobConfig().validate()
        assert config.chunk_size == DEFAULT_CHUNK_SIZE
        assert config.max_workers == 4
        assert config.store == 'memory'
        assert config.reader == 'seek'
        assert config.keep_intermediate is False

    @pytest.mark.parametrize("overrides", [
        {'chunk_size': 0},
        {'chunk_size': -5},
        {'chunk_size': True},
        {'chunk_size': 1.5},
        {'max_workers': 0},
        {'store': 'redis'},
        {'reader': 'tape'},
        {'store': 'disk', 'intermediate_dir': ''},
    ])
    def test_invalid_settings(self, overrides):
        with pytest.raises(ConfigurationError):
            JobConfig(**overrides).validate()

    def test_with_overrides_skips_none(self):
        config = JobConfig(chunk_size=10).with_overrides(chunk_size=None, max_workers=2)
        assert config.chunk_size == 10
        assert config.max_workers == 2

    def test_from_file(self, temp_dir):
        path = os.path.join(temp_dir, 'job.json')
        with open(path, 'w') as f:
            json.dump({'chunk_size': 4096, 'store': 'disk', 'intermediate_dir': temp_dir}, f)

        config = JobConfig.from_file(path)
        assert config.chunk_size == 4096
        assert config.store == 'disk'
        assert config.max_workers == 4

    def test_from_file_rejects_unknown_keys(self, temp_dir):
        path = os.path.join(temp_dir, 'job.json')
        with open(path, 'w') as f:
            json.dump({'chunk_size': 4096, 'num_reducers': 3}, f)
        with pytest.raises(ConfigurationError, match='num_reducers'):
            JobConfig.from_file(path)

    def test_from_file_rejects_bad_json(self, temp_dir):
        path = os.path.join(temp_dir, 'job.json')
        with open(path, 'w') as f:
            f.write('{chunk_size: ')
        with pytest.raises(ConfigurationError):
            JobConfig.from_file(path)

    def test_from_file_missing(self, temp_dir):
        with pytest.raises(ConfigurationError):
            JobConfig.from_file(os.path.join(temp_dir, 'nope.json'))

    def test_from_dict_validates(self):
        with pytest.raises(ConfigurationError):
            JobConfig.from_dict({'chunk_size': 0})
        with pytest.raises(ConfigurationError):
            JobConfig.from_dict(['chunk_size'])

    def test_round_trip_dict(self):
        config = JobConfig(chunk_size=64, max_workers=2)
        assert JobConfig.from_dict(config.to_dict()) == config


class TestErrors:

    def test_message_names_kind_and_index(self):
        assert str(SerializationError("no record", index=2)) == "serialization error (partition 2): no record"
        assert str(ConfigurationError("bad chunk size")) == "configuration error: bad chunk size"

    def test_hierarchy(self):
        assert issubclass(ConfigurationError, JobError)
        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(InputIOError, IOError)
        assert issubclass(SerializationError, JobError)

    def test_io_error_keeps_index(self):
        error = InputIOError("short read", index=4)
        assert error.index == 4
        assert error.message == "short read"
        assert "partition 4" in str(error)
