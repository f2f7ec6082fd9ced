"""
Job configuration.
"""

import json
import os
from dataclasses import dataclass, asdict, fields, replace

from mrwordfreq.errors import ConfigurationError

DEFAULT_CHUNK_SIZE = 1 << 20
DEFAULT_MAX_WORKERS = 4
DEFAULT_INTERMEDIATE_DIR = os.path.join("shared", "intermediate")

STORE_BACKENDS = ("memory", "disk")
READERS = ("seek", "mmap")


@dataclass(frozen=True)
class JobConfig:
    """Settings for a single word-frequency job"""
    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_workers: int = DEFAULT_MAX_WORKERS
    store: str = "memory"
    intermediate_dir: str = DEFAULT_INTERMEDIATE_DIR
    reader: str = "seek"
    keep_intermediate: bool = False

    def validate(self) -> "JobConfig":
        """
        Check every setting

        Returns:
            self, so calls can be chained

        Raises:
            ConfigurationError: on the first invalid setting
        """
        if not _is_int(self.chunk_size) or self.chunk_size <= 0:
            raise ConfigurationError(f"chunk_size must be a positive integer, got {self.chunk_size!r}")
        if not _is_int(self.max_workers) or self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {self.max_workers!r}")
        if self.store not in STORE_BACKENDS:
            raise ConfigurationError(f"store must be one of {', '.join(STORE_BACKENDS)}, got {self.store!r}")
        if self.reader not in READERS:
            raise ConfigurationError(f"reader must be one of {', '.join(READERS)}, got {self.reader!r}")
        if self.store == "disk" and not self.intermediate_dir:
            raise ConfigurationError("disk store requires an intermediate_dir")
        return self

    def with_overrides(self, **overrides) -> "JobConfig":
        """Return a copy with every non-None override applied"""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "JobConfig":
        if not isinstance(data, dict):
            raise ConfigurationError("configuration must be a JSON object")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"unknown configuration keys: {', '.join(unknown)}")
        return cls(**data).validate()

    @classmethod
    def from_file(cls, path: str) -> "JobConfig":
        """Load a JSON configuration file"""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except OSError as e:
            raise ConfigurationError(f"cannot read config file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"config file {path} is not valid JSON: {e}") from e
        return cls.from_dict(data)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
