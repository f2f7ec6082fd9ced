"""
Intermediate store: holds one serialized frequency table per partition
between the map phase and the reduce phase.

Each partition index has exactly one writer (its map task) and one reader
(its reduce task), so the backends do no locking.
"""

import glob
import json
import logging
import os
import re
from abc import ABC, abstractmethod
from typing import Dict, List

from mrwordfreq.errors import SerializationError

logger = logging.getLogger(__name__)

FrequencyTable = Dict[str, int]


def encode_table(partition_id: int, table: FrequencyTable) -> bytes:
    """Serialize a partition's table as a self-describing JSON record"""
    record = {'partition': partition_id, 'table': table}
    return json.dumps(record, sort_keys=True, ensure_ascii=False).encode('utf-8')


def decode_table(partition_id: int, data: bytes) -> FrequencyTable:
    """
    Decode and validate a record written by `encode_table`

    Raises:
        SerializationError: if the bytes are not a well-formed record for this partition
    """
    try:
        record = json.loads(data.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SerializationError(f"record is not valid JSON: {e}", index=partition_id) from e

    if not isinstance(record, dict) or 'table' not in record:
        raise SerializationError("record has no table", index=partition_id)
    if record.get('partition') != partition_id:
        raise SerializationError(
            f"record belongs to partition {record.get('partition')!r}", index=partition_id
        )

    table = record['table']
    if not isinstance(table, dict):
        raise SerializationError("table is not a mapping", index=partition_id)
    for word, count in table.items():
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise SerializationError(f"invalid count {count!r} for word {word!r}", index=partition_id)
    return table


class IntermediateStore(ABC):
    """Keyed holder of partition-local frequency tables"""

    def put(self, partition_id: int, table: FrequencyTable) -> int:
        """
        Store the table for a partition

        Returns:
            Size of the encoded record in bytes
        """
        data = encode_table(partition_id, table)
        self._write(partition_id, data)
        return len(data)

    def get(self, partition_id: int) -> FrequencyTable:
        """
        Load a freshly decoded copy of a partition's table

        Raises:
            SerializationError: if the record is absent or malformed
        """
        data = self._read(partition_id)
        return decode_table(partition_id, data)

    @abstractmethod
    def _write(self, partition_id: int, data: bytes):
        pass

    @abstractmethod
    def _read(self, partition_id: int) -> bytes:
        pass

    @abstractmethod
    def delete(self, partition_id: int) -> bool:
        """Remove a partition's record; returns False if there was none"""

    @abstractmethod
    def keys(self) -> List[int]:
        """Partition indexes currently held, in ascending order"""

    @abstractmethod
    def size_bytes(self) -> int:
        """Total encoded size of all held records"""

    def clear(self) -> int:
        """Remove every record; returns how many were removed"""
        removed = 0
        for partition_id in self.keys():
            if self.delete(partition_id):
                removed += 1
        return removed

    def __contains__(self, partition_id: int) -> bool:
        return partition_id in self.keys()


class MemoryStore(IntermediateStore):
    """Keeps encoded records in a dict"""

    def __init__(self):
        self._records: Dict[int, bytes] = {}

    def _write(self, partition_id: int, data: bytes):
        if partition_id in self._records:
            raise ValueError(f"partition {partition_id} already has a record")
        self._records[partition_id] = data

    def _read(self, partition_id: int) -> bytes:
        try:
            return self._records[partition_id]
        except KeyError:
            raise SerializationError("no intermediate record", index=partition_id) from None

    def delete(self, partition_id: int) -> bool:
        return self._records.pop(partition_id, None) is not None

    def keys(self) -> List[int]:
        return sorted(self._records)

    def size_bytes(self) -> int:
        return sum(len(data) for data in self._records.values())

    def __contains__(self, partition_id: int) -> bool:
        return partition_id in self._records


RECORD_PATTERN = re.compile(r'^(?P<job_id>.+)_part_(?P<partition>\d+)\.json$')


class DiskStore(IntermediateStore):
    """One JSON file per partition: <dir>/<job_id>_part_<n>.json"""

    def __init__(self, directory: str, job_id: str):
        self.directory = directory
        self.job_id = job_id
        os.makedirs(directory, exist_ok=True)

    def path_for(self, partition_id: int) -> str:
        return os.path.join(self.directory, f"{self.job_id}_part_{partition_id}.json")

    def _write(self, partition_id: int, data: bytes):
        path = self.path_for(partition_id)
        if os.path.exists(path):
            raise ValueError(f"partition {partition_id} already has a record at {path}")

        # Write then rename so a reader never sees a half-written record
        tmp_path = path + '.tmp'
        try:
            with open(tmp_path, 'wb') as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _read(self, partition_id: int) -> bytes:
        path = self.path_for(partition_id)
        try:
            with open(path, 'rb') as f:
                return f.read()
        except FileNotFoundError:
            raise SerializationError(f"no intermediate record at {path}", index=partition_id) from None
        except OSError as e:
            raise SerializationError(f"cannot read {path}: {e}", index=partition_id) from e

    def delete(self, partition_id: int) -> bool:
        path = self.path_for(partition_id)
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        logger.info(f"Cleaned up intermediate file: {path}")
        return True

    def keys(self) -> List[int]:
        pattern = os.path.join(glob.escape(self.directory), f"{glob.escape(self.job_id)}_part_*.json")
        partitions = []
        for path in glob.glob(pattern):
            match = RECORD_PATTERN.match(os.path.basename(path))
            if match and match.group('job_id') == self.job_id:
                partitions.append(int(match.group('partition')))
        return sorted(partitions)

    def size_bytes(self) -> int:
        return sum(os.path.getsize(self.path_for(p)) for p in self.keys())


def discover_records(directory: str) -> Dict[str, List[int]]:
    """
    Find intermediate records left in a directory

    Returns:
        Mapping of job_id to its sorted partition indexes
    """
    jobs: Dict[str, List[int]] = {}
    if not os.path.isdir(directory):
        return jobs

    for name in os.listdir(directory):
        match = RECORD_PATTERN.match(name)
        if match:
            jobs.setdefault(match.group('job_id'), []).append(int(match.group('partition')))

    for partitions in jobs.values():
        partitions.sort()
    return jobs


def create_store(config, job_id: str) -> IntermediateStore:
    """Build the store backend named by `config.store`"""
    if config.store == 'disk':
        return DiskStore(config.intermediate_dir, job_id)
    return MemoryStore()
