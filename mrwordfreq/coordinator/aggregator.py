"""
Merges partition tables into the global table and produces the sorted result.
"""

import threading
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple, TextIO

from mrwordfreq.common.store import FrequencyTable
from mrwordfreq.errors import SerializationError


def _byte_order(word: str) -> bytes:
    return word.encode('utf-8')


@dataclass(frozen=True)
class FinalResult:
    """(word, count) pairs in strictly increasing byte order of word"""
    entries: Tuple[Tuple[str, int], ...] = ()

    @classmethod
    def from_table(cls, table: FrequencyTable) -> "FinalResult":
        return cls(tuple((word, table[word]) for word in sorted(table, key=_byte_order)))

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def words(self) -> List[str]:
        return [word for word, _ in self.entries]

    def as_dict(self) -> Dict[str, int]:
        return dict(self.entries)

    def total(self) -> int:
        return sum(count for _, count in self.entries)

    def lines(self) -> Iterator[str]:
        for word, count in self.entries:
            yield f"{word}:{count}\n"

    def to_text(self) -> str:
        return ''.join(self.lines())

    def write(self, stream: TextIO) -> int:
        """Write `word:count` lines to a text stream; returns characters written"""
        written = 0
        for line in self.lines():
            written += stream.write(line)
        return written

    def save(self, path: str):
        with open(path, 'w', encoding='utf-8', newline='\n') as f:
            self.write(f)


class Aggregator:
    """Sums one table per partition into a global table"""

    def __init__(self, num_partitions: int):
        self.num_partitions = num_partitions
        self._table: Dict[str, int] = {}
        self._merged = set()
        self._lock = threading.Lock()

    def merge(self, partition_id: int, table: FrequencyTable):
        """
        Add a partition's counts into the global table

        The aggregator takes ownership of `table`; callers must not reuse it.

        Raises:
            ValueError: if the partition is out of range or was already merged
        """
        if not 0 <= partition_id < self.num_partitions:
            raise ValueError(f"partition {partition_id} out of range 0..{self.num_partitions - 1}")

        with self._lock:
            if partition_id in self._merged:
                raise ValueError(f"partition {partition_id} already merged")
            for word, count in table.items():
                self._table[word] = self._table.get(word, 0) + count
            self._merged.add(partition_id)

    @property
    def merged_count(self) -> int:
        return len(self._merged)

    @property
    def complete(self) -> bool:
        return len(self._merged) == self.num_partitions

    def missing(self) -> List[int]:
        with self._lock:
            return [p for p in range(self.num_partitions) if p not in self._merged]

    def result(self) -> FinalResult:
        """
        Produce the sorted result once every partition has been merged

        Raises:
            SerializationError: if any partition never arrived
        """
        if not self.complete:
            missing = self.missing()
            raise SerializationError(
                f"{len(missing)} of {self.num_partitions} partitions were never merged",
                index=missing[0]
            )
        with self._lock:
            return FinalResult.from_table(self._table)
