"""
Splits the input into fixed-size byte ranges, one per map task.
"""

from dataclasses import dataclass
from typing import List

from mrwordfreq.errors import ConfigurationError


@dataclass(frozen=True)
class Chunk:
    """A contiguous byte range of the input file"""
    index: int
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


def plan(file_size: int, chunk_size: int) -> List[Chunk]:
    """
    Compute the chunk layout of a file

    Args:
        file_size: Size of the input in bytes
        chunk_size: Bytes per chunk; only the last chunk may be shorter

    Returns:
        ceil(file_size / chunk_size) chunks covering [0, file_size) in index order

    Raises:
        ConfigurationError: if chunk_size is not positive or file_size is negative
    """
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
        raise ConfigurationError(f"chunk size must be a positive integer, got {chunk_size!r}")
    if file_size < 0:
        raise ConfigurationError(f"file size cannot be negative, got {file_size}")

    num_chunks = -(-file_size // chunk_size)
    chunks = []
    for i in range(num_chunks):
        start = i * chunk_size
        length = file_size - start if i == num_chunks - 1 else chunk_size
        chunks.append(Chunk(index=i, offset=start, length=length))
    return chunks
