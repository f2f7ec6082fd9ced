"""
Positioned access to the input file.

Every read is self-contained: it opens (or maps) the file on its own and
reads only its byte range, so concurrent map tasks never share a cursor.
"""

import mmap
import os
from stat import S_ISREG
from abc import ABC, abstractmethod

from mrwordfreq.errors import InputIOError, ConfigurationError

READ_BLOCK_SIZE = 1 << 16


class FileSource(ABC):
    """Read-only access to a byte-oriented input file"""

    @abstractmethod
    def stat(self, path: str) -> int:
        """Return the size of the file in bytes"""

    @abstractmethod
    def read_range(self, path: str, offset: int, length: int) -> bytes:
        """
        Read exactly `length` bytes starting at `offset`

        Raises:
            InputIOError: if the file cannot be read or ends early
        """


class LocalFileSource(FileSource):
    """Opens the file, seeks and reads, once per call"""

    def stat(self, path: str) -> int:
        try:
            info = os.stat(path)
        except OSError as e:
            raise InputIOError(f"cannot stat {path}: {e}") from e
        if not S_ISREG(info.st_mode):
            raise InputIOError(f"not a regular file: {path}")
        if not os.access(path, os.R_OK):
            raise InputIOError(f"file is not readable: {path}")
        return info.st_size

    def read_range(self, path: str, offset: int, length: int) -> bytes:
        if length == 0:
            return b''

        buf = bytearray()
        try:
            with open(path, 'rb') as f:
                f.seek(offset)
                while len(buf) < length:
                    block = f.read(min(READ_BLOCK_SIZE, length - len(buf)))
                    if not block:
                        break
                    buf.extend(block)
        except OSError as e:
            raise InputIOError(f"cannot read {length} bytes at offset {offset} of {path}: {e}") from e

        if len(buf) < length:
            raise InputIOError(
                f"short read at offset {offset} of {path}: expected {length} bytes, got {len(buf)}"
            )
        return bytes(buf)


class MmapFileSource(LocalFileSource):
    """Maps the file read-only and slices the requested range"""

    def read_range(self, path: str, offset: int, length: int) -> bytes:
        if length == 0:
            return b''

        try:
            with open(path, 'rb') as f:
                with mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ) as mapped:
                    data = mapped[offset:offset + length]
        except (OSError, ValueError) as e:
            # mmap raises ValueError for an empty file
            raise InputIOError(f"cannot map {path}: {e}") from e

        if len(data) < length:
            raise InputIOError(
                f"short read at offset {offset} of {path}: expected {length} bytes, got {len(data)}"
            )
        return data


_SOURCES = {
    'seek': LocalFileSource,
    'mmap': MmapFileSource,
}


def get_file_source(name: str) -> FileSource:
    """Build the file source for a `JobConfig.reader` name"""
    try:
        return _SOURCES[name]()
    except KeyError:
        raise ConfigurationError(f"unknown reader: {name!r}") from None
