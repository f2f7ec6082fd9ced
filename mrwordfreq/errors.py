"""
Error taxonomy for word-frequency jobs.

Every failure a job can report is one of three kinds. Each carries the
chunk/partition index it concerns, when there is one.
"""

from typing import Optional


class JobError(Exception):
    """Base class for all job failures"""

    kind = "job"

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.index = index

    def __str__(self):
        if self.index is None:
            return f"{self.kind} error: {self.message}"
        return f"{self.kind} error (partition {self.index}): {self.message}"


class ConfigurationError(JobError, ValueError):
    """Invalid job settings or an input path that cannot be used"""

    kind = "configuration"


class InputIOError(JobError, IOError):
    """Failure to stat or read a byte range of the input"""

    kind = "io"


class SerializationError(JobError):
    """An intermediate record is missing or cannot be decoded"""

    kind = "serialization"
