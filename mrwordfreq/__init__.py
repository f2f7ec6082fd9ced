"""
Single-node map/reduce word-frequency engine.
"""

from mrwordfreq.config import JobConfig
from mrwordfreq.coordinator.aggregator import FinalResult
from mrwordfreq.coordinator.scheduler import JobScheduler, count_words
from mrwordfreq.errors import JobError, ConfigurationError, InputIOError, SerializationError

__version__ = "0.1.0"

__all__ = [
    "JobConfig",
    "JobScheduler",
    "FinalResult",
    "count_words",
    "JobError",
    "ConfigurationError",
    "InputIOError",
    "SerializationError",
]
