"""
Map Task Executor
Reads one chunk of the input, counts its words, and publishes the
partition-local table to the intermediate store
"""

import logging
import time

from mrwordfreq.common.file_source import FileSource
from mrwordfreq.common.store import IntermediateStore, FrequencyTable
from mrwordfreq.coordinator.partitioner import Chunk
from mrwordfreq.errors import InputIOError
from mrwordfreq.worker.tokenizer import count_tokens

logger = logging.getLogger(__name__)


class MapExecutor:
    """Executes a single map task"""

    def __init__(self, chunk: Chunk, input_path: str, file_source: FileSource,
                 store: IntermediateStore, job_id: str = ''):
        """
        Initialize the map executor

        Args:
            chunk: Byte range this task owns
            input_path: Path to input file
            file_source: Positioned reader for the input
            store: Intermediate store receiving the table
            job_id: Job identifier, for log messages
        """
        self.chunk = chunk
        self.input_path = input_path
        self.file_source = file_source
        self.store = store
        self.job_id = job_id
        self.execution_time_ms = 0
        self.record_size = 0

    def execute(self) -> FrequencyTable:
        """
        Execute the map task

        Returns:
            The partition-local frequency table, as published to the store

        Raises:
            InputIOError: if the chunk cannot be read in full
        """
        start_time = time.time()
        index = self.chunk.index

        try:
            logger.debug(f"Map task {index}: reading {self.chunk.length} bytes at offset {self.chunk.offset}")
            try:
                data = self.file_source.read_range(self.input_path, self.chunk.offset, self.chunk.length)
            except OSError as e:
                raise InputIOError(str(getattr(e, 'message', e)), index=index) from e
            if len(data) != self.chunk.length:
                raise InputIOError(
                    f"expected {self.chunk.length} bytes, got {len(data)}", index=index
                )

            table = count_tokens(data)

            # Nothing is published unless the whole chunk was read and counted
            self.record_size = self.store.put(index, table)

            self.execution_time_ms = int((time.time() - start_time) * 1000)
            logger.debug(f"Map task {index}: {len(table)} distinct words in {self.execution_time_ms}ms")
            return table

        except Exception as e:
            self.execution_time_ms = int((time.time() - start_time) * 1000)
            logger.error(f"Map task failed - Job: {self.job_id}, Task: {index}. Error: {e}")
            raise
