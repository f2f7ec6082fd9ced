"""
Reduce Task Executor
Loads one partition's intermediate record for the aggregator
"""

import logging
import time

from mrwordfreq.common.store import IntermediateStore, FrequencyTable

logger = logging.getLogger(__name__)


class ReduceExecutor:
    """Executes a single reduce task"""

    def __init__(self, partition_id: int, store: IntermediateStore, job_id: str = ''):
        self.partition_id = partition_id
        self.store = store
        self.job_id = job_id
        self.execution_time_ms = 0

    def execute(self) -> FrequencyTable:
        """
        Load the partition's table

        The returned table is a fresh copy owned by the caller.

        Raises:
            SerializationError: if the record is missing or malformed
        """
        start_time = time.time()

        try:
            table = self.store.get(self.partition_id)
            self.execution_time_ms = int((time.time() - start_time) * 1000)
            logger.debug(f"Reduce task {self.partition_id}: loaded {len(table)} words in {self.execution_time_ms}ms")
            return table

        except Exception as e:
            self.execution_time_ms = int((time.time() - start_time) * 1000)
            logger.error(f"Reduce task failed - Job: {self.job_id}, Task: {self.partition_id}. Error: {e}")
            raise
