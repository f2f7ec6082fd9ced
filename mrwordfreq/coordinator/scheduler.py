"""
Job scheduler: runs the map phase, waits at the barrier, then runs the
reduce phase and merges the partitions into the final result.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Optional

from mrwordfreq.common.file_source import FileSource, get_file_source
from mrwordfreq.common.store import IntermediateStore, MemoryStore, FrequencyTable, create_store
from mrwordfreq.config import JobConfig
from mrwordfreq.coordinator.aggregator import Aggregator, FinalResult
from mrwordfreq.coordinator.job_manager import JobManager, Job, TaskStatus, MAP, REDUCE
from mrwordfreq.coordinator.metrics import MetricsCollector
from mrwordfreq.coordinator.partitioner import plan
from mrwordfreq.errors import ConfigurationError
from mrwordfreq.worker.map_executor import MapExecutor
from mrwordfreq.worker.reduce_executor import ReduceExecutor

logger = logging.getLogger(__name__)


class JobScheduler:
    """Runs word-frequency jobs on a local thread pool"""

    def __init__(self, config: Optional[JobConfig] = None,
                 file_source: Optional[FileSource] = None,
                 store: Optional[IntermediateStore] = None,
                 job_manager: Optional[JobManager] = None,
                 metrics: Optional[MetricsCollector] = None):
        """
        Args:
            config: Job settings; defaults are used when omitted
            file_source: Input reader; built from config.reader when omitted
            store: Intermediate store to use instead of one built per job
            job_manager: Job state registry
            metrics: Metrics collector
        """
        self.config = (config or JobConfig()).validate()
        self.file_source = file_source or get_file_source(self.config.reader)
        self.job_manager = job_manager or JobManager()
        self.metrics = metrics or MetricsCollector()
        self._shared_store = store
        self.stores: Dict[str, IntermediateStore] = {}

    def run(self, input_path: str, job_id: Optional[str] = None) -> FinalResult:
        """
        Run a complete job

        Returns:
            The sorted word counts of the whole input

        Raises:
            ConfigurationError: if the input cannot be used; no worker is started
            InputIOError: if a map task cannot read its chunk
            SerializationError: if a reduce task cannot load its partition
        """
        job = self.submit(input_path, job_id)
        try:
            self.run_map_phase(job)
            result = self.run_reduce_phase(job)

            store = self.store_for(job)
            if not self.config.keep_intermediate:
                removed = store.clear()
                if removed:
                    logger.info(f"Job {job.job_id}: removed {removed} intermediate records")
            else:
                logger.info(
                    f"Job {job.job_id}: kept {len(store.keys())} intermediate records "
                    f"({store.size_bytes()} bytes)"
                )
        finally:
            self.stores.pop(job.job_id, None)
        return result

    def submit(self, input_path: str, job_id: Optional[str] = None) -> Job:
        """Register a job, check its input and plan its chunks"""
        job = self.job_manager.create_job(input_path, job_id)
        self.metrics.start_job(job.job_id, self.config.chunk_size, self.config.max_workers)

        try:
            try:
                file_size = self.file_source.stat(input_path)
            except OSError as e:
                raise ConfigurationError(f"cannot use input {input_path}: {getattr(e, 'message', e)}") from e
            chunks = plan(file_size, self.config.chunk_size)
            self.job_manager.set_layout(job, file_size, chunks)
            if self._shared_store is not None:
                self.stores[job.job_id] = self._shared_store
            else:
                self.stores[job.job_id] = create_store(self.config, job.job_id)
        except Exception as e:
            self._fail(job, e)
            raise

        logger.info(
            f"Job {job.job_id}: {input_path} ({file_size} bytes) split into "
            f"{len(chunks)} chunks of {self.config.chunk_size} bytes"
        )
        return job

    def store_for(self, job: Job) -> IntermediateStore:
        return self.stores[job.job_id]

    def run_map_phase(self, job: Job):
        """
        Count every chunk concurrently and publish the tables

        Returns only after every map task has settled.
        """
        self.job_manager.start_map_phase(job)
        self.metrics.start_map_phase(job.job_id, job.file_size, len(job.chunks))
        logger.info(f"Job {job.job_id} started MAP phase")

        store = self.store_for(job)
        executors = [
            MapExecutor(chunk, job.input_path, self.file_source, store, job.job_id)
            for chunk in job.chunks
        ]

        def record(task_id: int, table: FrequencyTable):
            self.metrics.record_map_output(job.job_id, sum(table.values()), executors[task_id].record_size)

        try:
            self._run_phase(job, MAP, executors, record)
        except Exception as e:
            self._fail(job, e)
            raise
        self.metrics.end_map_phase(job.job_id)

    def run_reduce_phase(self, job: Job) -> FinalResult:
        """
        Load every partition concurrently and merge them

        Raises:
            ValueError: if called before every map task completed
        """
        self.job_manager.start_reduce_phase(job)
        self.metrics.start_reduce_phase(job.job_id)
        logger.info(f"Job {job.job_id} started REDUCE phase")

        store = self.store_for(job)
        aggregator = Aggregator(job.num_partitions)
        executors = [
            ReduceExecutor(partition_id, store, job.job_id)
            for partition_id in range(job.num_partitions)
        ]

        try:
            self._run_phase(job, REDUCE, executors, aggregator.merge)
            result = aggregator.result()
        except Exception as e:
            self._fail(job, e)
            raise

        self.job_manager.mark_completed(job)
        self.metrics.end_job(job.job_id, distinct_words=len(result),
                             output_size=len(result.to_text().encode('utf-8')))
        metrics = self.metrics.get_metrics(job.job_id)
        logger.info(
            f"Job {job.job_id} completed successfully: {len(result)} distinct words "
            f"from {aggregator.merged_count} partitions in {metrics.total_time_seconds:.3f}s"
        )
        return result

    def _run_phase(self, job: Job, phase: str, executors: List,
                   on_result: Callable[[int, FrequencyTable], None]):
        """
        Run one task per executor and hand each result to `on_result`

        Results are delivered on the calling thread. The first failure cancels
        every task not yet started; the pool is drained before it is re-raised.
        """
        first_error = None

        with ThreadPoolExecutor(max_workers=self.config.max_workers,
                                thread_name_prefix=f"{job.job_id}-{phase}") as pool:
            futures = {
                pool.submit(self._run_task, job, phase, task_id, executor): task_id
                for task_id, executor in enumerate(executors)
            }

            for future in as_completed(futures):
                task_id = futures[future]

                if future.cancelled():
                    self.job_manager.mark_task(job, phase, task_id, TaskStatus.CANCELLED)
                    continue

                error = future.exception()
                if error is None and first_error is None:
                    try:
                        on_result(task_id, future.result())
                    except Exception as e:
                        error = e

                if error is not None:
                    self.job_manager.mark_task(job, phase, task_id, TaskStatus.FAILED)
                    if first_error is None:
                        first_error = error
                        cancelled = sum(1 for f in futures if f.cancel())
                        logger.error(
                            f"Job {job.job_id}: {phase} task {task_id} failed, "
                            f"cancelled {cancelled} queued tasks"
                        )
                    continue

                self.job_manager.mark_task(job, phase, task_id, TaskStatus.COMPLETED)

        if first_error is not None:
            raise first_error

    def _run_task(self, job: Job, phase: str, task_id: int, executor) -> FrequencyTable:
        self.job_manager.mark_task(job, phase, task_id, TaskStatus.RUNNING)
        return executor.execute()

    def _fail(self, job: Job, error: Exception):
        self.job_manager.mark_failed(job, str(error))

        # Disk records stay behind for `inspect`
        store = self.stores.pop(job.job_id, None)
        if isinstance(store, MemoryStore):
            store.clear()
        self.metrics.end_job(job.job_id)
        logger.error(f"Job {job.job_id} failed: {error}")


def count_words(input_path: str, config: Optional[JobConfig] = None, **kwargs) -> FinalResult:
    """Run one job with a throwaway scheduler"""
    return JobScheduler(config, **kwargs).run(input_path)
