#!/usr/bin/env python3
"""
Job Manager for the word-frequency coordinator
Handles job state, per-task status, and progress tracking
"""

import threading
import time
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import List, Dict, Optional

from mrwordfreq.coordinator.partitioner import Chunk


class JobStatus(Enum):
    """Status of a word-frequency job"""
    PENDING = "pending"
    MAP_PHASE = "map_phase"
    REDUCE_PHASE = "reduce_phase"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskStatus(Enum):
    """Status of individual map or reduce tasks"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


MAP = "map"
REDUCE = "reduce"


@dataclass
class Job:
    """Represents a complete word-frequency job"""
    job_id: str
    input_path: str
    file_size: int = 0
    chunks: List[Chunk] = field(default_factory=list)
    status: JobStatus = JobStatus.PENDING
    map_tasks: List[TaskStatus] = field(default_factory=list)
    reduce_tasks: List[TaskStatus] = field(default_factory=list)
    error_message: str = ""
    start_time: float = 0.0
    end_time: float = 0.0

    @property
    def num_partitions(self) -> int:
        return len(self.chunks)

    def tasks(self, phase: str) -> List[TaskStatus]:
        return self.map_tasks if phase == MAP else self.reduce_tasks


def new_job_id() -> str:
    return f"job-{uuid.uuid4().hex[:8]}"


class JobManager:
    """Tracks all jobs and their lifecycle"""

    def __init__(self):
        self.jobs: Dict[str, Job] = {}
        self.lock = threading.Lock()

    def create_job(self, input_path: str, job_id: Optional[str] = None) -> Job:
        """Register a new pending job"""
        with self.lock:
            job = Job(
                job_id=job_id or new_job_id(),
                input_path=input_path,
                start_time=time.time()
            )
            if job.job_id in self.jobs:
                raise ValueError(f"Job {job.job_id} already exists")
            self.jobs[job.job_id] = job
            return job

    def get_job(self, job_id: str) -> Optional[Job]:
        with self.lock:
            return self.jobs.get(job_id)

    def set_layout(self, job: Job, file_size: int, chunks: List[Chunk]):
        """Record the chunk layout of a pending job; one map and one reduce task per chunk"""
        with self.lock:
            if job.status != JobStatus.PENDING:
                raise ValueError(f"Cannot change layout of a {job.status.value} job")
            job.file_size = file_size
            job.chunks = list(chunks)
            job.map_tasks = [TaskStatus.PENDING] * len(chunks)
            job.reduce_tasks = [TaskStatus.PENDING] * len(chunks)

    def start_map_phase(self, job: Job):
        """Move a pending job into the map phase"""
        with self.lock:
            if job.status != JobStatus.PENDING:
                raise ValueError(f"Cannot start MAP phase from {job.status.value}")
            job.status = JobStatus.MAP_PHASE

    def start_reduce_phase(self, job: Job):
        """Move the job into the reduce phase; every map task must be complete"""
        with self.lock:
            if job.status != JobStatus.MAP_PHASE:
                raise ValueError(f"Cannot start REDUCE phase from {job.status.value}")
            if not all(t == TaskStatus.COMPLETED for t in job.map_tasks):
                raise ValueError("Cannot start REDUCE phase - maps not complete")
            job.status = JobStatus.REDUCE_PHASE

    def mark_task(self, job: Job, phase: str, task_id: int, status: TaskStatus):
        with self.lock:
            tasks = job.tasks(phase)
            if 0 <= task_id < len(tasks):
                tasks[task_id] = status

    def mark_completed(self, job: Job):
        with self.lock:
            if job.status != JobStatus.REDUCE_PHASE:
                raise ValueError(f"Cannot mark job complete from {job.status.value}")
            if not all(t == TaskStatus.COMPLETED for t in job.reduce_tasks):
                raise ValueError("Cannot mark job complete - reduces not done")
            job.status = JobStatus.COMPLETED
            job.end_time = time.time()

    def mark_failed(self, job: Job, error_msg: str):
        with self.lock:
            job.status = JobStatus.FAILED
            job.error_message = error_msg
            job.end_time = time.time()

    def get_job_status(self, job_id: str) -> Optional[Dict]:
        """Get current job status with progress"""
        with self.lock:
            job = self.jobs.get(job_id)
            if not job:
                return None

            map_completed = sum(1 for t in job.map_tasks if t == TaskStatus.COMPLETED)
            reduce_completed = sum(1 for t in job.reduce_tasks if t == TaskStatus.COMPLETED)
            total_tasks = len(job.map_tasks) + len(job.reduce_tasks)

            if job.status == JobStatus.COMPLETED:
                progress = 100
            elif total_tasks > 0:
                progress = int((map_completed + reduce_completed) / total_tasks * 100)
            else:
                progress = 0

            return {
                'job_id': job.job_id,
                'status': job.status.value,
                'progress': progress,
                'map_completed': map_completed,
                'map_total': len(job.map_tasks),
                'reduce_completed': reduce_completed,
                'reduce_total': len(job.reduce_tasks),
                'error_message': job.error_message
            }
