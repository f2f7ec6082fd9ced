"""
Performance metrics collection for word-frequency jobs.
"""

import time
import json
from dataclasses import dataclass, asdict
from typing import Dict, Optional

import psutil


@dataclass
class JobMetrics:
    """Metrics for a single job execution."""

    job_id: str
    start_time: float
    end_time: float = 0.0
    map_phase_start: float = 0.0
    map_phase_end: float = 0.0
    reduce_phase_start: float = 0.0
    reduce_phase_end: float = 0.0
    chunk_size: int = 0
    num_chunks: int = 0
    max_workers: int = 0
    input_size_bytes: int = 0
    intermediate_size_bytes: int = 0
    output_size_bytes: int = 0
    total_tokens: int = 0
    distinct_words: int = 0
    peak_rss_bytes: int = 0

    @property
    def total_time_seconds(self) -> float:
        """Total job execution time in seconds."""
        return self.end_time - self.start_time

    @property
    def map_phase_time_seconds(self) -> float:
        """Map phase execution time in seconds."""
        return self.map_phase_end - self.map_phase_start

    @property
    def reduce_phase_time_seconds(self) -> float:
        """Reduce phase execution time in seconds."""
        return self.reduce_phase_end - self.reduce_phase_start

    @property
    def throughput_mbps(self) -> float:
        """Input megabytes processed per second."""
        if self.total_time_seconds <= 0:
            return 0.0
        return (self.input_size_bytes / 1024 / 1024) / self.total_time_seconds

    def to_dict(self) -> dict:
        """Convert metrics to dictionary."""
        data = asdict(self)
        data['total_time_seconds'] = self.total_time_seconds
        data['map_phase_time_seconds'] = self.map_phase_time_seconds
        data['reduce_phase_time_seconds'] = self.reduce_phase_time_seconds
        return data

    def save_to_file(self, filepath: str):
        """Save metrics to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


class MetricsCollector:
    """Collects and manages metrics for jobs."""

    def __init__(self):
        self.job_metrics: Dict[str, JobMetrics] = {}
        self.process = psutil.Process()

    def _sample_memory(self, metrics: JobMetrics):
        rss = self.process.memory_info().rss
        if rss > metrics.peak_rss_bytes:
            metrics.peak_rss_bytes = rss

    def start_job(self, job_id: str, chunk_size: int, max_workers: int):
        """Initialize metrics tracking for a new job."""
        metrics = JobMetrics(
            job_id=job_id,
            start_time=time.time(),
            chunk_size=chunk_size,
            max_workers=max_workers
        )
        self._sample_memory(metrics)
        self.job_metrics[job_id] = metrics

    def start_map_phase(self, job_id: str, input_size: int, num_chunks: int):
        """Mark the start of the map phase."""
        if job_id in self.job_metrics:
            metrics = self.job_metrics[job_id]
            metrics.map_phase_start = time.time()
            metrics.input_size_bytes = input_size
            metrics.num_chunks = num_chunks

    def record_map_output(self, job_id: str, tokens: int, record_size: int):
        """Add one map task's token count and encoded record size."""
        if job_id in self.job_metrics:
            metrics = self.job_metrics[job_id]
            metrics.total_tokens += tokens
            metrics.intermediate_size_bytes += record_size
            self._sample_memory(metrics)

    def end_map_phase(self, job_id: str):
        """Mark the end of the map phase."""
        if job_id in self.job_metrics:
            self.job_metrics[job_id].map_phase_end = time.time()

    def start_reduce_phase(self, job_id: str):
        """Mark the start of the reduce phase."""
        if job_id in self.job_metrics:
            self.job_metrics[job_id].reduce_phase_start = time.time()

    def end_job(self, job_id: str, distinct_words: int = 0, output_size: int = 0):
        """Mark job completion and record the result size."""
        if job_id in self.job_metrics:
            metrics = self.job_metrics[job_id]
            now = time.time()
            if metrics.reduce_phase_start and not metrics.reduce_phase_end:
                metrics.reduce_phase_end = now
            if metrics.map_phase_start and not metrics.map_phase_end:
                metrics.map_phase_end = now
            metrics.end_time = now
            metrics.distinct_words = distinct_words
            metrics.output_size_bytes = output_size
            self._sample_memory(metrics)

    def get_metrics(self, job_id: str) -> Optional[JobMetrics]:
        """Retrieve metrics for a specific job."""
        return self.job_metrics.get(job_id)
