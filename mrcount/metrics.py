"""
Performance metrics collection for word count runs.
"""

import time
import json
from dataclasses import dataclass, asdict, field
from typing import Dict, Optional

import psutil


@dataclass
class JobMetrics:
    """Metrics for a single pipeline run."""

    job_id: str
    start_time: float
    end_time: float = 0.0
    map_phase_start: float = 0.0
    map_phase_end: float = 0.0
    merge_phase_start: float = 0.0
    merge_phase_end: float = 0.0
    partition_count: int = 0
    use_combiner: bool = True
    records_read: int = 0
    pairs_emitted: int = 0
    intermediate_pairs: int = 0
    unique_words: int = 0
    peak_rss_bytes: int = 0
    succeeded: bool = False
    partition_times_ms: Dict[int, int] = field(default_factory=dict)

    @property
    def total_time_seconds(self) -> float:
        """Total run time in seconds."""
        return self.end_time - self.start_time

    @property
    def map_phase_time_seconds(self) -> float:
        """Map/combine phase time in seconds."""
        return self.map_phase_end - self.map_phase_start

    @property
    def merge_phase_time_seconds(self) -> float:
        """Merge phase time in seconds."""
        return self.merge_phase_end - self.merge_phase_start

    @property
    def combiner_reduction_ratio(self) -> float:
        """Share of mapper pairs the combiner removed before the merge."""
        if self.pairs_emitted == 0:
            return 0.0
        return 1.0 - (self.intermediate_pairs / self.pairs_emitted)

    def to_dict(self) -> dict:
        """Convert metrics to dictionary."""
        data = asdict(self)
        data['total_time_seconds'] = self.total_time_seconds
        data['map_phase_time_seconds'] = self.map_phase_time_seconds
        data['merge_phase_time_seconds'] = self.merge_phase_time_seconds
        data['combiner_reduction_ratio'] = self.combiner_reduction_ratio
        return data

    def save_to_file(self, filepath: str):
        """Save metrics to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


class MetricsCollector:
    """Collects and manages metrics for pipeline runs."""

    def __init__(self):
        self.job_metrics: Dict[str, JobMetrics] = {}
        self.process = psutil.Process()

    def _sample_memory(self, job_id: str):
        rss = self.process.memory_info().rss
        metrics = self.job_metrics[job_id]
        metrics.peak_rss_bytes = max(metrics.peak_rss_bytes, rss)

    def start_job(self, job_id: str, partition_count: int, use_combiner: bool,
                  records_read: int):
        """Initialize metrics tracking for a new run."""
        now = time.time()
        self.job_metrics[job_id] = JobMetrics(
            job_id=job_id,
            start_time=now,
            map_phase_start=now,
            partition_count=partition_count,
            use_combiner=use_combiner,
            records_read=records_read,
        )
        self._sample_memory(job_id)

    def record_partition(self, job_id: str, partition_index: int, pairs_emitted: int,
                         intermediate_pairs: int, elapsed_ms: int):
        """Add one finished partition's counters."""
        if job_id in self.job_metrics:
            metrics = self.job_metrics[job_id]
            metrics.pairs_emitted += pairs_emitted
            metrics.intermediate_pairs += intermediate_pairs
            metrics.partition_times_ms[partition_index] = elapsed_ms

    def start_merge_phase(self, job_id: str):
        """Mark the end of the map phase and the start of the merge."""
        if job_id in self.job_metrics:
            now = time.time()
            self.job_metrics[job_id].map_phase_end = now
            self.job_metrics[job_id].merge_phase_start = now
            self._sample_memory(job_id)

    def end_job(self, job_id: str, unique_words: int = 0, succeeded: bool = True):
        """Mark run completion."""
        if job_id in self.job_metrics:
            now = time.time()
            metrics = self.job_metrics[job_id]
            if metrics.map_phase_end == 0.0:
                metrics.map_phase_end = now
            if metrics.merge_phase_start:
                metrics.merge_phase_end = now
            metrics.end_time = now
            metrics.unique_words = unique_words
            metrics.succeeded = succeeded
            self._sample_memory(job_id)

    def get_metrics(self, job_id: str) -> Optional[JobMetrics]:
        """Retrieve metrics for a specific run."""
        return self.job_metrics.get(job_id)
