"""
Pipeline driver.
Partitions the input, runs tokenizer + combiner for each partition on a
thread pool, waits for every partition, merges the subtotals and returns
the final sorted word counts.
"""

import time
import uuid
import logging
import threading
from dataclasses import dataclass
from concurrent.futures import ThreadPoolExecutor, Future, wait, FIRST_COMPLETED
from typing import Dict, Iterable, List, Optional, Union

from mrcount.config import PipelineConfig
from mrcount.combiner import combine
from mrcount.errors import EncodingError, PartitionTimeout, PipelineError
from mrcount.merger import FinalCount, finalize, merge, reduce_pairs, tree_merge
from mrcount.metrics import MetricsCollector
from mrcount.partitioner import Partition, Record, partition
from mrcount.tokenizer import map_partition

logger = logging.getLogger(__name__)

PENDING = "PENDING"
RUNNING = "RUNNING"
COMPLETED = "COMPLETED"
FAILED = "FAILED"
TIMED_OUT = "TIMED_OUT"
CANCELLED = "CANCELLED"


@dataclass
class PartitionResult:
    """Output of one partition's map/combine task"""

    index: int
    output: Union[Dict[str, int], List[tuple]]
    pairs_emitted: int
    intermediate_pairs: int
    elapsed_ms: int
    elapsed_seconds: float = 0.0


class Pipeline:
    """
    Runs the word count over a finite sequence of lines.

    Partition state is keyed by job id, so one instance can serve several
    runs at once; each run sees only its own partitions.
    """

    def __init__(self, config: Optional[PipelineConfig] = None,
                 metrics: Optional[MetricsCollector] = None):
        self.config = config or PipelineConfig()
        self.config.validate()
        self.metrics = metrics

        # Partition state tracking, keyed by _get_partition_key()
        self.partition_states: Dict[str, str] = {}
        self.partition_started: Dict[str, float] = {}
        self.last_job_id: Optional[str] = None
        self._state_lock = threading.Lock()

    def _get_partition_key(self, job_id: str, index: int) -> str:
        """Generate unique key for partition state tracking."""
        return f"{job_id}_{index}"

    def get_partition_state(self, index: int, job_id: Optional[str] = None) -> str:
        """Get the current state of a partition, for the most recent run by default."""
        with self._state_lock:
            job_id = job_id or self.last_job_id
            return self.partition_states.get(self._get_partition_key(job_id, index), "UNKNOWN")

    def _set_state(self, job_id: str, index: int, state: str):
        key = self._get_partition_key(job_id, index)
        with self._state_lock:
            # A timed out partition keeps that state once its thread winds down
            if self.partition_states.get(key) == TIMED_OUT:
                return
            self.partition_states[key] = state
            if state == RUNNING:
                self.partition_started[key] = time.monotonic()

    def _started_at(self, job_id: str, index: int) -> Optional[float]:
        with self._state_lock:
            return self.partition_started.get(self._get_partition_key(job_id, index))

    def _clear_job(self, job_id: str):
        """Drop start times of a finished run; states stay readable."""
        prefix = f"{job_id}_"
        with self._state_lock:
            for key in [k for k in self.partition_started if k.startswith(prefix)]:
                del self.partition_started[key]

    def run(self, records: Iterable[Record], job_id: Optional[str] = None) -> List[FinalCount]:
        """
        Count words across the input

        Args:
            records: Input lines (str, or bytes decoded as UTF-8)
            job_id: Identifier used in logs, metrics and partition state

        Returns:
            (word, total) tuples in ascending word order

        Raises:
            InputReadError: If reading the records fails
            PipelineError: If any partition fails or times out; no output is produced
        """
        job_id = job_id or str(uuid.uuid4())
        records = list(records)
        partitions = partition(records, self.config.partition_count, self.config.strategy)

        with self._state_lock:
            self.last_job_id = job_id
            for p in partitions:
                key = self._get_partition_key(job_id, p.index)
                self.partition_states[key] = PENDING
                self.partition_started.pop(key, None)

        logger.info(f"Job {job_id}: {len(records)} records in {len(partitions)} partitions "
                    f"(combiner={'on' if self.config.use_combiner else 'off'})")
        if self.metrics:
            self.metrics.start_job(job_id, len(partitions), self.config.use_combiner, len(records))

        try:
            results = self._run_partitions(job_id, partitions)
        except PipelineError:
            if self.metrics:
                self.metrics.end_job(job_id, succeeded=False)
            raise
        finally:
            self._clear_job(job_id)

        # Barrier passed: every partition has finished
        if self.metrics:
            self.metrics.start_merge_phase(job_id)
            for result in results:
                self.metrics.record_partition(job_id, result.index, result.pairs_emitted,
                                              result.intermediate_pairs, result.elapsed_ms)

        totals = self._merge(results)
        final_counts = finalize(totals)

        logger.info(f"Job {job_id}: Completed with {len(final_counts)} unique words")
        if self.metrics:
            self.metrics.end_job(job_id, unique_words=len(final_counts))
        return final_counts

    def _merge(self, results: List[PartitionResult]) -> Dict[str, int]:
        results = sorted(results, key=lambda r: r.index)
        if not self.config.use_combiner:
            pairs = (pair for result in results for pair in result.output)
            return reduce_pairs(pairs)
        partials = [result.output for result in results]
        if self.config.tree_merge:
            return tree_merge(partials)
        return merge(partials)

    def _process_partition(self, job_id: str, part: Partition,
                           abort: threading.Event) -> Optional[PartitionResult]:
        """Tokenize and combine one partition. Runs on a pool thread."""
        if abort.is_set():
            self._set_state(job_id, part.index, CANCELLED)
            return None

        self._set_state(job_id, part.index, RUNNING)
        start_time = time.monotonic()
        logger.debug(f"Partition {part.index}: Tokenizing {len(part)} records")

        try:
            emitted = 0

            def counted(pairs):
                nonlocal emitted
                for pair in pairs:
                    emitted += 1
                    yield pair

            pairs = counted(map_partition(part, should_stop=abort.is_set))
            if self.config.use_combiner:
                output = combine(pairs)
            else:
                output = list(pairs)

            if abort.is_set():
                # Another partition aborted the run; this output is discarded
                self._set_state(job_id, part.index, CANCELLED)
                return None

            elapsed = time.monotonic() - start_time
            logger.debug(f"Partition {part.index}: {emitted} pairs -> {len(output)} after combine "
                         f"in {int(elapsed * 1000)}ms")
            return PartitionResult(
                index=part.index,
                output=output,
                pairs_emitted=emitted,
                intermediate_pairs=len(output),
                elapsed_ms=int(elapsed * 1000),
                elapsed_seconds=elapsed,
            )

        except Exception as e:
            self._set_state(job_id, part.index, FAILED)
            logger.error(f"Partition {part.index} failed: {e}")
            raise

    def _poll_interval(self) -> Optional[float]:
        timeout = self.config.per_partition_timeout
        if timeout is None:
            return None
        return min(0.1, timeout / 4)

    def _run_partitions(self, job_id: str, partitions: List[Partition]) -> List[PartitionResult]:
        if not partitions:
            return []

        timeout = self.config.per_partition_timeout
        abort = threading.Event()
        executor = ThreadPoolExecutor(max_workers=min(self.config.worker_count, len(partitions)),
                                      thread_name_prefix=f"mrcount-{job_id[:8]}")
        futures: Dict[Future, Partition] = {
            executor.submit(self._process_partition, job_id, part, abort): part
            for part in partitions
        }
        pending = set(futures)
        results = []

        try:
            while pending:
                done, pending = wait(pending, timeout=self._poll_interval(),
                                     return_when=FIRST_COMPLETED)
                for future in done:
                    part = futures[future]
                    error = future.exception()
                    if error is not None:
                        record_index = error.record_index if isinstance(error, EncodingError) else None
                        raise PipelineError(part.index, str(error), record_index) from error
                    result = future.result()
                    # A partition that finished between polls is still held to its budget
                    if timeout is not None and result.elapsed_seconds > timeout:
                        overrun = self._mark_timed_out(job_id, part.index)
                        raise PipelineError(part.index, str(overrun)) from overrun
                    self._set_state(job_id, part.index, COMPLETED)
                    results.append(result)
                self._check_timeouts(job_id, pending, futures)
        except PipelineError as e:
            abort.set()
            for future in pending:
                if future.cancel():
                    self._set_state(job_id, futures[future].index, CANCELLED)
            executor.shutdown(wait=False)
            logger.error(f"Job {job_id}: {e}")
            raise

        executor.shutdown(wait=True)
        return results

    def _mark_timed_out(self, job_id: str, index: int) -> PartitionTimeout:
        """Record a partition as over budget and return the matching error"""
        self._set_state(job_id, index, TIMED_OUT)
        return PartitionTimeout(index, self.config.per_partition_timeout)

    def _check_timeouts(self, job_id: str, pending, futures: Dict[Future, Partition]):
        timeout = self.config.per_partition_timeout
        if timeout is None:
            return
        now = time.monotonic()
        for future in pending:
            part = futures[future]
            started = self._started_at(job_id, part.index)
            if started is not None and now - started > timeout:
                error = self._mark_timed_out(job_id, part.index)
                raise PipelineError(part.index, str(error)) from error


def word_count(lines: Iterable[Record], partition_count: int = 1,
               per_partition_timeout: Optional[float] = None) -> List[FinalCount]:
    """Count words in lines with the default pipeline settings"""
    config = PipelineConfig(partition_count=partition_count,
                            per_partition_timeout=per_partition_timeout)
    return Pipeline(config).run(lines)
