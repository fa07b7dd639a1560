#!/usr/bin/env python3
"""
Word count CLI
Runs the map/combine/merge pipeline over a text file and writes sorted counts
"""

import argparse
import sys
import uuid
import logging
from dataclasses import replace

from mrcount.config import PipelineConfig, STRATEGIES
from mrcount.errors import MRCountError, OutputWriteError
from mrcount.io import read_lines, write_counts
from mrcount.metrics import MetricsCollector
from mrcount.pipeline import Pipeline

logger = logging.getLogger(__name__)


def build_config(args) -> PipelineConfig:
    """Environment defaults overridden by command-line options"""
    config = PipelineConfig.from_env()
    overrides = {}
    if args.partitions is not None:
        overrides['partition_count'] = args.partitions
    if args.timeout is not None:
        overrides['per_partition_timeout'] = args.timeout
    if args.workers is not None:
        overrides['max_workers'] = args.workers
    if args.strategy is not None:
        overrides['strategy'] = args.strategy
    if getattr(args, 'no_combiner', False):
        overrides['use_combiner'] = False
    if args.tree_merge:
        overrides['tree_merge'] = True
    config = replace(config, **overrides)
    config.validate()
    return config


def run_job(args) -> int:
    """Count words in the input and write the result"""
    try:
        config = build_config(args)
        collector = MetricsCollector()
        pipeline = Pipeline(config, metrics=collector)
        job_id = args.job_id or str(uuid.uuid4())

        counts = pipeline.run(read_lines(args.input), job_id=job_id)
        write_counts(counts, args.output)

        metrics = collector.get_metrics(job_id)
        if args.metrics_file and metrics:
            try:
                metrics.save_to_file(args.metrics_file)
            except OSError as e:
                raise OutputWriteError(args.metrics_file, e.strerror or str(e)) from e
            logger.info(f"Saved metrics to {args.metrics_file}")
    except MRCountError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def compare_combiner(args) -> int:
    """Run the same input with and without the combiner and report the difference"""
    try:
        base = build_config(args)
        records = list(read_lines(args.input))
        collector = MetricsCollector()
        outputs = {}
        for use_combiner in (False, True):
            job_id = f"compare-{'combiner' if use_combiner else 'plain'}-{uuid.uuid4().hex[:8]}"
            pipeline = Pipeline(replace(base, use_combiner=use_combiner), metrics=collector)
            outputs[use_combiner] = (job_id, pipeline.run(records, job_id=job_id))
    except MRCountError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    plain_id, plain_counts = outputs[False]
    combined_id, combined_counts = outputs[True]
    plain = collector.get_metrics(plain_id)
    combined = collector.get_metrics(combined_id)

    print(f"{'':<20}{'no combiner':>15}{'combiner':>15}")
    print(f"{'pairs emitted':<20}{plain.pairs_emitted:>15}{combined.pairs_emitted:>15}")
    print(f"{'pairs merged':<20}{plain.intermediate_pairs:>15}{combined.intermediate_pairs:>15}")
    print(f"{'runtime (s)':<20}{plain.total_time_seconds:>15.3f}{combined.total_time_seconds:>15.3f}")
    print(f"Combiner reduction ratio: {combined.combiner_reduction_ratio:.1%}")

    if plain_counts != combined_counts:
        print("Error: outputs differ between runs", file=sys.stderr)
        return 1
    print(f"Outputs identical ({len(combined_counts)} unique words)")
    return 0


def _add_pipeline_options(parser):
    parser.add_argument("--input", "-i", required=True, help="Input text file ('-' for stdin)")
    parser.add_argument("--partitions", "-p", type=int, help="Number of partitions")
    parser.add_argument("--timeout", type=float, help="Per-partition timeout in seconds")
    parser.add_argument("--workers", type=int, help="Worker threads (default: one per partition)")
    parser.add_argument("--strategy", choices=STRATEGIES, help="Partitioning strategy")
    parser.add_argument("--tree-merge", action="store_true", help="Merge subtotals pairwise")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mrcount", description="Word count with a combiner")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    run_parser = subparsers.add_parser("run", help="Count words in a file")
    _add_pipeline_options(run_parser)
    run_parser.add_argument("--output", "-o", default="-", help="Output file ('-' for stdout)")
    run_parser.add_argument("--no-combiner", action="store_true", help="Skip local pre-aggregation")
    run_parser.add_argument("--job-id", help="Job identifier used in logs and metrics")
    run_parser.add_argument("--metrics-file", help="Write run metrics as JSON")

    compare_parser = subparsers.add_parser("compare", help="Compare runs with and without combiner")
    _add_pipeline_options(compare_parser)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.command == "run":
        return run_job(args)
    elif args.command == "compare":
        return compare_combiner(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
