#!/usr/bin/env python3
"""
Benchmark the pipeline across partition counts, with and without combiner.
Saves raw results as JSON/CSV and plots runtime and merged pair volume.
"""

import argparse
import csv
import json
import random
import sys
import time
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Sequence

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

from mrcount.config import PipelineConfig
from mrcount.errors import MRCountError
from mrcount.io import read_lines
from mrcount.metrics import MetricsCollector
from mrcount.pipeline import Pipeline

# Configuration
RESULTS_DIR = Path("benchmark_results")
PARTITION_COUNTS = [1, 2, 4, 8]
VOCABULARY_SIZE = 5000
WORDS_PER_LINE = 12


def generate_lines(num_lines: int, vocabulary_size: int = VOCABULARY_SIZE,
                   seed: int = 42) -> List[str]:
    """
    Generate synthetic text with a skewed word distribution.

    Word frequencies follow a Zipf-like curve so that the combiner has
    repeated words to fold, as in natural text.
    """
    rng = random.Random(seed)
    vocabulary = [f"w{i}" for i in range(vocabulary_size)]
    weights = [1.0 / (rank + 1) for rank in range(vocabulary_size)]
    return [
        " ".join(rng.choices(vocabulary, weights=weights, k=WORDS_PER_LINE))
        for _ in range(num_lines)
    ]


def run_benchmark(records: Sequence, partition_count: int, use_combiner: bool,
                  run_number: int = 1) -> dict:
    """Run the pipeline once and return a flat result row."""
    collector = MetricsCollector()
    job_id = f"bench-p{partition_count}-{'c' if use_combiner else 'n'}-{run_number}"
    config = PipelineConfig(partition_count=partition_count, use_combiner=use_combiner)

    start = time.time()
    Pipeline(config, metrics=collector).run(records, job_id=job_id)
    runtime = time.time() - start

    metrics = collector.get_metrics(job_id)
    return {
        'benchmark_name': f"partitions_{partition_count}_{'combiner' if use_combiner else 'plain'}",
        'run_number': run_number,
        'partition_count': partition_count,
        'use_combiner': use_combiner,
        'records': len(records),
        'total_runtime_seconds': runtime,
        'map_phase_seconds': metrics.map_phase_time_seconds,
        'merge_phase_seconds': metrics.merge_phase_time_seconds,
        'pairs_emitted': metrics.pairs_emitted,
        'intermediate_pairs': metrics.intermediate_pairs,
        'peak_rss_bytes': metrics.peak_rss_bytes,
    }


def aggregate_runs(results: List[dict]) -> Dict[str, dict]:
    """
    Aggregate multiple runs of the same benchmark.
    Returns dict: benchmark_name -> {avg_runtime, std_runtime, config, ...}
    """
    by_benchmark = defaultdict(list)
    for r in results:
        by_benchmark[r['benchmark_name']].append(r)

    aggregated = {}
    for name, runs in by_benchmark.items():
        runtimes = [r['total_runtime_seconds'] for r in runs]
        first = runs[0]
        aggregated[name] = {
            'benchmark_name': name,
            'partition_count': first['partition_count'],
            'use_combiner': first['use_combiner'],
            'intermediate_pairs': first['intermediate_pairs'],
            'avg_runtime': float(np.mean(runtimes)),
            'std_runtime': float(np.std(runtimes)),
            'min_runtime': float(np.min(runtimes)),
            'max_runtime': float(np.max(runtimes)),
            'num_runs': len(runs),
        }
    return aggregated


def save_results(results: List[dict], output_dir: Path, timestamp: str):
    """Save raw results as JSON and CSV."""
    output_dir.mkdir(parents=True, exist_ok=True)
    json_file = output_dir / f"benchmark_{timestamp}.json"
    csv_file = output_dir / f"benchmark_{timestamp}.csv"

    with open(json_file, 'w') as f:
        json.dump(results, f, indent=2)

    with open(csv_file, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=list(results[0].keys()))
        writer.writeheader()
        writer.writerows(results)

    return json_file, csv_file


def plot_results(aggregated: Dict[str, dict], output_file: Path):
    """Plot runtime and merged pairs against partition count, one line per combiner mode."""
    fig, (ax_time, ax_pairs) = plt.subplots(1, 2, figsize=(14, 6))

    for use_combiner, label, color in ((False, 'No combiner', 'orangered'),
                                       (True, 'Combiner', 'steelblue')):
        data = sorted(
            (v['partition_count'], v['avg_runtime'], v['std_runtime'], v['intermediate_pairs'])
            for v in aggregated.values()
            if v['use_combiner'] == use_combiner
        )
        if not data:
            continue
        partitions, runtimes, stds, pairs = zip(*data)
        ax_time.errorbar(partitions, runtimes, yerr=stds, marker='o', capsize=5,
                         linewidth=2, markersize=8, color=color, label=label)
        ax_pairs.plot(partitions, pairs, marker='s', linewidth=2, markersize=8,
                      color=color, label=label)

    ax_time.set_xlabel('Partitions', fontsize=12)
    ax_time.set_ylabel('Runtime (seconds)', fontsize=12)
    ax_time.set_title('Runtime vs Partitions', fontsize=14, fontweight='bold')
    ax_pairs.set_xlabel('Partitions', fontsize=12)
    ax_pairs.set_ylabel('Pairs crossing the merge barrier', fontsize=12)
    ax_pairs.set_title('Intermediate Volume vs Partitions', fontsize=14, fontweight='bold')
    for ax in (ax_time, ax_pairs):
        ax.grid(True, alpha=0.3)
        ax.legend()

    fig.tight_layout()
    fig.savefig(output_file, dpi=150, bbox_inches='tight')
    plt.close(fig)
    print(f"✓ Saved: {output_file}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Benchmark the word count pipeline")
    parser.add_argument("--input", help="Input text file (default: generated text)")
    parser.add_argument("--lines", type=int, default=50000, help="Generated input size in lines")
    parser.add_argument("--partitions", type=int, nargs="+", default=PARTITION_COUNTS,
                        help="Partition counts to benchmark")
    parser.add_argument("--runs", type=int, default=1, help="Runs per configuration")
    parser.add_argument("--output-dir", default=str(RESULTS_DIR), help="Results directory")
    parser.add_argument("--no-plot", action="store_true", help="Skip plotting")
    args = parser.parse_args(argv)

    try:
        if args.input:
            records = list(read_lines(args.input))
        else:
            records = generate_lines(args.lines)

        print("=" * 70)
        print(f"Word count benchmark: {len(records)} lines, partitions {args.partitions}, "
              f"{args.runs} run(s) each")
        print("=" * 70)

        results = []
        for partition_count in args.partitions:
            for use_combiner in (False, True):
                for run in range(1, args.runs + 1):
                    result = run_benchmark(records, partition_count, use_combiner, run)
                    print(f"  {result['benchmark_name']:<28} run {run}: "
                          f"{result['total_runtime_seconds']:.3f}s, "
                          f"{result['intermediate_pairs']} merged pairs")
                    results.append(result)
    except MRCountError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not results:
        print("No results collected")
        return 1

    output_dir = Path(args.output_dir)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    json_file, csv_file = save_results(results, output_dir, timestamp)
    print(f"✓ Saved: {json_file}")
    print(f"✓ Saved: {csv_file}")

    if not args.no_plot:
        plot_results(aggregate_runs(results), output_dir / f"benchmark_{timestamp}.png")
    return 0


if __name__ == "__main__":
    sys.exit(main())
