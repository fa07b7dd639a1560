"""
Unit tests for the benchmark helpers
"""

import json
import os
from pathlib import Path

from mrcount.benchmark import aggregate_runs, generate_lines, main, run_benchmark, save_results


class TestGenerateLines:
    """Tests for synthetic input"""

    def test_is_reproducible(self):
        """Test that the same seed gives the same text"""
        assert generate_lines(20, seed=1) == generate_lines(20, seed=1)

    def test_line_count(self):
        """Test requested number of lines"""
        assert len(generate_lines(15)) == 15


class TestRunBenchmark:
    """Tests for single benchmark runs"""

    def test_combiner_reduces_merged_pairs(self):
        """Test that the combiner shrinks the volume crossing the barrier"""
        lines = generate_lines(200, vocabulary_size=50)

        plain = run_benchmark(lines, partition_count=2, use_combiner=False)
        combined = run_benchmark(lines, partition_count=2, use_combiner=True)

        assert plain['pairs_emitted'] == combined['pairs_emitted']
        assert combined['intermediate_pairs'] < plain['intermediate_pairs']

    def test_aggregate_runs(self):
        """Test averaging repeated runs"""
        results = [run_benchmark(generate_lines(10), 1, True, run) for run in (1, 2)]
        aggregated = aggregate_runs(results)

        entry = aggregated['partitions_1_combiner']
        assert entry['num_runs'] == 2
        assert entry['min_runtime'] <= entry['avg_runtime'] <= entry['max_runtime']


class TestBenchmarkOutput:
    """Tests for saved results"""

    def test_save_results(self, temp_dir):
        """Test JSON and CSV output files"""
        results = [run_benchmark(generate_lines(10), 1, True)]
        json_file, csv_file = save_results(results, Path(temp_dir), 'ts')

        with open(json_file) as f:
            assert json.load(f)[0]['partition_count'] == 1
        assert csv_file.exists()

    def test_main_writes_plot(self, temp_dir):
        """Test a small end-to-end benchmark with plotting"""
        assert main(['--lines', '50', '--partitions', '1', '2', '--output-dir', temp_dir]) == 0

        files = os.listdir(temp_dir)
        assert any(name.endswith('.png') for name in files)
        assert any(name.endswith('.csv') for name in files)

    def test_main_missing_input_fails(self, temp_dir, capsys):
        """Test exit code for an unreadable input file"""
        missing = os.path.join(temp_dir, 'nope.txt')

        assert main(['--input', missing, '--no-plot', '--output-dir', temp_dir]) == 1
        assert 'Cannot read input' in capsys.readouterr().err
        assert os.listdir(temp_dir) == []
