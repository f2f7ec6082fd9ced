#!/usr/bin/env python3
"""
Generate plots from benchmark results.
"""

import json
import sys
from pathlib import Path
from collections import defaultdict

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

# Configuration
PLOTS_DIR = Path("benchmark_results/plots")


def load_results(json_file):
    """Load benchmark results from JSON file."""
    with open(json_file, 'r') as f:
        return json.load(f)


def aggregate_runs(results):
    """
    Aggregate multiple runs of the same benchmark.
    Returns dict: benchmark_name -> {avg_runtime, std_runtime, config, ...}
    """
    by_benchmark = defaultdict(list)

    for r in results:
        if r['success']:  # Only include successful runs
            by_benchmark[r['benchmark_name']].append(r)

    aggregated = {}
    for name, runs in by_benchmark.items():
        runtimes = [r['total_runtime_seconds'] for r in runs]
        throughputs = [r['throughput_mbps'] for r in runs]

        # Use first run for configuration data
        first = runs[0]

        aggregated[name] = {
            'benchmark_name': name,
            'description': first['description'],
            'chunk_size': first['chunk_size'],
            'num_chunks': first['num_chunks'],
            'workers': first['workers'],
            'input_size_mb': first['input_size_mb'],
            'avg_runtime': float(np.mean(runtimes)),
            'std_runtime': float(np.std(runtimes)),
            'min_runtime': float(np.min(runtimes)),
            'max_runtime': float(np.max(runtimes)),
            'avg_throughput': float(np.mean(throughputs)),
            'num_runs': len(runs)
        }

    return aggregated


def _series(aggregated, prefix, field):
    data = [(v[field], v['avg_runtime'], v['std_runtime'])
            for k, v in aggregated.items()
            if k.startswith(prefix)]
    data.sort()
    return data


def plot_chunk_size_scaling(aggregated, output_file):
    """Plot runtime vs chunk size."""
    data = _series(aggregated, 'chunk_size_', 'chunk_size')
    if not data:
        print("⚠️  No chunk size scaling data found")
        return

    sizes, runtimes, stds = zip(*data)
    sizes_kb = [s / 1024 for s in sizes]

    plt.figure(figsize=(10, 6))
    plt.errorbar(sizes_kb, runtimes, yerr=stds, marker='o', capsize=5,
                 linewidth=2, markersize=8)
    plt.xscale('log', base=2)
    plt.xlabel('Chunk Size (KB)', fontsize=12)
    plt.ylabel('Runtime (seconds)', fontsize=12)
    plt.title('Word Frequency Performance: Chunk Size Scaling',
              fontsize=14, fontweight='bold')
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(output_file, dpi=300, bbox_inches='tight')
    print(f"✓ Saved: {output_file}")
    plt.close()


def plot_worker_scaling(aggregated, output_file):
    """Plot runtime vs number of workers."""
    data = _series(aggregated, 'worker_scaling_', 'workers')
    if not data:
        print("⚠️  No worker scaling data found")
        return

    workers, runtimes, stds = zip(*data)

    plt.figure(figsize=(10, 6))
    plt.errorbar(workers, runtimes, yerr=stds, marker='s', capsize=5,
                 linewidth=2, markersize=8, color='orangered')
    plt.xlabel('Number of Workers', fontsize=12)
    plt.ylabel('Runtime (seconds)', fontsize=12)
    plt.title('Word Frequency Performance: Worker Parallelism',
              fontsize=14, fontweight='bold')
    plt.xticks(workers)
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(output_file, dpi=300, bbox_inches='tight')
    print(f"✓ Saved: {output_file}")
    plt.close()


def compute_speedup(aggregated):
    """Speedup of each worker count relative to the smallest one."""
    data = _series(aggregated, 'worker_scaling_', 'workers')
    if len(data) < 2:
        return []
    baseline = data[0][1]
    return [(workers, baseline / runtime) for workers, runtime, _ in data]


def plot_speedup(aggregated, output_file):
    """Plot speedup for worker scaling."""
    speedups = compute_speedup(aggregated)
    if not speedups:
        print("⚠️  Insufficient data for speedup plot")
        return

    workers, actual = zip(*speedups)

    plt.figure(figsize=(10, 6))
    plt.plot(workers, actual, marker='o', linewidth=2, markersize=8,
             label='Actual Speedup', color='blue')
    plt.plot(workers, list(workers), linestyle='--', linewidth=2,
             label='Ideal (Linear) Speedup', color='gray', alpha=0.7)
    plt.xlabel('Number of Workers', fontsize=12)
    plt.ylabel('Speedup', fontsize=12)
    plt.title('Speedup vs Ideal Linear Speedup',
              fontsize=14, fontweight='bold')
    plt.xticks(workers)
    plt.legend(fontsize=11)
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(output_file, dpi=300, bbox_inches='tight')
    print(f"✓ Saved: {output_file}")
    plt.close()


def generate_summary_table(aggregated, output_file):
    """Generate a markdown table summarizing all results."""
    lines = [
        "# Benchmark Results Summary\n",
        "| Benchmark | Chunk (KB) | Chunks | Workers | Input (MB) | Avg Runtime (s) | Std Dev | Throughput (MB/s) |",
        "|-----------|------------|--------|---------|------------|-----------------|---------|-------------------|"
    ]

    for name in sorted(aggregated.keys()):
        v = aggregated[name]
        lines.append(
            f"| {v['benchmark_name']:<21} | {v['chunk_size'] // 1024:>10} | "
            f"{v['num_chunks']:>6} | {v['workers']:>7} | {v['input_size_mb']:>10.2f} | "
            f"{v['avg_runtime']:>15.2f} | {v['std_runtime']:>7.3f} | "
            f"{v['avg_throughput']:>17.3f} |"
        )

    with open(output_file, 'w') as f:
        f.write('\n'.join(lines))

    print(f"✓ Saved: {output_file}")


def main():
    """Generate all plots from benchmark results."""
    if len(sys.argv) < 2:
        print("Usage: python plot_results.py <results.json>")
        print("\nExample:")
        print("  python plot_results.py benchmark_results/benchmark_results_20250113_120000.json")
        sys.exit(1)

    json_file = sys.argv[1]

    if not Path(json_file).exists():
        print(f"❌ File not found: {json_file}")
        sys.exit(1)

    print(f"Loading results from: {json_file}")
    results = load_results(json_file)
    print(f"✓ Loaded {len(results)} benchmark results")

    aggregated = aggregate_runs(results)
    print(f"✓ Aggregated into {len(aggregated)} unique benchmarks")

    PLOTS_DIR.mkdir(parents=True, exist_ok=True)

    print("\nGenerating plots...")
    plot_chunk_size_scaling(aggregated, PLOTS_DIR / "1_chunk_size_scaling.png")
    plot_worker_scaling(aggregated, PLOTS_DIR / "2_worker_scaling.png")
    plot_speedup(aggregated, PLOTS_DIR / "3_speedup_analysis.png")
    generate_summary_table(aggregated, PLOTS_DIR / "results_table.md")

    print(f"\n{'=' * 70}")
    print(f"All plots saved to: {PLOTS_DIR}/")
    print(f"{'=' * 70}")


if __name__ == "__main__":
    main()
