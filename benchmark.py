#!/usr/bin/env python3
"""
Automated benchmarking script for the word-frequency engine.
Generates inputs, runs multiple job configurations in-process and
collects performance metrics.
"""

import argparse
import csv
import json
import sys
import time
from datetime import datetime
from pathlib import Path

from mrwordfreq.config import JobConfig
from mrwordfreq.coordinator.job_manager import new_job_id
from mrwordfreq.coordinator.scheduler import JobScheduler
from mrwordfreq.errors import JobError

# Configuration
RESULTS_DIR = Path("benchmark_results")
INPUT_DIR = Path("shared") / "input"

SAMPLE_TEXT = b"""The quick brown fox jumps over the lazy dog.
The dog was really lazy.
The fox was very quick and brown.
Quick brown foxes are amazing animals.
Lazy dogs sleep all day.
"""

INPUTS = {
    "medium": 1024 * 1024,         # ~1MB
    "large": 10 * 1024 * 1024,     # ~10MB
}

# Benchmark configurations
BENCHMARKS = [
    # Experiment 1: Chunk size scaling (fixed parallelism)
    {"name": "chunk_size_64k", "input": "large", "chunk_size": 64 * 1024, "workers": 4,
     "description": "64KB chunks, 4 workers"},
    {"name": "chunk_size_256k", "input": "large", "chunk_size": 256 * 1024, "workers": 4,
     "description": "256KB chunks, 4 workers"},
    {"name": "chunk_size_1m", "input": "large", "chunk_size": 1024 * 1024, "workers": 4,
     "description": "1MB chunks, 4 workers"},
    {"name": "chunk_size_4m", "input": "large", "chunk_size": 4 * 1024 * 1024, "workers": 4,
     "description": "4MB chunks, 4 workers"},

    # Experiment 2: Worker scaling (fixed chunk size)
    {"name": "worker_scaling_1", "input": "large", "chunk_size": 256 * 1024, "workers": 1,
     "description": "1 worker"},
    {"name": "worker_scaling_2", "input": "large", "chunk_size": 256 * 1024, "workers": 2,
     "description": "2 workers"},
    {"name": "worker_scaling_4", "input": "large", "chunk_size": 256 * 1024, "workers": 4,
     "description": "4 workers"},
    {"name": "worker_scaling_8", "input": "large", "chunk_size": 256 * 1024, "workers": 8,
     "description": "8 workers"},

    # Experiment 3: Store backend
    {"name": "store_memory", "input": "medium", "chunk_size": 64 * 1024, "workers": 4,
     "store": "memory", "description": "In-memory intermediate store"},
    {"name": "store_disk", "input": "medium", "chunk_size": 64 * 1024, "workers": 4,
     "store": "disk", "description": "On-disk intermediate store"},
]


def generate_file(output_path: Path, target_size: int, source_content: bytes) -> int:
    """
    Generate a file by replicating source content until target size is reached.

    Args:
        output_path: Path where the output file should be written
        target_size: Target file size in bytes
        source_content: The content to replicate

    Returns:
        Size of the written file in bytes
    """
    source_size = len(source_content)
    if source_size == 0:
        raise ValueError("Source content is empty!")

    replications = target_size // source_size

    with open(output_path, 'wb') as f:
        for _ in range(replications):
            f.write(source_content)

        # Partial replication to reach the exact size
        remaining = target_size - replications * source_size
        if remaining > 0:
            f.write(source_content[:remaining])

    return output_path.stat().st_size


def prepare_inputs(input_dir: Path, sizes: dict, source_content: bytes = SAMPLE_TEXT) -> dict:
    """Create every benchmark input that is missing; returns name -> path"""
    input_dir.mkdir(parents=True, exist_ok=True)
    paths = {}
    for name, target_size in sizes.items():
        path = input_dir / f"bench_{name}.txt"
        if not path.exists() or path.stat().st_size != target_size:
            actual = generate_file(path, target_size, source_content)
            print(f"  ✓ Created: {path} ({actual / (1024 * 1024):.2f} MB)")
        paths[name] = path
    return paths


def run_benchmark(config: dict, input_path: Path, run_number: int = 1,
                  intermediate_dir: Path = Path("shared") / "intermediate") -> dict:
    """Run a single benchmark configuration."""
    print(f"\n{'=' * 70}")
    print(f"Benchmark: {config['name']} (Run {run_number})")
    print(f"Description: {config['description']}")
    print(f"{'=' * 70}")

    job_config = JobConfig(
        chunk_size=config["chunk_size"],
        max_workers=config["workers"],
        store=config.get("store", "memory"),
        intermediate_dir=str(intermediate_dir)
    )
    scheduler = JobScheduler(job_config)
    job_id = new_job_id()
    input_size = input_path.stat().st_size

    start = time.time()
    error_message = ""
    try:
        result = scheduler.run(str(input_path), job_id=job_id)
        success = True
        distinct_words = len(result)
    except JobError as e:
        success = False
        distinct_words = 0
        error_message = str(e)
    duration = time.time() - start

    metrics = scheduler.metrics.get_metrics(job_id)
    print(f"  {'✓' if success else '❌'} {duration:.2f}s, {distinct_words} distinct words")

    return {
        "benchmark_name": config["name"],
        "description": config["description"],
        "run_number": run_number,
        "timestamp": datetime.now().isoformat(),
        "job_id": job_id,
        "input_file": str(input_path),
        "input_size_bytes": input_size,
        "input_size_mb": round(input_size / 1024 / 1024, 2),
        "chunk_size": config["chunk_size"],
        "num_chunks": metrics.num_chunks,
        "workers": config["workers"],
        "store": job_config.store,
        "success": success,
        "error_message": error_message,
        "total_runtime_seconds": round(duration, 4),
        "map_phase_seconds": round(metrics.map_phase_time_seconds, 4),
        "reduce_phase_seconds": round(metrics.reduce_phase_time_seconds, 4),
        "throughput_mbps": round(metrics.throughput_mbps, 3),
        "distinct_words": distinct_words,
        "peak_rss_mb": round(metrics.peak_rss_bytes / 1024 / 1024, 2),
    }


def save_results(results, timestamp, results_dir: Path = RESULTS_DIR):
    """Save results to JSON and CSV files."""
    results_dir.mkdir(parents=True, exist_ok=True)

    json_file = results_dir / f"benchmark_results_{timestamp}.json"
    with open(json_file, 'w') as f:
        json.dump(results, f, indent=2)
    print(f"\n✓ Results saved to: {json_file}")

    csv_file = results_dir / f"benchmark_results_{timestamp}.csv"
    if results:
        fieldnames = list(results[0].keys())
        with open(csv_file, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(results)
        print(f"✓ Results saved to: {csv_file}")

    return json_file, csv_file


def print_summary(results):
    """Print a summary table of results."""
    print(f"\n{'=' * 70}")
    print("BENCHMARK SUMMARY")
    print(f"{'=' * 70}")
    print(f"{'Benchmark':<25} {'Chunks':>7} {'Workers':>7} {'Runtime':>10} {'Status':>8}")
    print(f"{'-' * 70}")

    for r in results:
        print(f"{r['benchmark_name']:<25} {r['num_chunks']:>7} "
              f"{r['workers']:>7} {r['total_runtime_seconds']:>9.2f}s "
              f"{'✓' if r['success'] else '✗':>8}")

    print(f"{'=' * 70}")
    successful = sum(1 for r in results if r['success'])
    print(f"Total: {len(results)} benchmarks, {successful} successful, "
          f"{len(results) - successful} failed")


def main():
    """Main benchmarking workflow."""
    parser = argparse.ArgumentParser(description="Benchmark the word-frequency engine")
    parser.add_argument('--runs', type=int, default=3, help='Runs per configuration (default: 3)')
    parser.add_argument('--only', help='Run only benchmarks whose name starts with this prefix')
    args = parser.parse_args()

    print("=" * 70)
    print("Word-Frequency Benchmark Suite")
    print("=" * 70)

    paths = prepare_inputs(INPUT_DIR, INPUTS)
    selected = [b for b in BENCHMARKS if not args.only or b["name"].startswith(args.only)]
    if not selected:
        print(f"❌ No benchmark matches {args.only!r}")
        return 1

    results = []
    for config in selected:
        for run_number in range(1, args.runs + 1):
            results.append(run_benchmark(config, paths[config["input"]], run_number))

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    save_results(results, timestamp)
    print_summary(results)
    return 0 if all(r['success'] for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
