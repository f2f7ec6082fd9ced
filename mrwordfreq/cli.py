"""
Command-line front end for running jobs and managing intermediate records.
"""

import argparse
import logging
import os
import sys

from mrwordfreq.common.store import DiskStore, discover_records
from mrwordfreq.config import JobConfig, DEFAULT_INTERMEDIATE_DIR, STORE_BACKENDS, READERS
from mrwordfreq.coordinator.job_manager import new_job_id
from mrwordfreq.coordinator.scheduler import JobScheduler
from mrwordfreq.errors import JobError

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str):
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def build_config(args) -> JobConfig:
    """Config file first, then command-line flags on top"""
    config = JobConfig.from_file(args.config) if args.config else JobConfig()
    return config.with_overrides(
        chunk_size=args.chunk_size,
        max_workers=args.workers,
        store=args.store,
        intermediate_dir=args.intermediate_dir,
        reader=args.reader,
        keep_intermediate=True if args.keep_intermediate else None
    ).validate()


def run_job(args) -> int:
    """Run a job and write its word:count lines."""
    config = build_config(args)
    scheduler = JobScheduler(config)
    job_id = new_job_id()

    try:
        result = scheduler.run(args.input, job_id=job_id)
    finally:
        if args.metrics and scheduler.metrics.get_metrics(job_id):
            scheduler.metrics.get_metrics(job_id).save_to_file(args.metrics)

    if args.output:
        result.save(args.output)
        print(f"Job {job_id}: wrote {len(result)} words to {args.output}", file=sys.stderr)
    else:
        result.write(sys.stdout)

    if config.keep_intermediate and config.store == 'disk':
        print(f"Intermediate records kept in {config.intermediate_dir} (job {job_id})", file=sys.stderr)
    return 0


def inspect_records(args) -> int:
    """List intermediate records left on disk."""
    jobs = discover_records(args.intermediate_dir)
    if args.job_id:
        jobs = {k: v for k, v in jobs.items() if k == args.job_id}

    if not jobs:
        print(f"No intermediate records found in {args.intermediate_dir}")
        return 1

    for job_id, partitions in sorted(jobs.items()):
        store = DiskStore(args.intermediate_dir, job_id)
        print(f"Job: {job_id}")
        print(f"  Partitions: {len(partitions)}")

        total_tokens = 0
        for partition_id in partitions:
            size = os.path.getsize(store.path_for(partition_id))
            try:
                table = store.get(partition_id)
            except JobError as e:
                print(f"    Partition {partition_id}: ERROR - {e}")
                continue

            tokens = sum(table.values())
            total_tokens += tokens
            print(f"    Partition {partition_id}: {len(table)} words, {tokens} tokens, {size} bytes")
            if table:
                sample = sorted(table.items())[:3]
                print(f"      Sample: {sample}")

        print(f"  Total tokens for job {job_id}: {total_tokens}")
        print()
    return 0


def cleanup_records(args) -> int:
    """Delete intermediate records left on disk."""
    jobs = discover_records(args.intermediate_dir)
    if args.job_id:
        jobs = {k: v for k, v in jobs.items() if k == args.job_id}

    removed = 0
    for job_id, partitions in sorted(jobs.items()):
        store = DiskStore(args.intermediate_dir, job_id)
        for partition_id in partitions:
            if args.dry_run:
                print(f"Would delete: {store.path_for(partition_id)}")
                removed += 1
            elif store.delete(partition_id):
                removed += 1

    verb = "Would remove" if args.dry_run else "Removed"
    print(f"{verb} {removed} intermediate records from {args.intermediate_dir}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mrwordfreq',
        description='Word-frequency counting with a local map/reduce pipeline',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s run corpus.txt                          # counts to stdout
  %(prog)s run corpus.txt --chunk-size 65536 -o counts.txt
  %(prog)s run corpus.txt --store disk --keep-intermediate
  %(prog)s inspect --intermediate-dir shared/intermediate
  %(prog)s cleanup --dry-run
        """
    )
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: INFO)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    run_parser = subparsers.add_parser('run', help='Count the words of an input file')
    run_parser.add_argument('input', help='Path to the input text file')
    run_parser.add_argument('--chunk-size', type=int, help='Bytes per map chunk')
    run_parser.add_argument('--workers', type=int, help='Concurrent tasks per phase')
    run_parser.add_argument('--store', choices=STORE_BACKENDS, help='Intermediate store backend')
    run_parser.add_argument('--intermediate-dir', help='Directory for the disk store')
    run_parser.add_argument('--reader', choices=READERS, help='How chunks are read from the input')
    run_parser.add_argument('--keep-intermediate', action='store_true',
                            help='Keep intermediate records after the job')
    run_parser.add_argument('--config', help='JSON configuration file')
    run_parser.add_argument('--output', '-o', help='Write results here instead of stdout')
    run_parser.add_argument('--metrics', help='Write job metrics as JSON to this file')
    run_parser.set_defaults(func=run_job)

    for name, func, help_text in (
        ('inspect', inspect_records, 'List intermediate records on disk'),
        ('cleanup', cleanup_records, 'Delete intermediate records on disk'),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('--intermediate-dir', default=DEFAULT_INTERMEDIATE_DIR,
                         help=f'Directory of the disk store (default: {DEFAULT_INTERMEDIATE_DIR})')
        sub.add_argument('--job-id', help='Only this job')
        if name == 'cleanup':
            sub.add_argument('--dry-run', '-n', action='store_true',
                             help='Show what would be deleted without deleting')
        sub.set_defaults(func=func)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        return args.func(args)
    except JobError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
