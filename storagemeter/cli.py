#!/usr/bin/env python3
"""
StorageMeter
Измерение скорости последовательной записи на диск с ростом числа потоков
"""
import os
import sys
import argparse
from pathlib import Path

from .errors import StorageMeterError
from .filesystem import thread_file_name
from .metrics import MetricsCollector
from .visualize import generate_all_plots
from .scaling import PlateauDetector, CALIBRATION_FILE_NAME
from .workloads import WorkloadConfig, PORTION_SIZE, PORTIONS_COUNT, MAX_TEST_DURATION, MAX_SLOW_TESTS


TEMP_DIR_NAME = "storagemeter_tmp"


def check_target(target: str):
    """Проверка целевой директории"""
    issues = []
    if not target:
        issues.append("no target directory given")
        return issues

    target_path = Path(target)
    if not target_path.exists():
        issues.append(f"target does not exist: {target}")
    elif not target_path.is_dir():
        issues.append(f"target is not a directory: {target}")
    elif not os.access(target_path, os.W_OK):
        issues.append(f"target is not writable: {target}")
    return issues


def prompt_target() -> str:
    return input("Enter the directory you want to test: ").strip()


def prepare_temp_dir(target: Path):
    """Создание временной директории. Возвращает (путь, существовала ли)"""
    temp_dir = target / TEMP_DIR_NAME
    existed = temp_dir.exists()
    if not existed:
        temp_dir.mkdir()
    return temp_dir, existed


def cleanup_temp_dir(temp_dir: Path, existed: bool, max_threads: int):
    """Удаление файлов бенчмарка и временной директории"""
    try:
        names = [CALIBRATION_FILE_NAME] + [thread_file_name(i) for i in range(max_threads)]
        for name in names:
            f = temp_dir / name
            if f.exists():
                f.unlink()
        if not existed:
            temp_dir.rmdir()
    except OSError as e:
        print(f"  Cleanup warning: {e}", file=sys.stderr)


def build_config(args) -> WorkloadConfig:
    return WorkloadConfig(
        portion_size=int(args.portion_mb * 1024 * 1024),
        portions_count=args.portions,
        max_test_duration=args.max_duration,
        max_slow_tests=args.max_slow_tests,
        max_threads=args.max_threads,
        seed=args.seed
    ).validate()


def build_parser():
    parser = argparse.ArgumentParser(
        prog='storagemeter',
        description='Sequential write throughput benchmark',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Test the volume mounted at /mnt/data
  storagemeter /mnt/data

  # Smaller portions, stop at 16 threads, keep the written files
  storagemeter /mnt/data --portion-mb 10 --max-threads 16 --keep-files
        """
    )

    parser.add_argument('target', nargs='?', default=os.getenv("STORAGEMETER_TARGET"),
                        help='Directory on the volume to test')
    parser.add_argument('--portion-mb', type=float, default=PORTION_SIZE / 1024 / 1024,
                        help='Size of one write call in MB')
    parser.add_argument('--portions', type=int, default=PORTIONS_COUNT,
                        help='Writes per file')
    parser.add_argument('--max-duration', type=float, default=MAX_TEST_DURATION,
                        help='Time budget in seconds for one single-thread pass')
    parser.add_argument('--max-slow-tests', type=int, default=MAX_SLOW_TESTS,
                        help='Consecutive slower phases before stopping')
    parser.add_argument('--max-threads', type=int, default=None,
                        help='Upper limit on the number of threads')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the random data')
    parser.add_argument('--output-dir',
                        default=os.getenv("STORAGEMETER_OUTPUT_DIR", "benchmark_results"),
                        help='Output directory for results')
    parser.add_argument('--keep-files', action='store_true',
                        help='Do not delete the written files')
    parser.add_argument('--no-plots', action='store_true',
                        help='Skip plot generation')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as e:
        parser.error(str(e))

    target = args.target or prompt_target()
    issues = check_target(target)
    if issues:
        print("⚠️  Target issues detected:")
        for issue in issues:
            print(f"   - {issue}")
        return 1

    print("=" * 80)
    print("STORAGE WRITE BENCHMARK")
    print("=" * 80)
    print(f"Target:       {target}")
    print(f"Portion:      {config.portion_size} bytes x {config.portions_count}")
    print(f"Budget:       {config.max_test_duration} s")
    print(f"Output:       {args.output_dir}")
    print("=" * 80)
    print()

    temp_dir, existed = prepare_temp_dir(Path(target))
    detector = PlateauDetector(config)
    try:
        scan = detector.run(temp_dir)
    except StorageMeterError as e:
        print(f"❌ StorageMeter failed: {e}", file=sys.stderr)
        return 1
    finally:
        if not args.keep_files:
            cleanup_temp_dir(temp_dir, existed, detector.state.thread_count)

    output_dir = Path(args.output_dir)

    print("\n" + "=" * 80)
    print("SAVING RESULTS")
    print("=" * 80)

    collector = MetricsCollector(scan, config)
    collector.save_raw_data(output_dir)
    collector.generate_report(output_dir)

    if not args.no_plots:
        generate_all_plots(scan, output_dir)

    print("\n" + "=" * 80)
    print("✅ BENCHMARK COMPLETED")
    print("=" * 80)
    print(f"\nResults saved to: {output_dir.absolute()}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
