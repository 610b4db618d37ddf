#!/usr/bin/env python3
"""
Демонстрация отчетов и графиков на мок-данных
Запускается без записи на диск
"""

import sys
from pathlib import Path

import numpy as np

from .base import PhaseResult, ScanResult, calculate_speed
from .metrics import MetricsCollector
from .visualize import generate_all_plots
from .workloads import WorkloadConfig, MAX_SLOW_TESTS


def generate_mock_scan(peak_threads: int = 4, base_ms: float = 1500.0,
                       config: WorkloadConfig = None, seed: int = 0) -> ScanResult:
    """
    Мок-сканирование: время писателя почти не растет до peak_threads,
    дальше растет быстрее, чем число потоков.
    """
    config = config or WorkloadConfig()
    rng = np.random.default_rng(seed)

    phases = []
    last_speed = None
    slow_tests = 0
    threads = 1
    while slow_tests < MAX_SLOW_TESTS:
        if threads <= peak_threads:
            phase_ms = base_ms * (1 + 0.05 * (threads - 1))
        else:
            peak_ms = base_ms * (1 + 0.05 * (peak_threads - 1))
            phase_ms = peak_ms * threads / peak_threads * (1 + 0.1 * (threads - peak_threads))

        elapsed = [int(phase_ms * 1_000_000 * rng.uniform(0.95, 1.05)) for _ in range(threads)]
        average = sum(elapsed) // threads
        speed = calculate_speed(config.portion_size, config.portions_count, threads, average)
        phases.append(PhaseResult(
            thread_count=threads,
            elapsed_ns=elapsed,
            average_elapsed_ns=average,
            throughput_mbps=speed,
            buffer_size=config.portion_size,
            portions_count=config.portions_count
        ))

        if last_speed is not None:
            slow_tests = slow_tests + 1 if speed < last_speed else 0
        last_speed = speed
        threads += 1

    return ScanResult(
        target_dir="mock",
        max_threads_tested=threads - 1,
        stop_reason=ScanResult.PLATEAU,
        phases=phases,
        buffer_size=config.portion_size,
        portions_count=config.portions_count
    )


def main():
    print("=" * 80)
    print("STORAGEMETER DEMO (mock data)")
    print("=" * 80)

    scan = generate_mock_scan()
    output_dir = Path("demo_results")

    collector = MetricsCollector(scan)
    collector.save_raw_data(output_dir)
    collector.generate_report(output_dir)
    generate_all_plots(scan, output_dir)
    return 0


if __name__ == '__main__':
    sys.exit(main())
