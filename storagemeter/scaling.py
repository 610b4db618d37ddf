"""Калибровка и сканирование по числу потоков до насыщения скорости"""

import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Tuple

from .base import (
    StopWatch, PhaseResult, ScanResult,
    calculate_speed, format_speed, format_size
)
from .errors import PhaseFailure
from .filesystem import FileWriter, ConcurrentWritePhase
from .workloads import WorkloadBuffer, WorkloadConfig


CALIBRATION_FILE_NAME = "single_thread"


class Calibrator:
    """Однопоточный прогон: базовая скорость и подгонка размера буфера"""

    def __init__(self, config: WorkloadConfig = None, writer: FileWriter = None):
        self.config = config or WorkloadConfig()
        self.writer = writer or FileWriter(self.config)

    def calibrate(self, target_dir,
                  buffer: WorkloadBuffer = None) -> Tuple[WorkloadBuffer, PhaseResult]:
        """
        Пишет буфер в single_thread и, если запись заняла больше
        max_test_duration, уменьшает буфер для следующих фаз.
        Результат для 1 потока считается по исходному размеру.
        """
        if buffer is None:
            buffer = WorkloadBuffer.generate_random(self.config.portion_size, self.config.seed)

        path = Path(target_dir) / CALIBRATION_FILE_NAME
        elapsed = self.writer.write_repeated(path, buffer, self.config.portions_count)

        original_size = len(buffer)
        result = PhaseResult(
            thread_count=1,
            elapsed_ns=[elapsed],
            average_elapsed_ns=elapsed,
            throughput_mbps=calculate_speed(original_size, self.config.portions_count, 1, elapsed),
            buffer_size=original_size,
            portions_count=self.config.portions_count
        )

        elapsed_sec = elapsed / 1_000_000_000
        if elapsed_sec > self.config.max_test_duration:
            preferred = int(self.config.max_test_duration / elapsed_sec * original_size)
            buffer.resize_to(max(1, preferred))

        return buffer, result


class ScanPhase(Enum):
    """Состояния сканирования"""
    CALIBRATING = 'calibrating'
    SCANNING = 'scanning'
    DONE = 'done'


@dataclass
class ScanState:
    """Текущее состояние цикла сканирования"""
    phase: ScanPhase = ScanPhase.CALIBRATING
    thread_count: int = 1
    last_speed: float = 0.0
    slow_tests: int = 0


class PlateauDetector:
    """
    Увеличивает число потоков, пока скорость не перестанет расти.
    Останавливается после max_slow_tests фаз подряд, каждая из которых
    медленнее предыдущей.
    """

    def __init__(self, config: WorkloadConfig = None,
                 calibrator: Calibrator = None,
                 phase_runner: ConcurrentWritePhase = None):
        self.config = config or WorkloadConfig()
        self.calibrator = calibrator or Calibrator(self.config)
        self.phase_runner = phase_runner or ConcurrentWritePhase(self.config)
        self.state = ScanState()

    def run(self, target_dir) -> ScanResult:
        """Полный прогон: калибровка и сканирование"""
        self.state = ScanState()
        target_dir = Path(target_dir)

        buffer, first = self.calibrator.calibrate(target_dir)
        print(f"1 thread: {StopWatch.ns_to_ms_string(first.average_elapsed_ns)}"
              f", speed: {format_speed(first.throughput_mbps)}"
              f", data size per thread: {format_size(len(buffer) * self.config.portions_count)}")
        print("-----")

        phases = [first]
        self.state.last_speed = first.throughput_mbps
        self.state.phase = ScanPhase.SCANNING
        self.state.thread_count = 2

        stop_reason = None
        failure = None
        max_threads_tested = 1

        while self.state.phase == ScanPhase.SCANNING:
            threads = self.state.thread_count
            try:
                result = self.phase_runner.run(target_dir, buffer, threads)
            except PhaseFailure as e:
                print(f"Phase with {threads} threads failed: {e}", file=sys.stderr)
                stop_reason = ScanResult.PHASE_FAILURE
                failure = str(e)
                max_threads_tested = threads - 1
                self.state.phase = ScanPhase.DONE
                break

            phases.append(result)
            max_threads_tested = threads
            print(f"Average write time: {StopWatch.ns_to_ms_string(result.average_elapsed_ns)}"
                  f", speed: {format_speed(result.throughput_mbps)}")
            print("-----")

            if result.throughput_mbps < self.state.last_speed:
                self.state.slow_tests += 1
            else:
                self.state.slow_tests = 0
            self.state.last_speed = result.throughput_mbps

            if self.state.slow_tests >= self.config.max_slow_tests:
                stop_reason = ScanResult.PLATEAU
                self.state.phase = ScanPhase.DONE
            elif self.config.max_threads is not None and threads >= self.config.max_threads:
                stop_reason = ScanResult.THREAD_LIMIT
                self.state.phase = ScanPhase.DONE
            else:
                self.state.thread_count += 1

        return ScanResult(
            target_dir=str(target_dir),
            max_threads_tested=max_threads_tested,
            stop_reason=stop_reason,
            phases=phases,
            failure=failure,
            buffer_size=len(buffer),
            portions_count=self.config.portions_count
        )
