"""Базовые классы: таймер и результаты бенчмарка"""

import time
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import List, Optional

from .errors import WriteFailure


class StopWatch:
    """Таймер, запускается при создании"""

    def __init__(self):
        self.start()

    def start(self):
        self._start = time.perf_counter_ns()

    def stop(self) -> int:
        """Наносекунды с последнего start()"""
        return time.perf_counter_ns() - self._start

    @staticmethod
    def ns_to_ms_string(ns: int) -> str:
        return f"{int(ns) // 1_000_000} ms"


def format_speed(speed: float) -> str:
    """MB/s или GB/s, если больше гигабайта"""
    if speed > 1024.0:
        return f"{speed / 1024.0:.2f} GB/s"
    return f"{speed:.2f} MB/s"


def format_size(size: int) -> str:
    return f"{size / 1024 / 1024:.2f} MB"


def calculate_speed(buffer_size: int, portions_count: int,
                    threads_count: int, ns: int) -> float:
    """
    Скорость в MB/s: все байты всех писателей,
    деленные на среднее время одного писателя.
    """
    total_mb = buffer_size * portions_count * threads_count / (1024 * 1024)
    return total_mb / (ns / 1_000_000_000) if ns > 0 else 0.0


@dataclass
class WriteResult:
    """Результат одного писателя"""
    index: int
    path: Path
    elapsed_ns: Optional[int] = None
    error: Optional[WriteFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PhaseResult:
    """Результат фазы с thread_count параллельными писателями"""
    thread_count: int
    elapsed_ns: List[int]
    average_elapsed_ns: int
    throughput_mbps: float
    buffer_size: int
    portions_count: int

    @property
    def data_size_per_thread(self) -> int:
        return self.buffer_size * self.portions_count

    def to_dict(self):
        return asdict(self)


@dataclass
class ScanResult:
    """Итог сканирования по числу потоков"""
    target_dir: str
    max_threads_tested: int
    stop_reason: str
    phases: List[PhaseResult] = field(default_factory=list)
    failure: Optional[str] = None
    buffer_size: int = 0
    portions_count: int = 0

    PLATEAU = "plateau"
    PHASE_FAILURE = "phase_failure"
    THREAD_LIMIT = "thread_limit"

    def best_phase(self) -> Optional[PhaseResult]:
        if not self.phases:
            return None
        return max(self.phases, key=lambda p: p.throughput_mbps)

    def throughput_series(self) -> List[float]:
        return [p.throughput_mbps for p in self.phases]

    def to_dict(self):
        return {
            'target_dir': self.target_dir,
            'max_threads_tested': self.max_threads_tested,
            'stop_reason': self.stop_reason,
            'failure': self.failure,
            'buffer_size': self.buffer_size,
            'portions_count': self.portions_count,
            'phases': [p.to_dict() for p in self.phases],
        }
