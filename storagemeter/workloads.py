"""Конфигурация нагрузки и буфер данных для записи"""

import time
from dataclasses import dataclass, asdict
from typing import Optional

import numpy as np

from .errors import AllocationError


PORTION_SIZE = 100 * 1024 * 1024  # 100 MB
PORTIONS_COUNT = 10  # PORTION_SIZE * PORTIONS_COUNT = объем первой записи
MAX_TEST_DURATION = 2.0  # секунды
MAX_SLOW_TESTS = 2


@dataclass
class WorkloadConfig:
    """Конфигурация нагрузки"""
    portion_size: int = PORTION_SIZE
    portions_count: int = PORTIONS_COUNT
    max_test_duration: float = MAX_TEST_DURATION
    max_slow_tests: int = MAX_SLOW_TESTS
    max_threads: Optional[int] = None
    seed: Optional[int] = None

    def validate(self):
        """Проверка параметров"""
        if self.portion_size <= 0:
            raise ValueError(f"portion_size must be positive, got {self.portion_size}")
        if self.portions_count <= 0:
            raise ValueError(f"portions_count must be positive, got {self.portions_count}")
        if self.max_test_duration <= 0:
            raise ValueError(f"max_test_duration must be positive, got {self.max_test_duration}")
        if self.max_slow_tests <= 0:
            raise ValueError(f"max_slow_tests must be positive, got {self.max_slow_tests}")
        if self.max_threads is not None and self.max_threads < 2:
            raise ValueError(f"max_threads must be at least 2, got {self.max_threads}")
        return self

    def to_dict(self):
        return asdict(self)


class WorkloadBuffer:
    """
    Буфер, который каждый писатель записывает в свой файл.
    После калибровки используется только на чтение.
    """

    def __init__(self, data: np.ndarray):
        self.data = data

    @classmethod
    def generate_random(cls, size: int, seed: Optional[int] = None) -> "WorkloadBuffer":
        """Буфер размером size, заполненный псевдослучайными байтами"""
        if size <= 0:
            raise ValueError(f"Buffer size must be positive, got {size}")

        print("Generating random data... ", end="", flush=True)
        if seed is None:
            seed = time.time_ns()
        rng = np.random.default_rng(seed)
        try:
            data = rng.integers(0, 256, size=size, dtype=np.uint8)
        except MemoryError as e:
            print("failed.")
            raise AllocationError(size, e) from e
        print("done.")

        return cls(data)

    @property
    def size(self) -> int:
        return int(self.data.nbytes)

    def __len__(self):
        return self.size

    def resize_to(self, new_size: int):
        """Уменьшение буфера (только в сторону уменьшения)"""
        if new_size <= 0:
            raise ValueError(f"Buffer size must be positive, got {new_size}")
        if new_size > self.size:
            raise ValueError(
                f"Buffer can only shrink: {new_size} > {self.size}"
            )
        if new_size < self.size:
            self.data = self.data[:new_size].copy()

    def view(self) -> memoryview:
        return memoryview(self.data)
