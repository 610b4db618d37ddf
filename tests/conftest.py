import numpy as np
import pytest

from storagemeter.workloads import WorkloadBuffer, WorkloadConfig


@pytest.fixture
def small_config():
    return WorkloadConfig(portion_size=64 * 1024, portions_count=3, seed=1)


@pytest.fixture
def small_buffer(small_config):
    return WorkloadBuffer.generate_random(small_config.portion_size, seed=1)


@pytest.fixture
def make_buffer():
    """Буфер из нулей заданного размера без генерации случайных данных"""
    def _make(size):
        return WorkloadBuffer(np.zeros(size, dtype=np.uint8))
    return _make
