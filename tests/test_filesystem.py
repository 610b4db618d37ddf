import threading
import time

import pytest

from storagemeter import filesystem
from storagemeter.base import calculate_speed
from storagemeter.errors import PhaseFailure, WriteFailure
from storagemeter.filesystem import ConcurrentWritePhase, FileWriter, thread_file_name


class FakeFile:
    """Файл, который пишет не больше limit байт за вызов"""

    def __init__(self, limit=None, fail_on=None):
        self.limit = limit
        self.fail_on = fail_on
        self.calls = 0
        self.closed = False

    def write(self, data):
        self.calls += 1
        if self.fail_on is not None and self.calls - 1 == self.fail_on:
            raise OSError(28, "No space left on device")
        size = memoryview(data).nbytes
        return size if self.limit is None else min(size, self.limit)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


@pytest.mark.parametrize("size,repeat", [(1, 1), (4096, 3), (65537, 2)])
def test_write_repeated_file_size(tmp_path, make_buffer, size, repeat):
    path = tmp_path / "out"
    elapsed = FileWriter().write_repeated(path, make_buffer(size), repeat)

    assert elapsed > 0
    assert path.stat().st_size == size * repeat


def test_write_repeated_truncates_existing(tmp_path, make_buffer):
    path = tmp_path / "out"
    path.write_bytes(b"x" * 100000)

    FileWriter().write_repeated(path, make_buffer(10), 2)

    assert path.stat().st_size == 20


def test_write_repeated_default_repeat_from_config(tmp_path, small_config, small_buffer):
    path = tmp_path / "out"
    FileWriter(small_config).write_repeated(path, small_buffer)
    assert path.stat().st_size == small_config.portion_size * small_config.portions_count


def test_write_repeated_open_failure(tmp_path, make_buffer):
    path = tmp_path / "missing" / "out"

    with pytest.raises(WriteFailure) as exc_info:
        FileWriter().write_repeated(path, make_buffer(10), 1)

    assert exc_info.value.reason == WriteFailure.OPEN
    assert exc_info.value.path == path
    assert isinstance(exc_info.value.cause, OSError)


def test_write_repeated_short_write_closes_file(monkeypatch, tmp_path, make_buffer):
    fake = FakeFile(limit=5)
    monkeypatch.setattr(filesystem, "open", lambda *args, **kwargs: fake, raising=False)

    with pytest.raises(WriteFailure) as exc_info:
        FileWriter().write_repeated(tmp_path / "out", make_buffer(10), 4)

    assert exc_info.value.reason == WriteFailure.WRITE
    assert exc_info.value.index == 0
    assert fake.calls == 1
    assert fake.closed


def test_write_repeated_io_error_reports_index(monkeypatch, tmp_path, make_buffer):
    fake = FakeFile(fail_on=2)
    monkeypatch.setattr(filesystem, "open", lambda *args, **kwargs: fake, raising=False)

    with pytest.raises(WriteFailure) as exc_info:
        FileWriter().write_repeated(tmp_path / "out", make_buffer(10), 5)

    assert exc_info.value.reason == WriteFailure.WRITE
    assert exc_info.value.index == 2
    assert fake.calls == 3
    assert fake.closed


def test_thread_file_names_are_one_based():
    assert thread_file_name(0) == "thread1"
    assert thread_file_name(9) == "thread10"


@pytest.mark.parametrize("threads", [1, 3, 5])
def test_phase_writes_one_file_per_thread(tmp_path, small_config, small_buffer, threads):
    result = ConcurrentWritePhase(small_config).run(tmp_path, small_buffer, threads)

    expected_size = small_config.portion_size * small_config.portions_count
    for i in range(threads):
        assert (tmp_path / f"thread{i + 1}").stat().st_size == expected_size
    assert not (tmp_path / f"thread{threads + 1}").exists()

    assert result.thread_count == threads
    assert len(result.elapsed_ns) == threads
    assert result.average_elapsed_ns == sum(result.elapsed_ns) // threads
    assert result.buffer_size == small_config.portion_size
    assert result.throughput_mbps == pytest.approx(calculate_speed(
        small_config.portion_size, small_config.portions_count,
        threads, result.average_elapsed_ns))


class RecordingWriter:
    """Писатель-заглушка: запоминает вызовы, падает на заданных файлах"""

    def __init__(self, fail_names=(), delay=0.05, elapsed=1_000_000):
        self.fail_names = set(fail_names)
        self.delay = delay
        self.elapsed = elapsed
        self.lock = threading.Lock()
        self.started = []
        self.finished = []
        self.thread_ids = set()

    def write_repeated(self, path, buffer, repeat_count=None):
        with self.lock:
            self.started.append(path.name)
            self.thread_ids.add(threading.get_ident())
        if path.name in self.fail_names:
            raise WriteFailure(WriteFailure.OPEN, path)
        time.sleep(self.delay)
        with self.lock:
            self.finished.append(path.name)
        return self.elapsed


def test_phase_spawns_exactly_n_writers(tmp_path, small_config, small_buffer):
    writer = RecordingWriter()
    ConcurrentWritePhase(small_config, writer).run(tmp_path, small_buffer, 4)

    assert sorted(writer.started) == ["thread1", "thread2", "thread3", "thread4"]
    assert sorted(writer.finished) == sorted(writer.started)
    assert len(writer.thread_ids) > 1


def test_phase_failure_waits_for_all_writers(tmp_path, small_config, small_buffer):
    writer = RecordingWriter(fail_names={"thread2"}, delay=0.2)

    with pytest.raises(PhaseFailure) as exc_info:
        ConcurrentWritePhase(small_config, writer).run(tmp_path, small_buffer, 4)

    assert sorted(writer.finished) == ["thread1", "thread3", "thread4"]
    assert exc_info.value.thread_count == 4
    assert len(exc_info.value.failures) == 1
    assert exc_info.value.failures[0].path.name == "thread2"


def test_phase_unexpected_error_propagates(tmp_path, small_config, small_buffer):
    class BrokenWriter:
        def write_repeated(self, path, buffer, repeat_count=None):
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        ConcurrentWritePhase(small_config, BrokenWriter()).run(tmp_path, small_buffer, 2)


def test_phase_rejects_zero_threads(tmp_path, small_config, small_buffer):
    with pytest.raises(ValueError):
        ConcurrentWritePhase(small_config).run(tmp_path, small_buffer, 0)


def test_phase_throughput_uses_average_time(tmp_path, small_config, make_buffer):
    buffer = make_buffer(1024 * 1024)
    writer = RecordingWriter(delay=0, elapsed=500_000_000)

    result = ConcurrentWritePhase(small_config, writer).run(tmp_path, buffer, 2)

    # 2 потока * 3 записи * 1 MB за 0.5 s
    assert result.average_elapsed_ns == 500_000_000
    assert result.throughput_mbps == pytest.approx(12.0)


def test_speed_doubles_when_time_halves():
    slow = calculate_speed(1024 * 1024, 10, 4, 2_000_000_000)
    fast = calculate_speed(1024 * 1024, 10, 4, 1_000_000_000)
    assert fast == pytest.approx(2 * slow)


def test_speed_reference_value():
    speed = calculate_speed(100 * 1024 * 1024, 10, 1, 1_500_000_000)
    assert speed == pytest.approx(1000 / 1.5)


def test_speed_zero_time():
    assert calculate_speed(1024, 1, 1, 0) == 0.0
