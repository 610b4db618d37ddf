"""Запись тестовых файлов: один писатель и фаза из N параллельных писателей"""

import sys
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
from typing import List

from .base import StopWatch, WriteResult, PhaseResult, calculate_speed
from .errors import WriteFailure, PhaseFailure
from .workloads import WorkloadBuffer, WorkloadConfig


def thread_file_name(thread_index: int) -> str:
    """Имя файла писателя, нумерация с 1"""
    return f"thread{thread_index + 1}"


class FileWriter:
    """Пишет буфер в один файл repeat_count раз подряд"""

    def __init__(self, config: WorkloadConfig = None):
        self.config = config or WorkloadConfig()

    def write_repeated(self, target_path, buffer: WorkloadBuffer,
                       repeat_count: int = None) -> int:
        """
        Последовательная запись буфера repeat_count раз через один дескриптор.
        Возвращает время записи в наносекундах.
        """
        if repeat_count is None:
            repeat_count = self.config.portions_count
        target_path = Path(target_path)

        try:
            # buffering=0: write() возвращает реально записанное число байт
            f = open(target_path, 'wb', buffering=0)
        except OSError as e:
            raise WriteFailure(WriteFailure.OPEN, target_path, cause=e) from e

        with f:
            data = buffer.view()
            expected = len(buffer)
            watch = StopWatch()
            for i in range(repeat_count):
                try:
                    written = f.write(data)
                except OSError as e:
                    raise WriteFailure(WriteFailure.WRITE, target_path, index=i, cause=e) from e
                if written != expected:
                    raise WriteFailure(WriteFailure.WRITE, target_path, index=i)
            elapsed = watch.stop()

        return elapsed


class ConcurrentWritePhase:
    """Фаза бенчмарка: thread_count писателей, каждый в свой файл"""

    def __init__(self, config: WorkloadConfig = None, writer: FileWriter = None):
        self.config = config or WorkloadConfig()
        self.writer = writer or FileWriter(self.config)

    def _write_one(self, index: int, path: Path, buffer: WorkloadBuffer) -> WriteResult:
        try:
            elapsed = self.writer.write_repeated(path, buffer, self.config.portions_count)
        except WriteFailure as e:
            print(f"Writer {index + 1} failed: {e}", file=sys.stderr)
            return WriteResult(index=index, path=path, error=e)
        return WriteResult(index=index, path=path, elapsed_ns=elapsed)

    def run(self, target_dir, buffer: WorkloadBuffer, thread_count: int) -> PhaseResult:
        """
        Запуск thread_count писателей и ожидание всех.
        Бросает PhaseFailure, если хотя бы один писатель упал.
        """
        if thread_count < 1:
            raise ValueError(f"thread_count must be at least 1, got {thread_count}")

        target_dir = Path(target_dir)
        paths = [target_dir / thread_file_name(i) for i in range(thread_count)]

        with ThreadPoolExecutor(max_workers=thread_count) as ex:
            futures = [
                ex.submit(self._write_one, i, paths[i], buffer)
                for i in range(thread_count)
            ]
            wait(futures)

        # После барьера: result() пробрасывает неожиданные исключения писателей
        results: List[WriteResult] = [fut.result() for fut in futures]

        failures = [r.error for r in results if not r.ok]
        for r in results:
            if r.ok:
                print(f"thread {r.index + 1}: {StopWatch.ns_to_ms_string(r.elapsed_ns)}")
            else:
                print(f"thread {r.index + 1}: failed ({r.error.reason})")
        if failures:
            raise PhaseFailure(thread_count, failures)

        elapsed = [r.elapsed_ns for r in results]
        average = sum(elapsed) // thread_count
        speed = calculate_speed(len(buffer), self.config.portions_count,
                                thread_count, average)

        return PhaseResult(
            thread_count=thread_count,
            elapsed_ns=elapsed,
            average_elapsed_ns=average,
            throughput_mbps=speed,
            buffer_size=len(buffer),
            portions_count=self.config.portions_count
        )
