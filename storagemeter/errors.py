"""Ошибки бенчмарка записи"""

from typing import List, Optional


class StorageMeterError(Exception):
    """Базовая ошибка StorageMeter"""


class AllocationError(StorageMeterError):
    """Не удалось выделить буфер нагрузки"""

    def __init__(self, size: int, cause: Optional[BaseException] = None):
        self.size = size
        self.cause = cause
        super().__init__(f"Failed to allocate workload buffer of {size} bytes")


class WriteFailure(StorageMeterError):
    """
    Ошибка одного писателя.
    reason: "open" - файл не удалось создать, "write" - неполная или упавшая запись.
    """

    OPEN = "open"
    WRITE = "write"

    def __init__(self, reason: str, path, index: Optional[int] = None,
                 cause: Optional[BaseException] = None):
        self.reason = reason
        self.path = path
        self.index = index
        self.cause = cause

        if reason == self.OPEN:
            message = f"Failed to create file {path}"
        else:
            message = f"Failed to write portion {index} to file {path}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class PhaseFailure(StorageMeterError):
    """Хотя бы один писатель в фазе завершился с ошибкой"""

    def __init__(self, thread_count: int, failures: List[WriteFailure]):
        self.thread_count = thread_count
        self.failures = failures
        super().__init__(
            f"{len(failures)} of {thread_count} writers failed"
        )
