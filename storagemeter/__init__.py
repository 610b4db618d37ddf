"""StorageMeter: sequential write throughput benchmark"""

from .base import StopWatch, WriteResult, PhaseResult, ScanResult, calculate_speed
from .errors import StorageMeterError, AllocationError, WriteFailure, PhaseFailure
from .workloads import WorkloadConfig, WorkloadBuffer
from .filesystem import FileWriter, ConcurrentWritePhase
from .scaling import Calibrator, PlateauDetector, ScanPhase, ScanState
from .metrics import MetricsCollector
from .visualize import generate_all_plots

__all__ = [
    'StopWatch',
    'WriteResult',
    'PhaseResult',
    'ScanResult',
    'calculate_speed',
    'StorageMeterError',
    'AllocationError',
    'WriteFailure',
    'PhaseFailure',
    'WorkloadConfig',
    'WorkloadBuffer',
    'FileWriter',
    'ConcurrentWritePhase',
    'Calibrator',
    'PlateauDetector',
    'ScanPhase',
    'ScanState',
    'MetricsCollector',
    'generate_all_plots'
]
