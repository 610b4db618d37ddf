"""Сохранение результатов сканирования и текстовый отчет"""

import json
from datetime import datetime
from pathlib import Path
from typing import List

from .base import ScanResult, StopWatch, format_speed, format_size
from .workloads import WorkloadConfig


STOP_REASON_TEXT = {
    ScanResult.PLATEAU: "throughput stopped improving",
    ScanResult.PHASE_FAILURE: "a writer failed",
    ScanResult.THREAD_LIMIT: "thread limit reached",
}


class MetricsCollector:
    """Сборщик результатов одного прогона"""

    def __init__(self, scan: ScanResult, config: WorkloadConfig = None):
        self.scan = scan
        self.config = config or WorkloadConfig()
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    def save_raw_data(self, output_dir: Path) -> Path:
        """Сохранить сырые данные в JSON"""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        data = {
            'timestamp': self.timestamp,
            'config': self.config.to_dict(),
            'scan': self.scan.to_dict()
        }

        output_file = output_dir / f"storagemeter_raw_{self.timestamp}.json"
        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        print(f"\n✅ Raw data saved: {output_file}")
        return output_file

    def report_lines(self) -> List[str]:
        """Строки отчета"""
        scan = self.scan
        lines = []
        lines.append("=" * 80)
        lines.append("STORAGE WRITE THROUGHPUT REPORT")
        lines.append("=" * 80)
        lines.append(f"Timestamp:     {self.timestamp}")
        lines.append(f"Target:        {scan.target_dir}")
        lines.append(f"Portion size:  {format_size(scan.buffer_size)} x {scan.portions_count}")
        lines.append("")

        lines.append(f"  {'Threads':>7}  {'Avg time':>12}  {'Throughput':>14}  {'Speed-up':>8}")
        lines.append(f"  {'─' * 50}")

        baseline = scan.phases[0].throughput_mbps if scan.phases else 0.0
        for phase in scan.phases:
            speedup = phase.throughput_mbps / baseline if baseline > 0 else 0.0
            lines.append(f"  {phase.thread_count:>7}  "
                         f"{StopWatch.ns_to_ms_string(phase.average_elapsed_ns):>12}  "
                         f"{format_speed(phase.throughput_mbps):>14}  "
                         f"{speedup:>7.2f}x")

        lines.append("")
        best = scan.best_phase()
        if best is not None:
            lines.append(f"Best:          {format_speed(best.throughput_mbps)} "
                         f"with {best.thread_count} thread(s)")
        lines.append(f"Threads tested: {scan.max_threads_tested}")
        reason = STOP_REASON_TEXT.get(scan.stop_reason, scan.stop_reason)
        lines.append(f"Stopped:       {reason}")
        if scan.failure:
            lines.append(f"Failure:       {scan.failure}")
        lines.append("=" * 80)
        return lines

    def generate_report(self, output_dir: Path) -> str:
        """Генерация текстового отчета"""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        report_text = "\n".join(self.report_lines())

        report_file = output_dir / f"storagemeter_report_{self.timestamp}.txt"
        with open(report_file, 'w', encoding='utf-8') as f:
            f.write(report_text)

        print(f"✅ Report saved: {report_file}")
        print("\n" + report_text)

        return report_text
