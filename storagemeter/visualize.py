"""Графики результатов сканирования"""

from pathlib import Path

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

from .base import ScanResult


def generate_all_plots(scan: ScanResult, output_dir: Path):
    """Генерация всех графиков"""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    print("\n📊 Generating plots...")

    # 1. Throughput vs threads
    plot_throughput_scaling(scan, output_dir / "01_throughput_scaling.png")

    # 2. Per-writer times
    plot_writer_times(scan, output_dir / "02_writer_times.png")

    print(f"✅ All plots saved to {output_dir}/")


def plot_throughput_scaling(scan: ScanResult, output_path: Path):
    """Скорость записи в зависимости от числа потоков"""
    threads = [p.thread_count for p in scan.phases]
    speeds = scan.throughput_series()

    fig, ax = plt.subplots(figsize=(12, 7))

    ax.plot(threads, speeds, 'o-', linewidth=2, color='#3498db', label='Throughput')

    for x, y in zip(threads, speeds):
        ax.text(x, y, f'{y:.0f}', ha='center', va='bottom', fontsize=9)

    best = scan.best_phase()
    if best is not None:
        ax.plot([best.thread_count], [best.throughput_mbps], 'o',
                markersize=14, markerfacecolor='none', markeredgecolor='#2ecc71',
                markeredgewidth=2, label=f'Best ({best.thread_count} threads)')

    ax.set_xlabel('Threads', fontsize=12, fontweight='bold')
    ax.set_ylabel('Throughput (MB/s)', fontsize=12, fontweight='bold')
    ax.set_title('Sequential Write Throughput Scaling',
                 fontsize=14, fontweight='bold', pad=20)
    ax.set_xticks(threads)
    ax.legend(fontsize=11, loc='lower right')
    ax.grid(alpha=0.3, linestyle='--')

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close()
    print(f"  ✓ {output_path.name}")


def plot_writer_times(scan: ScanResult, output_path: Path):
    """Время каждого писателя по фазам"""
    fig, ax = plt.subplots(figsize=(14, 8))

    max_writers = max((p.thread_count for p in scan.phases), default=0)
    x = np.arange(len(scan.phases))
    width = 0.8 / max(1, max_writers)
    cmap = matplotlib.colormaps['viridis']

    for i in range(max_writers):
        values = [
            p.elapsed_ns[i] / 1_000_000 if i < len(p.elapsed_ns) else 0
            for p in scan.phases
        ]
        offset = width * (i - max_writers / 2 + 0.5)
        ax.bar(x + offset, values, width,
               color=cmap(i / max(1, max_writers - 1)), label=f'thread {i + 1}')

    averages = [p.average_elapsed_ns / 1_000_000 for p in scan.phases]
    ax.plot(x, averages, 'k--', linewidth=1.5, label='Average')

    ax.set_xlabel('Threads in phase', fontsize=12, fontweight='bold')
    ax.set_ylabel('Write time (ms)', fontsize=12, fontweight='bold')
    ax.set_title('Per-Writer Write Time', fontsize=14, fontweight='bold', pad=20)
    ax.set_xticks(x)
    ax.set_xticklabels([str(p.thread_count) for p in scan.phases], fontsize=10)
    if max_writers <= 12:
        ax.legend(fontsize=9, loc='upper left', ncol=2)
    ax.grid(axis='y', alpha=0.3, linestyle='--')

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close()
    print(f"  ✓ {output_path.name}")
