"""Charts for benchmark results"""

import logging
from pathlib import Path
from typing import List

import numpy as np
import matplotlib.pyplot as plt

from .metrics import PhaseReport

logger = logging.getLogger(__name__)

COLORS = {'average': '#3498db', 'aggregate': '#2ecc71'}


def generate_all_plots(reports: List[PhaseReport], output_dir: Path) -> List[Path]:
    """Generate every chart, return the written files"""
    output_dir.mkdir(parents=True, exist_ok=True)

    written = [
        plot_phase_throughput(reports, output_dir / "01_phase_throughput.png"),
        plot_worker_throughput(reports, output_dir / "02_worker_throughput.png"),
    ]
    logger.info("Plots saved to %s", output_dir)
    return written


def plot_phase_throughput(reports: List[PhaseReport], output_path: Path) -> Path:
    """Average (per thread) vs aggregate throughput for each phase"""
    fig, ax = plt.subplots(figsize=(12, 7))

    labels = [r.kind.label for r in reports]
    x = np.arange(len(labels))
    width = 0.35

    series = [
        ('average', 'Average per thread', [r.average_throughput_mbps for r in reports]),
        ('aggregate', 'Aggregate', [r.aggregate_throughput_mbps for r in reports]),
    ]
    for i, (key, label, values) in enumerate(series):
        offset = width * (i - len(series) / 2 + 0.5)
        bars = ax.bar(x + offset, values, width, label=label, color=COLORS[key])

        for bar in bars:
            height = bar.get_height()
            if height > 0:
                ax.text(bar.get_x() + bar.get_width() / 2., height,
                        f'{height:.1f}',
                        ha='center', va='bottom', fontsize=9)

    ax.set_xlabel('Phase', fontsize=12, fontweight='bold')
    ax.set_ylabel('Throughput (MB/s)', fontsize=12, fontweight='bold')
    ax.set_title('Throughput by Phase', fontsize=14, fontweight='bold', pad=20)
    ax.set_xticks(x)
    ax.set_xticklabels([name.replace('_', '\n') for name in labels], fontsize=10)
    ax.legend(fontsize=11, loc='upper right')
    ax.grid(axis='y', alpha=0.3, linestyle='--')

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return output_path


def plot_worker_throughput(reports: List[PhaseReport], output_path: Path) -> Path:
    """Per-thread throughput, one group of bars per phase"""
    fig, ax = plt.subplots(figsize=(12, 7))

    labels = [r.kind.label for r in reports]
    worker_count = max((r.worker_count for r in reports), default=0)
    x = np.arange(len(labels))
    width = 0.8 / max(1, worker_count)

    for i in range(worker_count):
        # Failed workers show as zero
        values = []
        for report in reports:
            result = report.results[i] if i < len(report.results) else None
            values.append(result.throughput_mbps if result and result.ok else 0.0)
        offset = width * (i - worker_count / 2 + 0.5)
        ax.bar(x + offset, values, width, label=f'thread {i}')

    ax.set_xlabel('Phase', fontsize=12, fontweight='bold')
    ax.set_ylabel('Throughput (MB/s)', fontsize=12, fontweight='bold')
    ax.set_title('Per-Thread Throughput', fontsize=14, fontweight='bold', pad=20)
    ax.set_xticks(x)
    ax.set_xticklabels([name.replace('_', '\n') for name in labels], fontsize=10)
    if 0 < worker_count <= 16:
        ax.legend(fontsize=9, loc='upper right')
    ax.grid(axis='y', alpha=0.3, linestyle='--')

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return output_path
