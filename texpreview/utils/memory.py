# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Preview Session Memory Profiling

Records process memory (via psutil) alongside the size of the session's
long-lived structures at labelled points of a run:
- Python process memory usage (RSS, VMS)
- glyph path cache entries
- sync index block count
- page render state counts
"""

from __future__ import annotations

import gc
import os
import time
from typing import Any

import psutil


class MemoryProfiler:
    """Collects labelled memory snapshots for one CLI run."""

    def __init__(self) -> None:
        self.process = psutil.Process(os.getpid())
        self.snapshots: list[dict[str, Any]] = []
        self.start_time = time.perf_counter()
        self.take_snapshot("startup")

    def take_snapshot(self, label: str, session: Any = None) -> dict[str, Any]:
        """
        Take a memory snapshot.

        Args:
            label: Description of when this snapshot was taken
            session: PreviewSession (if available) for structure sizes

        Returns:
            Dictionary containing the memory metrics
        """
        memory_info = self.process.memory_info()
        snapshot = {
            'timestamp': time.perf_counter() - self.start_time,
            'label': label,
            'process_memory': {
                'rss_mb': memory_info.rss / 1024 / 1024,
                'vms_mb': memory_info.vms / 1024 / 1024,
                'percent': self.process.memory_percent(),
            },
            'gc_objects': len(gc.get_objects()),
            'session': self._session_stats(session) if session is not None else {},
        }
        self.snapshots.append(snapshot)
        return snapshot

    @staticmethod
    def _session_stats(session: Any) -> dict[str, Any]:
        index = session.sync_index
        return {
            'glyph_entries': len(session.glyph_cache),
            'sync_blocks': len(index) if index is not None else 0,
            'pages': session.scheduler.page_count,
        }

    def generate_report(self) -> str:
        """Generate a memory usage report."""
        if not self.snapshots:
            return "No memory snapshots available"

        first = self.snapshots[0]
        last = self.snapshots[-1]
        report = []
        report.append("=" * 80)
        report.append("TEXPREVIEW MEMORY ANALYSIS REPORT")
        report.append("=" * 80)

        report.append("\nSUMMARY:")
        report.append(f"  Time Span: {last['timestamp'] - first['timestamp']:.2f} seconds")
        report.append(f"  Snapshots: {len(self.snapshots)}")
        growth = last['process_memory']['rss_mb'] - first['process_memory']['rss_mb']
        report.append(f"  Memory Growth: {growth:.2f} MB")

        report.append("\nCURRENT STATUS:")
        report.append(f"  RSS Memory: {last['process_memory']['rss_mb']:.2f} MB")
        report.append(f"  VMS Memory: {last['process_memory']['vms_mb']:.2f} MB")
        report.append(f"  Memory %: {last['process_memory']['percent']:.1f}%")
        report.append(f"  Total Objects: {last['gc_objects']:,}")
        if last['session']:
            report.append(f"  Glyph Path Entries: {last['session']['glyph_entries']}")
            report.append(f"  Sync Blocks: {last['session']['sync_blocks']}")
            report.append(f"  Pages: {last['session']['pages']}")

        report.append("\nMEMORY SNAPSHOTS:")
        for snapshot in self.snapshots:
            report.append(f"  {snapshot['timestamp']:6.2f}s - {snapshot['label']:20} - "
                          f"{snapshot['process_memory']['rss_mb']:6.2f} MB - "
                          f"{snapshot['gc_objects']:,} objects")

        report.append("=" * 80)
        return "\n".join(report)
