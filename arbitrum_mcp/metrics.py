"""Minimal in-process metrics recorder (not suitable for multi-process aggregation)."""

from __future__ import annotations

from collections import Counter, OrderedDict
from threading import Lock
from typing import Dict

MAX_RECENT_DURATIONS = 100


class MetricsRecorder:
    def __init__(self, max_recent_durations: int = MAX_RECENT_DURATIONS) -> None:
        self._lock = Lock()
        self._requests = 0
        self._max_recent_durations = max_recent_durations
        # Oldest request ids are evicted first.
        self._request_durations_ms: OrderedDict[str, float] = OrderedDict()
        self._tool_success: Counter[str] = Counter()
        self._tool_error: Counter[str] = Counter()
        self._catalog_refreshes = 0
        self._catalog_failures = 0
        self._catalog_skipped_entries = 0

    def incr_request(self) -> None:
        with self._lock:
            self._requests += 1

    def record_duration(self, request_id: str, duration_ms: float) -> None:
        with self._lock:
            self._request_durations_ms[request_id] = duration_ms
            self._request_durations_ms.move_to_end(request_id)
            while len(self._request_durations_ms) > self._max_recent_durations:
                self._request_durations_ms.popitem(last=False)

    def record_tool(self, tool: str, *, success: bool) -> None:
        with self._lock:
            if success:
                self._tool_success[tool] += 1
            else:
                self._tool_error[tool] += 1

    def record_catalog_refresh(self, *, success: bool, skipped_entries: int = 0) -> None:
        with self._lock:
            if success:
                self._catalog_refreshes += 1
                self._catalog_skipped_entries += skipped_entries
            else:
                self._catalog_failures += 1

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            return {
                "requests": self._requests,
                "tool_success": dict(self._tool_success),
                "tool_error": dict(self._tool_error),
                "catalog_refreshes": self._catalog_refreshes,
                "catalog_refresh_failures": self._catalog_failures,
                "catalog_skipped_entries": self._catalog_skipped_entries,
                "recent_request_durations_ms": dict(self._request_durations_ms),
            }

    def reset(self) -> None:
        with self._lock:
            self._requests = 0
            self._request_durations_ms.clear()
            self._tool_success.clear()
            self._tool_error.clear()
            self._catalog_refreshes = 0
            self._catalog_failures = 0
            self._catalog_skipped_entries = 0


default_metrics = MetricsRecorder()
