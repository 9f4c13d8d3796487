from __future__ import annotations

import threading
from collections import OrderedDict
from contextlib import contextmanager
from typing import Hashable, Iterator, Optional

from ..core.constants import DEFAULT_IDEMPOTENCY_CACHE_SIZE
from ..core.exceptions import ActionInProgressError


class RequestGuard:
    """Rejects overlapping calls per employee and replays repeated tokens.

    A double-press on the clock button must not increment ``num_clock_ins``
    twice. Overlapping calls are refused, and a call that reuses the token
    of an earlier successful call gets the earlier result back.
    """

    def __init__(self, *, cache_size: int = DEFAULT_IDEMPOTENCY_CACHE_SIZE):
        self._lock = threading.Lock()
        self._in_flight: set[str] = set()
        self._results: "OrderedDict[Hashable, object]" = OrderedDict()
        self._cache_size = max(int(cache_size), 1)

    @contextmanager
    def hold(self, employee_id: str) -> Iterator[None]:
        with self._lock:
            if employee_id in self._in_flight:
                raise ActionInProgressError(f"Another attendance action for employee {employee_id} is in progress")
            self._in_flight.add(employee_id)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard(employee_id)

    def recall(self, key: Optional[Hashable]) -> Optional[object]:
        if key is None:
            return None
        with self._lock:
            result = self._results.get(key)
            if result is not None:
                self._results.move_to_end(key)
            return result

    def remember(self, key: Optional[Hashable], result: object) -> None:
        if key is None:
            return
        with self._lock:
            self._results[key] = result
            self._results.move_to_end(key)
            while len(self._results) > self._cache_size:
                self._results.popitem(last=False)
