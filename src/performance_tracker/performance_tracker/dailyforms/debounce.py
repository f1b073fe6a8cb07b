from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ..core.exceptions import DomainError
from .model import EmployeeEdits

LOGGER = logging.getLogger(__name__)

DraftKey = Tuple[int, int]


@dataclass
class _Pending:
    edits: EmployeeEdits
    last_staged: float


class DraftCoalescer:
    """Debounce for employee checklist edits.

    Rapid UI changes are merged per (employee, form) and written once the
    employee has been quiet for ``quiet_seconds``, or earlier when their form
    is read or submitted (``flush``). Edits are always written to the form
    they were staged for, never to whichever form is current at flush time.
    """

    def __init__(
        self,
        apply: Callable[[int, int, EmployeeEdits], object],
        *,
        quiet_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._apply = apply
        self._quiet_seconds = float(quiet_seconds)
        self._clock = clock
        self._pending: Dict[DraftKey, _Pending] = {}
        self._lock = threading.Lock()

    def stage(self, employee_id: int, form_id: int, edits: EmployeeEdits) -> None:
        key = (int(employee_id), int(form_id))
        with self._lock:
            current = self._pending.get(key)
            merged = current.edits.merge(edits) if current else edits
            self._pending[key] = _Pending(edits=merged, last_staged=self._clock())

    def pending(self, employee_id: int, form_id: int) -> Optional[EmployeeEdits]:
        with self._lock:
            entry = self._pending.get((int(employee_id), int(form_id)))
            return entry.edits if entry else None

    def flush(self, employee_id: int) -> bool:
        """Write every pending draft of ``employee_id``, oldest form first."""

        with self._lock:
            keys = sorted(k for k in self._pending if k[0] == int(employee_id))
            entries = [(k, self._pending.pop(k)) for k in keys]

        written = False
        for key, entry in entries:
            written = self._write(key, entry) or written
        return written

    def flush_due(self) -> List[DraftKey]:
        now = self._clock()
        with self._lock:
            due = sorted(k for k, p in self._pending.items() if now - p.last_staged >= self._quiet_seconds)
            entries = [(k, self._pending.pop(k)) for k in due]

        return [key for key, entry in entries if self._write(key, entry)]

    def _write(self, key: DraftKey, entry: _Pending) -> bool:
        employee_id, form_id = key
        try:
            self._apply(employee_id, form_id, entry.edits)
        except DomainError as e:
            LOGGER.warning("dropping debounced edits of employee=%s form=%s: %s", employee_id, form_id, e.message)
            return False
        except Exception:
            # Keep the edits for the next attempt unless newer ones arrived meanwhile.
            with self._lock:
                newer = self._pending.get(key)
                merged = entry.edits.merge(newer.edits) if newer else entry.edits
                self._pending[key] = _Pending(
                    edits=merged,
                    last_staged=newer.last_staged if newer else entry.last_staged,
                )
            raise
        return True
