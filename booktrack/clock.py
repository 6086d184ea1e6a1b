"""Time source used by services so tests can pin "today"."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Naive local timestamp, matching the ``DATETIME`` columns."""

    return datetime.now()


__all__ = ["Clock", "local_now"]
