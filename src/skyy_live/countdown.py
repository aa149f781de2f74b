"""Live countdown to the next fixture."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from .dates import Clock, ensure_aware, parse_instant, utc_now

LOGGER = logging.getLogger(__name__)

TICK_SECONDS = 1.0

MS_PER_DAY = 86_400_000
MS_PER_HOUR = 3_600_000
MS_PER_MINUTE = 60_000
MS_PER_SECOND = 1_000


def _pad(value: int) -> str:
    return str(value).zfill(2)


@dataclass(frozen=True)
class TimeLeft:
    days: str
    hours: str
    minutes: str
    seconds: str

    @property
    def total_seconds(self) -> int:
        return (
            int(self.days) * 86_400
            + int(self.hours) * 3_600
            + int(self.minutes) * 60
            + int(self.seconds)
        )

    @property
    def is_zero(self) -> bool:
        return self.total_seconds == 0

    def as_dict(self) -> dict[str, str]:
        return {
            "days": self.days,
            "hours": self.hours,
            "minutes": self.minutes,
            "seconds": self.seconds,
        }


ZERO = TimeLeft("00", "00", "00", "00")


def time_left(target: object, now: Optional[datetime] = None) -> TimeLeft:
    """Break the time remaining until ``target`` into padded units.

    Days are not wrapped and may grow beyond two digits. A missing,
    unparsable or already reached target gives all zeros.
    """

    instant = parse_instant(target)
    if instant is None:
        return ZERO
    delta = instant - ensure_aware(now)
    total_ms = (delta.days * 86_400 + delta.seconds) * 1_000 + delta.microseconds // 1_000
    if total_ms <= 0:
        return ZERO
    return TimeLeft(
        days=_pad(total_ms // MS_PER_DAY),
        hours=_pad((total_ms % MS_PER_DAY) // MS_PER_HOUR),
        minutes=_pad((total_ms % MS_PER_HOUR) // MS_PER_MINUTE),
        seconds=_pad((total_ms % MS_PER_MINUTE) // MS_PER_SECOND),
    )


Listener = Callable[[TimeLeft], None]


class Countdown:
    """Per-view countdown ticking once per second on the running event loop.

    The timer is acquired by :meth:`start` and released by :meth:`stop`; only
    one timer handle exists per instance. Changing the target recomputes
    immediately and restarts the cadence one interval from now.
    """

    def __init__(
        self,
        target: object = None,
        *,
        clock: Clock = utc_now,
        interval: float = TICK_SECONDS,
    ) -> None:
        self._target = target
        self._clock = clock
        self._interval = interval
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._handle: Optional[asyncio.TimerHandle] = None
        self._deadline = 0.0
        self._active = False
        self._listeners: List[Listener] = []
        self.ticks = 0
        self.value = time_left(target, clock())

    @property
    def target(self) -> object:
        return self._target

    @property
    def running(self) -> bool:
        return self._handle is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> None:
        if self._active:
            return
        self._loop = asyncio.get_running_loop()
        self._active = True
        LOGGER.debug("Countdown started for target %r", self._target)
        self._refresh()
        self._arm()

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        self._disarm()
        LOGGER.debug("Countdown stopped after %d ticks", self.ticks)

    def set_target(self, target: object) -> None:
        if target == self._target:
            return
        self._target = target
        self._disarm()
        self._refresh()
        if self._active:
            self._arm()

    async def __aenter__(self) -> "Countdown":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.stop()

    def _arm(self) -> None:
        assert self._loop is not None
        self._deadline = self._loop.time() + self._interval
        self._handle = self._loop.call_at(self._deadline, self._tick)

    def _disarm(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()

    def _tick(self) -> None:
        self._handle = None
        self.ticks += 1
        self._refresh()
        if not self._active or self._handle is not None:
            return
        assert self._loop is not None
        self._deadline += self._interval
        self._handle = self._loop.call_at(self._deadline, self._tick)

    def _refresh(self) -> None:
        self.value = time_left(self._target, self._clock())
        for listener in list(self._listeners):
            try:
                listener(self.value)
            except Exception:
                LOGGER.exception("Countdown listener failed")


__all__ = ["Countdown", "TICK_SECONDS", "TimeLeft", "ZERO", "time_left"]
