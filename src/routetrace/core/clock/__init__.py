"""Schedulers that own tracker timers."""

from routetrace.core.clock.scheduler import (
    AsyncioScheduler,
    Scheduler,
    TimerHandle,
    VirtualScheduler,
)

__all__ = ["AsyncioScheduler", "Scheduler", "TimerHandle", "VirtualScheduler"]
