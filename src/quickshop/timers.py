from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import timedelta
from typing import Protocol


class Cancellable(Protocol):
  def cancel(self) -> None: ...

  def cancelled(self) -> bool: ...


class Scheduler(Protocol):
  def call_later(self, delay: timedelta, callback: Callable[[], None]) -> Cancellable: ...


class LoopScheduler:
  """Schedules callbacks on an asyncio loop, by default the one running at construction."""

  def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
    if loop is None:
      try:
        loop = asyncio.get_running_loop()
      except RuntimeError as exc:
        raise RuntimeError(
          "LoopScheduler needs a running event loop; pass a loop or another Scheduler"
        ) from exc
    self._loop = loop

  @property
  def loop(self) -> asyncio.AbstractEventLoop:
    return self._loop

  def call_later(self, delay: timedelta, callback: Callable[[], None]) -> Cancellable:
    return self._loop.call_later(delay.total_seconds(), callback)


class TimerSlot:
  """Holds at most one pending callback; arming again cancels the previous one."""

  __slots__ = ("_name", "_scheduler", "_handle")

  def __init__(self, name: str, scheduler: Scheduler) -> None:
    self._name = name
    self._scheduler = scheduler
    self._handle: Cancellable | None = None

  @property
  def name(self) -> str:
    return self._name

  @property
  def pending(self) -> bool:
    return self._handle is not None and not self._handle.cancelled()

  def arm(self, delay: timedelta, callback: Callable[[], None]) -> Cancellable:
    self.cancel()

    def fire() -> None:
      self._handle = None
      callback()

    handle = self._scheduler.call_later(delay, fire)
    self._handle = handle
    return handle

  def cancel(self) -> None:
    if self._handle is not None:
      self._handle.cancel()
      self._handle = None


__all__ = ["Cancellable", "LoopScheduler", "Scheduler", "TimerSlot"]
