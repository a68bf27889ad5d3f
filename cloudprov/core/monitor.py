"""Resource readiness monitor.

StateMonitor observes a resource after a long-running operation (disk copy,
archive upload) has been started and reports when it becomes usable.

Two entry points share the same gateway reads:

* ``wait_until_ready`` -- the caller's coroutine is suspended between polls.
  Elapsed time is accumulated in poll intervals.  A ``Failed`` resource is
  polled until the timeout unless ``fail_fast`` is set.
* ``watch_until_ready`` -- polling runs in a background task and is reported
  through a ``ReadinessWatch``: a last-value-wins progress stream plus
  single-assignment completion and error futures.  Exactly one of the two
  futures is ever resolved.  The watch can be cancelled at any tick.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

import structlog

from cloudprov.errors import (
    MonitorTimeoutError,
    ProvisioningFailedError,
    TransportError,
    WatchCancelledError,
)
from cloudprov.gateway.base import ResourceGateway
from cloudprov.models.resources import Resource, ResourceKind
from cloudprov.observability.metrics import monitor_outcomes_total, monitor_polls_total

_log = structlog.get_logger(component="core.monitor")

DEFAULT_POLL_INTERVAL = 5.0

T = TypeVar("T")


class LatestValueChannel(Generic[T]):
    """Single-slot channel where a newer value replaces an unread one.

    ``publish`` never blocks, so a slow or absent consumer cannot stall the
    producer.  Each iterator yields values in publish order, possibly
    skipping intermediate ones, and stops once the channel is closed and the
    last value has been delivered.
    """

    def __init__(self) -> None:
        self._value: T | None = None
        self._seq = 0
        self._closed = False
        self._changed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def latest(self) -> T | None:
        return self._value

    def publish(self, value: T) -> None:
        if self._closed:
            raise RuntimeError("publish on a closed channel")
        self._value = value
        self._seq += 1
        self._changed.set()

    def close(self) -> None:
        self._closed = True
        self._changed.set()

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        seen = 0
        while True:
            if self._seq > seen:
                seen = self._seq
                yield self._value  # type: ignore[misc]
                continue
            if self._closed:
                return
            self._changed.clear()
            await self._changed.wait()


class ReadinessWatch:
    """Handle on a background readiness poll.

    Attributes:
        resource_id: Id of the watched resource.
        completion:  Future resolved with the ``Resource`` once it is available.
        error:       Future resolved with the terminal exception on any
                     failure path (timeout, failed provisioning, transport
                     error, cancellation).
    """

    def __init__(self, resource_id: int) -> None:
        loop = asyncio.get_running_loop()
        self.resource_id = resource_id
        self.completion: asyncio.Future[Resource] = loop.create_future()
        self.error: asyncio.Future[BaseException] = loop.create_future()
        self._progress: LatestValueChannel[Resource] = LatestValueChannel()
        self._cancel_requested = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    @property
    def done(self) -> bool:
        return self.completion.done() or self.error.done()

    def progress(self) -> AsyncIterator[Resource]:
        """Iterate over polled resource views until the watch terminates."""
        return aiter(self._progress)

    @property
    def latest(self) -> Resource | None:
        """Most recently polled view, or None before the first poll."""
        return self._progress.latest

    def cancel(self) -> None:
        """Ask the poll loop to stop at its next tick.  No-op once terminated."""
        if not self.done:
            self._cancel_requested.set()

    async def result(self) -> Resource:
        """Wait for the terminal outcome; return the resource or raise the error."""
        await asyncio.wait([self.completion, self.error], return_when=asyncio.FIRST_COMPLETED)
        if self.completion.done():
            return self.completion.result()
        raise self.error.result()

    async def wait_closed(self) -> None:
        """Wait for the background task to exit."""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    # -- producer side ---------------------------------------------------

    def _attach(self, task: asyncio.Task[None]) -> None:
        self._task = task

    def _publish(self, resource: Resource) -> None:
        self._progress.publish(resource)

    def _complete(self, resource: Resource) -> None:
        if self.done:
            return
        self._progress.close()
        self.completion.set_result(resource)

    def _fail(self, exc: BaseException) -> None:
        if self.done:
            return
        self._progress.close()
        self.error.set_result(exc)

    async def _sleep_or_cancel(self, seconds: float) -> bool:
        """Sleep for *seconds*; return True early if cancellation was requested."""
        try:
            await asyncio.wait_for(self._cancel_requested.wait(), timeout=max(seconds, 0.0))
        except TimeoutError:
            return False
        return True

    @property
    def _cancelled(self) -> bool:
        return self._cancel_requested.is_set()


class StateMonitor:
    """Polls a resource until it reaches a terminal state.

    Args:
        gateway:       Gateway used for every read.
        kind:          Kind of resource being monitored.
        poll_interval: Seconds between reads.
        fail_fast:     Default for ``wait_until_ready``: raise on ``Failed``
                       instead of polling until the timeout.
    """

    def __init__(
        self,
        gateway: ResourceGateway,
        kind: ResourceKind = ResourceKind.DISK,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        fail_fast: bool = False,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")
        self._gateway = gateway
        self._kind = kind
        self._poll_interval = poll_interval
        self._fail_fast = fail_fast

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    async def is_ready(self, resource_id: int) -> bool:
        """Single read: True when the resource is currently available."""
        resource = await self._read(resource_id, mode="check")
        return resource.is_available

    async def wait_until_ready(
        self,
        resource_id: int,
        timeout: float | None = 0.0,
        *,
        fail_fast: bool | None = None,
    ) -> Resource:
        """Poll until the resource is available and return its final view.

        A *timeout* of 0 or None means no deadline.

        Raises:
            TransportError:          a read failed (not retried).
            MonitorTimeoutError:     accumulated wait exceeded a nonzero timeout.
            ProvisioningFailedError: only when *fail_fast* is in effect.
        """
        fail_fast = self._fail_fast if fail_fast is None else fail_fast
        elapsed = 0.0
        while True:
            resource = await self._read(resource_id, mode="wait")
            if resource.is_available:
                self._record_outcome("wait", "available", resource_id, elapsed=elapsed)
                return resource
            if fail_fast and resource.is_failed:
                self._record_outcome("wait", "failed", resource_id, elapsed=elapsed)
                raise ProvisioningFailedError(resource_id, resource.availability)

            await asyncio.sleep(self._poll_interval)
            elapsed += self._poll_interval

            if timeout and elapsed > timeout:
                self._record_outcome("wait", "timeout", resource_id, elapsed=elapsed)
                raise MonitorTimeoutError(resource_id, timeout)

    def watch_until_ready(self, resource_id: int, timeout: float | None = 0.0) -> ReadinessWatch:
        """Start a background poll and return its ``ReadinessWatch``.

        Must be called from a running event loop.  A *timeout* of 0 or None
        means no deadline.
        """
        watch = ReadinessWatch(resource_id)
        task = asyncio.create_task(self._run_watch(watch, timeout or 0.0), name=f"watch-{self._kind}-{resource_id}")
        watch._attach(task)
        _log.debug("watch_started", kind=str(self._kind), resource_id=resource_id, timeout=timeout)
        return watch

    async def _run_watch(self, watch: ReadinessWatch, timeout: float) -> None:
        loop = asyncio.get_running_loop()
        resource_id = watch.resource_id
        deadline = loop.time() + timeout if timeout > 0 else None
        try:
            while True:
                tick = self._poll_interval
                expires = False
                if deadline is not None:
                    remaining = deadline - loop.time()
                    if remaining <= tick:
                        tick, expires = remaining, True

                if await watch._sleep_or_cancel(tick):
                    self._record_outcome("watch", "cancelled", resource_id)
                    watch._fail(WatchCancelledError(resource_id))
                    return

                # Deadline timer fired before the tick timer
                if expires:
                    self._record_outcome("watch", "timeout", resource_id)
                    watch._fail(MonitorTimeoutError(resource_id, timeout))
                    return

                resource = await self._read(resource_id, mode="watch")
                if watch._cancelled:
                    self._record_outcome("watch", "cancelled", resource_id)
                    watch._fail(WatchCancelledError(resource_id))
                    return

                watch._publish(resource)

                if resource.is_available:
                    self._record_outcome("watch", "available", resource_id)
                    watch._complete(resource)
                    return
                if resource.is_failed:
                    self._record_outcome("watch", "failed", resource_id)
                    watch._fail(ProvisioningFailedError(resource_id, resource.availability))
                    return
        except TransportError as exc:
            self._record_outcome("watch", "transport_error", resource_id, error=str(exc))
            watch._fail(exc)
        except asyncio.CancelledError:
            self._record_outcome("watch", "cancelled", resource_id)
            watch._fail(WatchCancelledError(resource_id))
            raise
        except Exception as exc:  # noqa: BLE001
            _log.error("watch_unexpected_error", resource_id=resource_id, error=str(exc))
            watch._fail(exc)

    async def _read(self, resource_id: int, mode: str) -> Resource:
        monitor_polls_total.labels(mode=mode).inc()
        resource = await self._gateway.read_resource(self._kind, resource_id)
        _log.debug(
            "resource_polled",
            mode=mode,
            kind=str(self._kind),
            resource_id=resource_id,
            state=resource.state.value,
            migrated_mb=resource.migrated_mb,
        )
        return resource

    def _record_outcome(self, mode: str, outcome: str, resource_id: int, **extra: object) -> None:
        monitor_outcomes_total.labels(mode=mode, outcome=outcome).inc()
        if outcome == "available":
            _log.info("resource_ready", mode=mode, kind=str(self._kind), resource_id=resource_id, **extra)
        else:
            _log.warning(f"resource_wait_{outcome}", mode=mode, kind=str(self._kind), resource_id=resource_id, **extra)
