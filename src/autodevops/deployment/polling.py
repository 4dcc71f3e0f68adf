"""Bounded polling for Kubernetes readiness conditions.

``poll_until`` is the generic primitive: it calls a probe until the probe
reports a terminal state, the deadline passes, or the caller cancels.
``wait_for_condition`` builds a probe on top of ``kubectl wait`` so that
pods, jobs and deployments that do not exist yet are treated as pending
rather than as failures.
"""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from .errors import DeploymentError
from .shell_commands.runner import COMMAND_NOT_FOUND

if TYPE_CHECKING:
    from .shell_commands import KubectlCommands


class WaitStatus(str, Enum):
    """Outcome of a probe or of a whole wait."""

    READY = "ready"
    PENDING = "pending"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class WaitResult:
    """Final result of a bounded wait."""

    status: WaitStatus
    elapsed: float
    attempts: int
    detail: str = ""

    @property
    def ready(self) -> bool:
        return self.status is WaitStatus.READY


# A probe receives the seconds left before the deadline and reports
# READY, PENDING or ERRORED together with a human-readable detail.
Probe = Callable[[float], tuple[WaitStatus, str]]

# kubectl wait messages that mean "not there yet" rather than "broken"
PENDING_MARKERS = ("timed out", "no matching resources", "not found")


def poll_until(
    probe: Probe,
    *,
    timeout: float,
    interval: float,
    cancel: threading.Event | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> WaitResult:
    """Call ``probe`` until it succeeds, fails, or the deadline passes.

    TIMED_OUT is only ever reported once ``clock()`` has reached the
    deadline, so a wait never gives up early.

    Args:
        probe: Callable reporting the current state
        timeout: Total seconds allowed
        interval: Seconds to pause between pending probes
        cancel: Optional event that aborts the wait when set
        clock: Monotonic time source
        sleep: Pause function used when no cancel event is given

    Returns:
        WaitResult describing how the wait ended
    """
    start = clock()
    deadline = start + timeout
    attempts = 0
    detail = ""

    def finish(status: WaitStatus) -> WaitResult:
        return WaitResult(
            status=status, elapsed=clock() - start, attempts=attempts, detail=detail
        )

    while True:
        if cancel is not None and cancel.is_set():
            return finish(WaitStatus.CANCELLED)

        remaining = deadline - clock()
        if remaining <= 0:
            return finish(WaitStatus.TIMED_OUT)

        attempts += 1
        status, detail = probe(remaining)
        if status in (WaitStatus.READY, WaitStatus.ERRORED):
            return finish(status)

        remaining = deadline - clock()
        if remaining <= 0:
            return finish(WaitStatus.TIMED_OUT)

        delay = min(interval, remaining)
        if cancel is not None:
            if cancel.wait(delay):
                return finish(WaitStatus.CANCELLED)
        else:
            sleep(delay)


def kubectl_probe(
    kubectl: KubectlCommands,
    condition: str,
    namespace: str,
    *,
    resource: str,
    selector: str | None = None,
    interval: float,
) -> Probe:
    """Build a probe running one bounded ``kubectl wait`` per attempt."""

    def probe(remaining: float) -> tuple[WaitStatus, str]:
        # kubectl only accepts whole seconds
        step = max(1, math.ceil(min(remaining, interval)))
        result = kubectl.wait_for(
            condition,
            namespace,
            resource=resource,
            selector=selector,
            timeout_seconds=step,
        )
        if result.success:
            return WaitStatus.READY, result.stdout.strip()

        message = (result.stderr or result.stdout).strip()
        if result.returncode == COMMAND_NOT_FOUND:
            return WaitStatus.ERRORED, message
        if any(marker in message.lower() for marker in PENDING_MARKERS):
            return WaitStatus.PENDING, message
        return WaitStatus.ERRORED, message

    return probe


def wait_for_condition(
    kubectl: KubectlCommands,
    condition: str,
    namespace: str,
    *,
    resource: str,
    selector: str | None = None,
    timeout: float,
    interval: float,
    cancel: threading.Event | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> WaitResult:
    """Wait until ``resource`` reaches ``condition`` or the timeout passes."""
    target = f"{resource} -l {selector}" if selector else resource
    logger.debug(
        "Waiting up to {}s for condition {} on {}", timeout, condition, target
    )
    result = poll_until(
        kubectl_probe(
            kubectl,
            condition,
            namespace,
            resource=resource,
            selector=selector,
            interval=interval,
        ),
        timeout=timeout,
        interval=interval,
        cancel=cancel,
        clock=clock,
        sleep=sleep,
    )
    logger.debug(
        "Wait for {} on {} finished: {} after {:.1f}s ({} attempts)",
        condition,
        target,
        result.status.value,
        result.elapsed,
        result.attempts,
    )
    return result


def require_ready(result: WaitResult, description: str) -> None:
    """Raise DeploymentError unless the wait ended in READY.

    Args:
        result: Result returned by a wait
        description: What was being waited for (e.g., "database pod")

    Raises:
        DeploymentError: If the wait timed out, errored or was cancelled
    """
    if result.ready:
        return

    reasons = {
        WaitStatus.TIMED_OUT: f"Timed out after {result.elapsed:.0f}s waiting for {description}",
        WaitStatus.ERRORED: f"Failed while waiting for {description}",
        WaitStatus.CANCELLED: f"Cancelled while waiting for {description}",
    }
    raise DeploymentError(
        reasons.get(result.status, f"Wait for {description} did not finish"),
        details=result.detail or None,
        returncode=1,
    )
