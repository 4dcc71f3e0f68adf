"""Tests for bounded polling and kubectl readiness waits."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock

import pytest

from autodevops.deployment.errors import DeploymentError
from autodevops.deployment.polling import (
    WaitResult,
    WaitStatus,
    kubectl_probe,
    poll_until,
    require_ready,
    wait_for_condition,
)
from autodevops.deployment.shell_commands import CommandResult


class FakeClock:
    """Clock advanced only by the fake sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class TestPollUntil:
    """Tests for the generic polling primitive."""

    def test_ready_on_first_probe(self) -> None:
        clock = FakeClock()

        result = poll_until(
            lambda remaining: (WaitStatus.READY, "done"),
            timeout=10,
            interval=1,
            clock=clock,
            sleep=clock.sleep,
        )

        assert result.status is WaitStatus.READY
        assert result.attempts == 1
        assert result.detail == "done"
        assert clock.sleeps == []

    def test_ready_after_pending_probes(self) -> None:
        clock = FakeClock()
        outcomes = iter(
            [(WaitStatus.PENDING, ""), (WaitStatus.PENDING, ""), (WaitStatus.READY, "")]
        )

        result = poll_until(
            lambda remaining: next(outcomes),
            timeout=10,
            interval=2,
            clock=clock,
            sleep=clock.sleep,
        )

        assert result.ready
        assert result.attempts == 3
        assert clock.sleeps == [2, 2]
        assert result.elapsed == 4

    def test_never_ready_times_out_at_deadline_not_before(self) -> None:
        clock = FakeClock()

        result = poll_until(
            lambda remaining: (WaitStatus.PENDING, "still waiting"),
            timeout=12,
            interval=5,
            clock=clock,
            sleep=clock.sleep,
        )

        assert result.status is WaitStatus.TIMED_OUT
        assert result.elapsed >= 12
        # The last pause is shortened to land exactly on the deadline
        assert clock.sleeps == [5, 5, 2]
        assert result.detail == "still waiting"

    def test_probe_receives_remaining_time(self) -> None:
        clock = FakeClock()
        seen: list[float] = []

        def probe(remaining: float) -> tuple[WaitStatus, str]:
            seen.append(remaining)
            return WaitStatus.PENDING, ""

        poll_until(probe, timeout=3, interval=1, clock=clock, sleep=clock.sleep)

        assert seen == [3, 2, 1]

    def test_errored_probe_stops_immediately(self) -> None:
        clock = FakeClock()

        result = poll_until(
            lambda remaining: (WaitStatus.ERRORED, "forbidden"),
            timeout=10,
            interval=1,
            clock=clock,
            sleep=clock.sleep,
        )

        assert result.status is WaitStatus.ERRORED
        assert result.detail == "forbidden"
        assert result.attempts == 1

    def test_cancel_before_first_probe(self) -> None:
        cancel = threading.Event()
        cancel.set()
        probe = MagicMock()

        result = poll_until(probe, timeout=10, interval=1, cancel=cancel)

        assert result.status is WaitStatus.CANCELLED
        probe.assert_not_called()

    def test_cancel_during_pause(self) -> None:
        cancel = MagicMock(spec=threading.Event)
        cancel.is_set.return_value = False
        cancel.wait.return_value = True

        result = poll_until(
            lambda remaining: (WaitStatus.PENDING, ""),
            timeout=10,
            interval=1,
            cancel=cancel,
        )

        assert result.status is WaitStatus.CANCELLED
        assert result.attempts == 1
        cancel.wait.assert_called_once()


class TestKubectlProbe:
    """Tests for the kubectl wait probe."""

    def test_success_is_ready(self) -> None:
        kubectl = MagicMock()
        kubectl.wait_for.return_value = CommandResult(success=True, stdout="condition met")

        probe = kubectl_probe(kubectl, "ready", "ns", resource="pod", interval=5)

        assert probe(100) == (WaitStatus.READY, "condition met")
        assert kubectl.wait_for.call_args.kwargs["timeout_seconds"] == 5

    @pytest.mark.parametrize(
        "stderr",
        [
            "error: timed out waiting for the condition on pods/db-0",
            "error: no matching resources found",
            'Error from server (NotFound): jobs.batch "app-migrate" not found',
        ],
    )
    def test_absent_or_slow_resources_are_pending(self, stderr: str) -> None:
        kubectl = MagicMock()
        kubectl.wait_for.return_value = CommandResult(
            success=False, stderr=stderr, returncode=1
        )

        status, detail = kubectl_probe(
            kubectl, "ready", "ns", resource="pod", interval=5
        )(100)

        assert status is WaitStatus.PENDING
        assert detail == stderr

    def test_other_failures_are_errors(self) -> None:
        kubectl = MagicMock()
        kubectl.wait_for.return_value = CommandResult(
            success=False, stderr="error: You must be logged in to the server", returncode=1
        )

        status, _ = kubectl_probe(kubectl, "ready", "ns", resource="pod", interval=5)(100)

        assert status is WaitStatus.ERRORED

    def test_missing_kubectl_is_an_error(self) -> None:
        kubectl = MagicMock()
        kubectl.wait_for.return_value = CommandResult(
            success=False, stderr="Required command not found: kubectl", returncode=127
        )

        status, detail = kubectl_probe(
            kubectl, "ready", "ns", resource="pod", interval=5
        )(100)

        assert status is WaitStatus.ERRORED
        assert "kubectl" in detail

    def test_missing_kubectl_fails_the_wait_on_first_attempt(self) -> None:
        kubectl = MagicMock()
        kubectl.wait_for.return_value = CommandResult(
            success=False, stderr="Required command not found: kubectl", returncode=127
        )
        sleep = MagicMock()

        result = wait_for_condition(
            kubectl, "ready", "ns", resource="pod", timeout=600, interval=5, sleep=sleep
        )

        assert result.status is WaitStatus.ERRORED
        assert result.attempts == 1
        sleep.assert_not_called()
        with pytest.raises(DeploymentError) as excinfo:
            require_ready(result, "database pod")
        assert excinfo.value.details == "Required command not found: kubectl"

    def test_step_never_exceeds_remaining_and_is_at_least_one_second(self) -> None:
        kubectl = MagicMock()
        kubectl.wait_for.return_value = CommandResult(success=True)
        probe = kubectl_probe(kubectl, "ready", "ns", resource="pod", interval=5)

        probe(2.5)
        assert kubectl.wait_for.call_args.kwargs["timeout_seconds"] == 3
        probe(0.2)
        assert kubectl.wait_for.call_args.kwargs["timeout_seconds"] == 1


class TestWaitForCondition:
    def test_passes_selector_and_resource(self) -> None:
        kubectl = MagicMock()
        kubectl.wait_for.return_value = CommandResult(success=True)

        result = wait_for_condition(
            kubectl,
            "ready",
            "app-review",
            resource="pod",
            selector="app=postgres,release=review-app",
            timeout=30,
            interval=1,
        )

        assert result.ready
        args, kwargs = kubectl.wait_for.call_args
        assert args == ("ready", "app-review")
        assert kwargs["resource"] == "pod"
        assert kwargs["selector"] == "app=postgres,release=review-app"

    def test_timeout_with_fake_clock(self) -> None:
        kubectl = MagicMock()
        kubectl.wait_for.return_value = CommandResult(
            success=False, stderr="error: timed out waiting for the condition", returncode=1
        )
        clock = FakeClock()

        result = wait_for_condition(
            kubectl,
            "available",
            "ns",
            resource="deployments/app",
            timeout=600,
            interval=5,
            clock=clock,
            sleep=clock.sleep,
        )

        assert result.status is WaitStatus.TIMED_OUT
        assert clock.now == 600
        assert result.attempts == 120


class TestRequireReady:
    def test_ready_passes(self) -> None:
        require_ready(WaitResult(WaitStatus.READY, 1.0, 1), "pod")

    def test_timeout_raises_with_nonzero_code(self) -> None:
        with pytest.raises(DeploymentError) as excinfo:
            require_ready(
                WaitResult(WaitStatus.TIMED_OUT, 600.0, 120, "timed out"), "deployment app"
            )

        assert "Timed out after 600s" in excinfo.value.message
        assert excinfo.value.details == "timed out"
        assert excinfo.value.returncode == 1

    @pytest.mark.parametrize("status", [WaitStatus.ERRORED, WaitStatus.CANCELLED])
    def test_other_failures_raise(self, status: WaitStatus) -> None:
        with pytest.raises(DeploymentError):
            require_ready(WaitResult(status, 0.0, 1), "job app-migrate")
