"""Tests for Tracer lifecycle and persistence."""

from unittest.mock import MagicMock

import pytest

from pipeline_xray.exceptions import NoActiveExecutionError
from pipeline_xray.registry import MemoryTraceRegistry
from pipeline_xray.tracing import ExecutionStatus, StepType, Tracer


class TestStartExecution:
    def test_persists_immediately(self, tracer: Tracer, registry: MemoryTraceRegistry):
        execution_id = tracer.start_execution("find a bottle", {"originalRequest": "find a bottle"})
        stored = registry.get(execution_id)
        assert stored is not None
        assert stored.status == ExecutionStatus.PENDING
        assert stored.metadata == {"originalRequest": "find a bottle"}
        assert tracer.execution_id == execution_id
        assert tracer.get_execution_id() == execution_id

    def test_restart_abandons_previous(self, tracer: Tracer):
        first = tracer.start_execution("a")
        second = tracer.start_execution("b")
        assert first != second
        assert tracer.execution_id == second

    def test_metadata_copied(self, tracer: Tracer):
        metadata = {"k": "v"}
        tracer.start_execution("a", metadata)
        metadata["k"] = "changed"
        assert tracer.execution is not None
        assert tracer.execution.metadata == {"k": "v"}


class TestNoActiveExecution:
    def test_start_step_without_execution(self, tracer: Tracer):
        with pytest.raises(NoActiveExecutionError):
            tracer.start_step("s", StepType.CUSTOM)

    def test_end_step_without_execution(self, tracer: Tracer):
        tracer.start_execution("a")
        recorder = tracer.start_step("s", StepType.CUSTOM)
        tracer.end_execution()
        with pytest.raises(NoActiveExecutionError):
            tracer.end_step(recorder)

    def test_other_operations_are_noops(self, registry: MemoryTraceRegistry):
        registry_mock = MagicMock(wraps=registry)
        tracer = Tracer(registry_mock)
        tracer.set_status(ExecutionStatus.COMPLETED)
        tracer.fail_execution("nothing open")
        assert tracer.end_execution() is None
        assert tracer.execution_id is None
        registry_mock.save.assert_not_called()


class TestSteps:
    def test_first_step_moves_to_running(self, tracer: Tracer, registry: MemoryTraceRegistry):
        execution_id = tracer.start_execution("a")
        tracer.start_step("s", StepType.CUSTOM)
        stored = registry.get(execution_id)
        assert stored is not None
        assert stored.status == ExecutionStatus.RUNNING

    def test_end_step_appends_and_persists(self, tracer: Tracer, registry: MemoryTraceRegistry):
        execution_id = tracer.start_execution("a")
        first = tracer.start_step("one", StepType.GENERATION)
        tracer.end_step(first)
        second = tracer.start_step("two", StepType.SEARCH)
        tracer.end_step(second)

        stored = registry.get(execution_id)
        assert stored is not None
        assert [s.name for s in stored.steps] == ["one", "two"]
        assert all(s.ended_at is not None for s in stored.steps)

    def test_unsaved_step_not_visible(self, tracer: Tracer, registry: MemoryTraceRegistry):
        execution_id = tracer.start_execution("a")
        recorder = tracer.start_step("s", StepType.CUSTOM)
        recorder.add_artifact("x", 1)
        stored = registry.get(execution_id)
        assert stored is not None
        assert stored.steps == []


class TestStatus:
    def test_end_execution_completes(self, tracer: Tracer, registry: MemoryTraceRegistry):
        execution_id = tracer.start_execution("a")
        execution = tracer.end_execution()
        assert execution is not None
        assert execution.status == ExecutionStatus.COMPLETED
        assert execution.ended_at is not None
        assert tracer.execution_id is None
        stored = registry.get(execution_id)
        assert stored is not None
        assert stored.status == ExecutionStatus.COMPLETED

    def test_failure_is_sticky(self, tracer: Tracer, registry: MemoryTraceRegistry):
        execution_id = tracer.start_execution("a")
        tracer.fail_execution("boom")
        tracer.set_status(ExecutionStatus.COMPLETED)
        tracer.set_status(ExecutionStatus.RUNNING)
        tracer.end_execution()

        stored = registry.get(execution_id)
        assert stored is not None
        assert stored.status == ExecutionStatus.FAILED
        assert stored.metadata == {"failureReason": "boom"}

    def test_failure_reason_merged_into_metadata(self, tracer: Tracer):
        tracer.start_execution("a", {"originalRequest": "a"})
        tracer.fail_execution("boom")
        assert tracer.execution is not None
        assert tracer.execution.metadata == {"originalRequest": "a", "failureReason": "boom"}

    def test_end_with_failure_reason_saves_once(self, tracer: Tracer, registry: MemoryTraceRegistry):
        execution_id = tracer.start_execution("a")
        tracer.end_step(tracer.start_step("s", StepType.CUSTOM))
        saved = []
        registry.subscribe(execution_id, saved.append)

        execution = tracer.end_execution(failure_reason="boom")

        assert execution is not None
        assert len(saved) == 1
        (final,) = saved
        assert final.status == ExecutionStatus.FAILED
        assert final.ended_at is not None
        assert final.metadata == {"failureReason": "boom"}

    def test_backwards_transition_refused(self, tracer: Tracer):
        tracer.start_execution("a")
        tracer.start_step("s", StepType.CUSTOM)
        tracer.set_status(ExecutionStatus.PENDING)
        assert tracer.execution is not None
        assert tracer.execution.status == ExecutionStatus.RUNNING

    def test_set_status_accepts_strings(self, tracer: Tracer, registry: MemoryTraceRegistry):
        execution_id = tracer.start_execution("a")
        tracer.set_status("running")
        stored = registry.get(execution_id)
        assert stored is not None
        assert stored.status == ExecutionStatus.RUNNING

    def test_status_sequence_is_monotonic(self, registry: MemoryTraceRegistry):
        observed: list[ExecutionStatus] = []
        tracer = Tracer(registry)
        execution_id = tracer.start_execution("a")
        registry.subscribe(execution_id, lambda e: observed.append(e.status))

        tracer.end_step(tracer.start_step("s", StepType.CUSTOM))
        tracer.set_status(ExecutionStatus.PENDING)
        tracer.fail_execution("boom")
        tracer.set_status(ExecutionStatus.COMPLETED)
        tracer.end_execution()

        ranks = [s.rank for s in observed]
        assert ranks == sorted(ranks)
        assert observed[-1] == ExecutionStatus.FAILED


class TestRecordingScenario:
    def test_single_search_step(self, tracer: Tracer, registry: MemoryTraceRegistry):
        execution_id = tracer.start_execution("find a bottle")
        step = tracer.start_step("search", StepType.SEARCH, {"q": "bottle"})
        artifact_id = step.add_artifact("Raw Results", {"count": 2})
        step.evaluate_artifact(artifact_id, [{"criterion": "Database Hit", "passed": True, "detail": "found 2"}])
        tracer.end_step(step)
        tracer.end_execution()

        stored = registry.get(execution_id)
        assert stored is not None
        wire = stored.to_wire()
        assert wire["status"] == "completed"
        assert wire["name"] == "find a bottle"
        (recorded,) = wire["steps"]
        assert recorded["input"] == {"q": "bottle"}
        (evaluation,) = recorded["evaluations"]
        assert evaluation["qualified"] is True
        assert evaluation["artifactId"] == artifact_id
