"""Tests for the step workflow engine."""

import pytest

from semisto.services.workflow import Step, Workflow, WorkflowActionError
from semisto.utils.errors import E


def _workflow(commit=None, **kwargs):
    calls = []

    def _commit(values):
        calls.append(values)
        return {"n": len(calls)}

    wf = Workflow(
        "demo",
        steps=[
            Step("a", guard=lambda v: bool(v.get("name")), error="name needed"),
            Step("b", skip=lambda v: v.get("skip_b", False)),
            Step("c"),
        ],
        commit=commit or _commit,
        fields={"name": "", "skip_b": False},
        **kwargs,
    )
    return wf, calls


class TestNavigation:
    def test_guard_blocks_next(self):
        wf, _ = _workflow()
        state = wf.start()
        result = wf.dispatch(state, {"type": "next"})
        assert result.ok is False
        assert result.code == E.WORKFLOW_BLOCKED
        assert result.step == "a"
        assert result.state.step_index == 0

    def test_next_after_update(self):
        wf, _ = _workflow()
        state = wf.dispatch(wf.start(), {"type": "update", "fields": {"name": "Ada"}}).state
        result = wf.dispatch(state, {"type": "next"})
        assert result.ok
        assert wf.current_step(result.state).name == "b"

    def test_previous_keeps_fields_and_floors_at_zero(self):
        wf, _ = _workflow()
        state = wf.start(name="Ada")
        state = wf.dispatch(state, {"type": "next"}).state
        state = wf.dispatch(state, {"type": "previous"}).state
        assert state.step_index == 0
        assert state.fields["name"] == "Ada"
        assert wf.dispatch(state, {"type": "previous"}).state.step_index == 0

    def test_dispatch_does_not_mutate_input(self):
        wf, _ = _workflow()
        state = wf.start()
        wf.dispatch(state, {"type": "update", "fields": {"name": "Ada"}})
        assert state.fields["name"] == ""

    def test_earlier_guard_is_checked_again(self):
        wf, calls = _workflow()
        state = wf.dispatch(wf.start(name="Ada"), {"type": "next"}).state
        state = wf.dispatch(state, {"type": "update", "fields": {"name": ""}}).state
        result = wf.dispatch(state, {"type": "next"})
        assert result.code == E.WORKFLOW_BLOCKED
        assert result.step == "a"
        assert result.error == "name needed"
        assert calls == []


class TestCommit:
    def test_commit_runs_once_on_terminal_step(self):
        wf, calls = _workflow()
        state = wf.start(name="Ada")
        state = wf.dispatch(state, {"type": "next"}).state
        result = wf.dispatch(state, {"type": "next"})

        assert result.committed is True
        assert result.state.completed is True
        assert result.state.result == {"n": 1}
        assert len(calls) == 1

        again = wf.dispatch(result.state, {"type": "next"})
        assert again.ok is False
        assert again.code == E.WORKFLOW_COMPLETED
        assert len(calls) == 1

    def test_skipped_step_leads_straight_to_commit(self):
        wf, calls = _workflow()
        state = wf.start(name="Ada", skip_b=True)
        result = wf.dispatch(state, {"type": "next"})
        assert result.committed
        assert wf.current_step(result.state).name == "c"
        assert len(calls) == 1

    def test_failing_commit_leaves_run_open(self):
        def boom(values):
            raise RuntimeError("down")

        wf, _ = _workflow(commit=boom)
        state = wf.start(name="Ada", skip_b=True)
        with pytest.raises(RuntimeError):
            wf.dispatch(state, {"type": "next"})
        assert state.completed is False
        assert state.step_index == 0

    def test_reset_starts_over_with_same_context(self):
        wf, _ = _workflow()
        state = wf.start(context={"k": 1}, name="Ada", skip_b=True)
        done = wf.dispatch(state, {"type": "next"}).state
        fresh = wf.dispatch(done, {"type": "reset"}).state
        assert fresh.completed is False
        assert fresh.step_index == 0
        assert fresh.fields["name"] == ""
        assert fresh.context == {"k": 1}


class TestActions:
    def test_missing_type(self):
        wf, _ = _workflow()
        assert wf.dispatch(wf.start(), {}).code == E.VALIDATION_REQUIRED

    def test_unknown_action(self):
        wf, _ = _workflow()
        assert wf.dispatch(wf.start(), {"type": "fly"}).code == E.VALIDATION_INVALID

    def test_update_rejects_undeclared_field(self):
        wf, _ = _workflow()
        result = wf.dispatch(wf.start(), {"type": "update", "fields": {"hack": 1}})
        assert result.ok is False
        assert result.code == E.VALIDATION_INVALID

    def test_update_limited_to_editable_fields(self):
        wf, _ = _workflow(editable=("name",))
        result = wf.dispatch(wf.start(), {"type": "update", "fields": {"skip_b": True}})
        assert result.ok is False

    def test_update_keeps_text_fields_textual(self):
        wf, _ = _workflow()
        state = wf.dispatch(wf.start(), {"type": "update", "fields": {"name": 42, "skip_b": True}}).state
        assert state.fields == {"name": "42", "skip_b": True}
        result = wf.dispatch(state, {"type": "update", "fields": {"name": {"x": 1}}})
        assert result.ok is False
        assert result.code == E.VALIDATION_INVALID

    def test_custom_handler(self):
        def shout(fields, action):
            if not action.get("text"):
                raise WorkflowActionError("text required")
            fields["name"] = action["text"].upper()

        wf, _ = _workflow(handlers={"shout": shout})
        state = wf.dispatch(wf.start(), {"type": "shout", "text": "ada"}).state
        assert state.fields["name"] == "ADA"
        assert wf.dispatch(state, {"type": "shout"}).ok is False

    def test_describe(self):
        wf, _ = _workflow()
        view = wf.describe(wf.start())
        assert view["steps"] == ["a", "b", "c"]
        assert view["step"] == "a"
        assert view["can_advance"] is False
