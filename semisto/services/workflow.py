"""
Step Workflow Engine — shared state machine behind checkout, donation and
funding allocation.

A workflow is an ordered list of named steps. Each run is a WorkflowState:

    step_index   position of the active step
    context      read-only inputs fixed when the run starts (cart lines,
                 pickup options, the funding proposal, ...)
    fields       what the user has entered so far
    completed    set once, when the terminal step is reached
    result       whatever the commit action returned

Transitions (all through ``Workflow.dispatch(state, action)``):

    update    → set declared fields (text fields only take text)
    next      → blocked unless the guards of the active step and of every
                earlier, non-skipped step hold on {**context, **fields};
                steps whose ``skip`` predicate holds are passed over;
                entering the terminal step runs ``commit``
    previous  → always allowed, keeps fields, honours ``skip``
    reset     → fresh run with the same context
    <custom>  → flow-specific handlers (e.g. "select_amount")

Once completed, a run is closed: navigation and updates are rejected with
WORKFLOW_COMPLETED and ``commit`` can never fire a second time for it.
``dispatch`` never mutates the state it is given.
"""

import copy
import logging

from semisto.utils.errors import E

logger = logging.getLogger(__name__)


class WorkflowActionError(Exception):
    """Raised by action handlers for malformed payloads."""

    def __init__(self, message, field=None):
        self.message = message
        self.field = field
        super().__init__(message)


class Step:
    """One named step.

    Args:
        name:  Step key, e.g. "info".
        guard: Predicate over the merged context+fields; must hold to leave
               the step forwards. None means always allowed.
        error: Message returned when the guard fails.
        skip:  Predicate; when true the step is passed over.
    """

    def __init__(self, name, guard=None, error=None, skip=None):
        self.name = name
        self.guard = guard
        self.error = error or f"Step '{name}' is incomplete"
        self.skip = skip

    def __repr__(self):
        return f"Step({self.name!r})"


class WorkflowState:
    def __init__(self, step_index=0, fields=None, context=None, completed=False, result=None):
        self.step_index = step_index
        self.fields = dict(fields or {})
        self.context = dict(context or {})
        self.completed = completed
        self.result = result

    @property
    def values(self):
        """Context and fields merged; fields win on key clashes."""
        return {**self.context, **self.fields}

    def copy(self):
        return WorkflowState(
            step_index=self.step_index,
            fields=copy.deepcopy(self.fields),
            context=copy.deepcopy(self.context),
            completed=self.completed,
            result=copy.deepcopy(self.result),
        )

    def to_dict(self):
        return {
            "step_index": self.step_index,
            "fields": self.fields,
            "context": self.context,
            "completed": self.completed,
            "result": self.result,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            step_index=data.get("step_index", 0),
            fields=data.get("fields"),
            context=data.get("context"),
            completed=data.get("completed", False),
            result=data.get("result"),
        )


class WorkflowResult:
    """Outcome of one dispatch.

    Attributes:
        state:      The state after the action (the input state if rejected).
        ok:         False when the action was rejected.
        error:      Human-readable reason, None when ok.
        code:       E.* error code, None when ok.
        committed:  True only for the dispatch that ran the commit action.
        step:       Name of the step whose guard blocked, when relevant.
    """

    def __init__(self, state, ok=True, error=None, code=None, committed=False, step=None):
        self.state = state
        self.ok = ok
        self.error = error
        self.code = code
        self.committed = committed
        self.step = step


class Workflow:
    """Definition of one kind of step workflow.

    Args:
        name:     Workflow key, used in logs and session keys.
        steps:    Ordered Step list; the last one is terminal.
        commit:   Callable(values: dict) → JSON-serialisable result; run once
                  per completed run when the terminal step is entered.
        fields:   Declared fields with their initial values.
        handlers: {action_type: callable(fields: dict, action: dict)} that
                  mutate the (copied) fields for flow-specific actions.
        editable: Fields the generic "update" action may set; defaults to
                  every declared field.
    """

    def __init__(self, name, steps, commit, fields=None, handlers=None, editable=None):
        if len(steps) < 2:
            raise ValueError("a workflow needs at least two steps")
        self.name = name
        self.steps = list(steps)
        self.commit = commit
        self.initial_fields = dict(fields or {})
        self.handlers = dict(handlers or {})
        self.editable = frozenset(editable if editable is not None else self.initial_fields)

    # ── Introspection ────────────────────────────────────────────────────

    @property
    def step_names(self):
        return [s.name for s in self.steps]

    @property
    def terminal_index(self):
        return len(self.steps) - 1

    def current_step(self, state):
        return self.steps[state.step_index]

    def blocking_step(self, state):
        """First step up to the active one whose guard fails, or None.

        Earlier steps are checked again because fields they validated can
        still be changed by "update" further along.
        """
        values = state.values
        for index in range(state.step_index + 1):
            if index != state.step_index and self._skipped(index, values):
                continue
            step = self.steps[index]
            if step.guard is not None and not step.guard(values):
                return step
        return None

    def can_advance(self, state):
        """True when every guard up to the active step holds (terminal never advances)."""
        if state.completed or state.step_index >= self.terminal_index:
            return False
        return self.blocking_step(state) is None

    def start(self, context=None, **fields):
        """Return a fresh run at the first step."""
        initial = copy.deepcopy(self.initial_fields)
        unknown = set(fields) - set(initial)
        if unknown:
            raise WorkflowActionError(f"Unknown field(s): {', '.join(sorted(unknown))}")
        initial.update(fields)
        return WorkflowState(step_index=0, fields=initial, context=context)

    def describe(self, state):
        """Serialisable view of a run for the rendering layer."""
        return {
            "workflow": self.name,
            "steps": self.step_names,
            "step": self.current_step(state).name,
            "step_index": state.step_index,
            "fields": state.fields,
            "completed": state.completed,
            "can_advance": self.can_advance(state),
            "result": state.result,
        }

    # ── Dispatch ─────────────────────────────────────────────────────────

    def dispatch(self, state, action):
        """Apply one action to a run and return a WorkflowResult."""
        action_type = (action or {}).get("type")
        if not action_type:
            return self._reject(state, "Action type is required", E.VALIDATION_REQUIRED)

        if action_type == "reset":
            return WorkflowResult(self.start(context=copy.deepcopy(state.context)))

        if state.completed:
            return self._reject(
                state, "This submission has already been completed", E.WORKFLOW_COMPLETED,
            )

        if action_type == "next":
            return self._next(state)
        if action_type == "previous":
            return self._previous(state)

        if action_type == "update":
            handler = self._update_fields
        else:
            handler = self.handlers.get(action_type)
            if handler is None:
                return self._reject(state, f"Unknown action '{action_type}'", E.VALIDATION_INVALID)

        new_state = state.copy()
        try:
            handler(new_state.fields, action)
        except WorkflowActionError as exc:
            return self._reject(state, exc.message, E.VALIDATION_INVALID)
        return WorkflowResult(new_state)

    def _update_fields(self, fields, action):
        values = action.get("fields")
        if not isinstance(values, dict):
            raise WorkflowActionError("'fields' must be an object")
        unknown = set(values) - self.editable
        if unknown:
            raise WorkflowActionError(f"Field(s) cannot be updated: {', '.join(sorted(unknown))}")
        for key, value in values.items():
            fields[key] = self._text_value(key, value)

    def _text_value(self, key, value):
        """Text fields take strings; plain numbers are kept as their text."""
        if not isinstance(self.initial_fields.get(key), str) or isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        raise WorkflowActionError(f"'{key}' must be a string", field=key)

    def _skipped(self, index, values):
        step = self.steps[index]
        return step.skip is not None and bool(step.skip(values))

    def _next(self, state):
        if not self.can_advance(state):
            step = self.blocking_step(state) or self.current_step(state)
            logger.debug(
                "%s: blocked at step %s", self.name, step.name,
                extra={"workflow": self.name, "step": step.name},
            )
            return self._reject(state, step.error, E.WORKFLOW_BLOCKED, step=step.name)

        values = state.values
        index = state.step_index + 1
        while index < self.terminal_index and self._skipped(index, values):
            index += 1

        new_state = state.copy()
        new_state.step_index = index
        if index != self.terminal_index:
            return WorkflowResult(new_state)

        # Terminal step: the commit runs before the state is marked completed
        # so a failing commit leaves the run where it was.
        new_state.result = self.commit(values)
        new_state.completed = True
        logger.info(
            "%s: run completed", self.name,
            extra={"workflow": self.name, "step": self.steps[index].name},
        )
        return WorkflowResult(new_state, committed=True)

    def _previous(self, state):
        values = state.values
        index = state.step_index - 1
        while index > 0 and self._skipped(index, values):
            index -= 1
        new_state = state.copy()
        new_state.step_index = max(0, index)
        return WorkflowResult(new_state)

    @staticmethod
    def _reject(state, message, code, step=None):
        return WorkflowResult(state, ok=False, error=message, code=code, step=step)
