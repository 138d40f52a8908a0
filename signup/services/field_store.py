"""Per-field validation state with a latest-request-wins guard.

Every field has a monotonically increasing epoch. Any action that makes an
earlier result obsolete (a keystroke, a new validation request, a cleared
value) bumps the epoch; results computed under an older epoch are dropped by
:meth:`FieldStatusStore.apply`. Responses for one field are therefore applied
in request-issue order regardless of arrival order. Fields never share
epochs, so there is no cross-field cancellation.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from loguru import logger

from ..schemas import FieldDescriptor, FieldStatus, FieldValidationState

Listener = Callable[[str, FieldValidationState], None]


class FieldStatusStore:
    def __init__(self, fields: Iterable[FieldDescriptor], values: Optional[Dict[str, str]] = None):
        self.fields: Dict[str, FieldDescriptor] = {f.name: f for f in fields}
        self._states: Dict[str, FieldValidationState] = {name: FieldValidationState.idle() for name in self.fields}
        self._values: Dict[str, str] = {name: "" for name in self.fields}
        self._epochs: Dict[str, int] = {name: 0 for name in self.fields}
        self._listeners: List[Listener] = []
        for name, value in (values or {}).items():
            if name in self._values and isinstance(value, str):
                self._values[name] = value

    def _check(self, field: str) -> None:
        if field not in self.fields:
            raise KeyError(f"Unknown field: {field}")

    # -- values ---------------------------------------------------------------

    def set_value(self, field: str, value: str) -> None:
        self._check(field)
        self._values[field] = value or ""

    def value(self, field: str) -> str:
        self._check(field)
        return self._values[field]

    def snapshot(self) -> Dict[str, str]:
        """Copy of the current values, safe to hand to an async validation."""
        return dict(self._values)

    # -- epochs ---------------------------------------------------------------

    def epoch(self, field: str) -> int:
        self._check(field)
        return self._epochs[field]

    def begin(self, field: str) -> int:
        """Supersede everything in flight for ``field`` and return the new epoch."""
        self._check(field)
        self._epochs[field] += 1
        return self._epochs[field]

    def is_current(self, field: str, epoch: int) -> bool:
        return self._epochs.get(field) == epoch

    # -- states ---------------------------------------------------------------

    def get(self, field: str) -> FieldValidationState:
        self._check(field)
        return self._states[field]

    def states(self) -> Dict[str, FieldValidationState]:
        return dict(self._states)

    def apply(self, field: str, state: FieldValidationState, epoch: Optional[int] = None) -> bool:
        """Set the state of ``field``.

        With ``epoch`` the write only happens if no newer request was issued
        since; returns False when the result was stale and discarded.
        """
        self._check(field)
        if epoch is not None and not self.is_current(field, epoch):
            logger.debug(f"Discarding stale {state.status.value} result for {field} (epoch {epoch} < {self._epochs[field]})")
            return False
        if self._states[field] == state:
            return True
        self._states[field] = state
        for listener in tuple(self._listeners):
            listener(field, state)
        return True

    def touch(self, field: str) -> int:
        """Invalidate the current result of ``field`` and reset it to idle."""
        epoch = self.begin(field)
        self.apply(field, FieldValidationState.idle(), epoch)
        return epoch

    # -- aggregate ------------------------------------------------------------

    @property
    def required_fields(self) -> List[str]:
        return [name for name, f in self.fields.items() if f.required]

    @property
    def is_submittable(self) -> bool:
        """Every required field is exactly ``valid``. Recomputed on each read."""
        return all(self._states[name].status is FieldStatus.VALID for name in self.required_fields)

    @property
    def is_validating(self) -> bool:
        return any(s.status is FieldStatus.VALIDATING for s in self._states.values())

    def errors(self) -> Dict[str, str]:
        return {
            name: state.message or ""
            for name, state in self._states.items()
            if state.status is FieldStatus.INVALID
        }

    # -- listeners ------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state-change listener; returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def clear_listeners(self) -> None:
        self._listeners.clear()
