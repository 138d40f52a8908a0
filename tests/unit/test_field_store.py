"""Unit tests for FieldStatusStore."""

from __future__ import annotations

import pytest


class TestEpochGuard:
    """Tests for latest-request-wins writes."""

    def test_stale_epoch_is_discarded(self, store):
        """A result computed under an older epoch never overwrites state."""
        from signup.schemas import FieldStatus, FieldValidationState

        old = store.begin("username")
        new = store.begin("username")

        assert store.apply("username", FieldValidationState.valid(), old) is False
        assert store.get("username").status is FieldStatus.IDLE

        assert store.apply("username", FieldValidationState.invalid("taken"), new) is True
        assert store.get("username").message == "taken"

    def test_epochs_are_per_field(self, store):
        """Bumping one field does not invalidate another field's request."""
        from signup.schemas import FieldValidationState

        email_epoch = store.begin("email")
        store.begin("username")
        store.begin("username")

        assert store.is_current("email", email_epoch)
        assert store.apply("email", FieldValidationState.valid(), email_epoch) is True

    def test_touch_resets_and_supersedes(self, store):
        """touch() drops the current result and any in-flight request."""
        from signup.schemas import FieldStatus, FieldValidationState

        epoch = store.begin("username")
        store.apply("username", FieldValidationState.validating(), epoch)
        store.touch("username")

        assert store.get("username").status is FieldStatus.IDLE
        assert store.apply("username", FieldValidationState.valid(), epoch) is False

    def test_unepoched_apply_always_writes(self, store):
        from signup.schemas import FieldStatus, FieldValidationState

        store.begin("email")
        assert store.apply("email", FieldValidationState.valid()) is True
        assert store.get("email").status is FieldStatus.VALID


class TestAggregates:
    """Tests for submittability and error collection."""

    def test_fresh_store_is_not_submittable(self, store):
        assert store.is_submittable is False
        assert store.errors() == {}

    def test_submittable_only_when_every_required_field_is_valid(self, store):
        """One non-valid field keeps the form blocked."""
        from signup.schemas import FieldValidationState

        for name in store.required_fields:
            store.apply(name, FieldValidationState.valid())
        assert store.is_submittable is True

        store.apply("email", FieldValidationState.validating())
        assert store.is_submittable is False
        assert store.is_validating is True

        store.apply("email", FieldValidationState.invalid("Email already in use"))
        assert store.is_submittable is False
        assert store.errors() == {"email": "Email already in use"}

    def test_optional_fields_do_not_gate_submit(self):
        from signup.schemas import FieldDescriptor, FieldValidationState
        from signup.services import FieldStatusStore

        store = FieldStatusStore(
            [FieldDescriptor(name="username", label="Username"), FieldDescriptor(name="bio", label="Bio", required=False)]
        )
        store.apply("username", FieldValidationState.valid())
        assert store.required_fields == ["username"]
        assert store.is_submittable is True


class TestValuesAndListeners:
    """Tests for value storage and change notification."""

    def test_initial_values_ignore_unknown_fields(self):
        from signup.schemas import ACCOUNT_FIELDS
        from signup.services import FieldStatusStore

        store = FieldStatusStore(ACCOUNT_FIELDS, {"username": "alice", "nickname": "al"})
        assert store.value("username") == "alice"
        assert "nickname" not in store.snapshot()

    def test_snapshot_is_a_copy(self, store):
        store.set_value("username", "alice")
        snapshot = store.snapshot()
        store.set_value("username", "bob")
        assert snapshot["username"] == "alice"

    def test_unknown_field_raises(self, store):
        with pytest.raises(KeyError):
            store.get("nickname")
        with pytest.raises(KeyError):
            store.set_value("nickname", "x")

    def test_listener_sees_changes_once(self, store):
        """Listeners fire on real changes only and can unsubscribe."""
        from signup.schemas import FieldValidationState

        seen = []
        unsubscribe = store.subscribe(lambda field, state: seen.append((field, state.status.value)))

        store.apply("username", FieldValidationState.validating())
        store.apply("username", FieldValidationState.validating())
        store.apply("username", FieldValidationState.valid())
        unsubscribe()
        store.apply("username", FieldValidationState.idle())

        assert seen == [("username", "validating"), ("username", "valid")]

    def test_stale_write_does_not_notify(self, store):
        from signup.schemas import FieldValidationState

        seen = []
        store.subscribe(lambda field, state: seen.append(field))
        old = store.begin("email")
        store.begin("email")
        store.apply("email", FieldValidationState.valid(), old)
        assert seen == []
