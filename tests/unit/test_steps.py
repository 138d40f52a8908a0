"""Unit tests for the account, role and topics steps."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock


class TestAccountStep:
    """Tests for step 1."""

    def _build(self, users, register=None):
        from signup.services import AccountStep

        auth = MagicMock()
        auth.register = register or AsyncMock(return_value={"userId": 1})
        return AccountStep.build(users, auth, debounce_delay=0.01, timeout=1.0), auth

    def test_accepted_carries_all_values(self, users, valid_account):
        from signup.schemas import StepOutcome

        step, auth = self._build(users)

        async def scenario():
            for name, value in valid_account.items():
                step.change(name, value)
            return await step.submit({})

        result = asyncio.run(scenario())

        assert step.skippable is False
        assert result.outcome is StepOutcome.ACCEPTED
        assert result.values == valid_account
        auth.register.assert_awaited_once_with(valid_account)

    def test_declined_carries_field_errors(self, users):
        from signup.schemas import StepOutcome

        step, auth = self._build(users)
        result = asyncio.run(step.submit({}))

        assert result.outcome is StepOutcome.DECLINED
        assert "username" in result.field_errors
        auth.register.assert_not_awaited()

    def test_declined_carries_root_error(self, users, valid_account):
        from airlite.http import ApiError

        step, _ = self._build(users, AsyncMock(side_effect=ApiError("x", 409, {"message": "Email already in use"})))

        async def scenario():
            for name, value in valid_account.items():
                step.change(name, value)
            return await step.submit({})

        result = asyncio.run(scenario())
        assert result.message == "Email already in use"
        assert result.field_errors == {}

    def test_back_after_registration_continues_without_revalidating(self, valid_account):
        """The account's own username is taken after register; returning to step 1 must not trip on it."""
        from signup.schemas import StepOutcome
        from signup.services import RoleStep, SignupWizard
        from tests.fakes import FakeUserRepository

        taken = set()

        async def username_check(payload):
            if payload["value"] in taken:
                return {"isValid": False, "message": "Username already in use"}
            return {"isValid": True}

        async def register(values):
            taken.add(values["username"])
            return {"userId": 1}

        users = FakeUserRepository({"username": username_check})
        step, auth = self._build(users, AsyncMock(side_effect=register))
        wizard = SignupWizard([step, RoleStep(MagicMock()), MagicMock()])

        async def scenario():
            for name, value in valid_account.items():
                step.change(name, value)
            first = await wizard.next()
            wizard.back()
            second = await wizard.next()
            return first, second

        first, second = asyncio.run(scenario())

        assert first.outcome is StepOutcome.ACCEPTED
        assert second.outcome is StepOutcome.ACCEPTED
        assert second.values == valid_account
        assert wizard.current_step == 2
        auth.register.assert_awaited_once()
        assert len(users.calls_for("username")) == 1

    def test_edited_values_after_registration_are_submitted_again(self, users, valid_account):
        step, auth = self._build(users)

        async def scenario():
            for name, value in valid_account.items():
                step.change(name, value)
            await step.submit({})
            step.change("firstName", "Augusta")
            return await step.submit({})

        result = asyncio.run(scenario())

        assert result.values["firstName"] == "Augusta"
        assert auth.register.await_count == 2
        assert step.registered["firstName"] == "Augusta"

    def test_fields_follow_account_layout(self, users):
        step, _ = self._build(users)
        assert [f.name for f in step.fields] == [
            "firstName",
            "lastName",
            "username",
            "email",
            "password",
            "confirmPassword",
        ]


class TestRoleStep:
    """Tests for step 2."""

    def _build(self, **kwargs):
        from signup.services import RoleStep

        roles = MagicMock()
        roles.request_author = AsyncMock(return_value={"message": "Author request submitted"})
        roles.verify_admin = AsyncMock(return_value={"message": "Admin verified"})
        return RoleStep(roles, **kwargs), roles

    def test_plain_continue(self):
        from signup.schemas import StepOutcome

        step, roles = self._build()
        result = asyncio.run(step.submit({}))

        assert step.skippable is True
        assert result.outcome is StepOutcome.ACCEPTED
        assert result.values == {"requestAuthor": False, "isAdmin": False}
        roles.request_author.assert_not_awaited()

    def test_author_intent_posts_request(self):
        step, roles = self._build()
        step.set_author_intent(True)
        result = asyncio.run(step.submit({}))

        roles.request_author.assert_awaited_once()
        assert result.values == {"requestAuthor": True, "isAdmin": False}

    def test_author_request_failure_declines(self):
        from airlite.http import ApiError
        from signup.schemas import StepOutcome

        step, roles = self._build()
        roles.request_author.side_effect = ApiError("x", 409, {"error": "Author request already pending"})
        step.set_author_intent(True)
        result = asyncio.run(step.submit({}))

        assert result.outcome is StepOutcome.DECLINED
        assert result.message == "Author request already pending"
        assert step.submit_error == "Author request already pending"

    def test_open_admin_dialog_blocks_continue(self):
        from signup.schemas import StepOutcome

        step, roles = self._build()
        opened = step.set_admin(True)
        result = asyncio.run(step.submit({}))

        assert opened.outcome is StepOutcome.PENDING_VERIFICATION
        assert result.outcome is StepOutcome.PENDING_VERIFICATION
        roles.request_author.assert_not_awaited()

    def test_admin_verification_success(self):
        from signup.schemas import StepOutcome

        step, roles = self._build()
        step.request_admin()
        verified = asyncio.run(step.verify_admin("hunter22"))
        result = asyncio.run(step.submit({}))

        roles.verify_admin.assert_awaited_once_with("hunter22")
        assert verified.outcome is StepOutcome.ACCEPTED
        assert step.admin_dialog_open is False
        assert result.values == {"requestAuthor": False, "isAdmin": True}

    def test_admin_verification_failure_stays_pending(self):
        from airlite.http import ApiError
        from signup.schemas import StepOutcome

        step, roles = self._build()
        roles.verify_admin.side_effect = ApiError("x", 401, {"error": "Invalid admin password"})
        step.request_admin()
        result = asyncio.run(step.verify_admin("wrong"))

        assert result.outcome is StepOutcome.PENDING_VERIFICATION
        assert result.message == "Invalid admin password"
        assert step.admin_dialog_open is True
        assert step.admin_verified is False

    def test_empty_admin_password_is_not_sent(self):
        step, roles = self._build()
        step.request_admin()
        result = asyncio.run(step.verify_admin(""))

        assert result.message == "Admin password is required."
        roles.verify_admin.assert_not_awaited()

    def test_cancel_and_uncheck_reset_admin(self):
        step, _ = self._build(form_data={"isAdmin": True, "requestAuthor": True})
        assert step.admin_verified and step.author_intent

        step.request_admin()
        step.cancel_admin()
        assert step.admin_dialog_open is False

        step.set_admin(False)
        assert step.admin_verified is False


class TestTopicsStep:
    """Tests for step 3."""

    TOPICS = [
        {"topicId": 1, "code": "CS", "fullName": "Computer Science"},
        {"topicId": 2, "code": "MATH", "fullName": "Mathematics"},
    ]

    def _build(self, topics=None):
        from signup.services import TopicsStep

        repo = MagicMock()
        repo.list_topics = AsyncMock(return_value=self.TOPICS if topics is None else topics)
        repo.save_interests = AsyncMock(return_value={"message": "Interests saved"})
        return TopicsStep(repo), repo

    def test_loads_once(self):
        step, repo = self._build()

        async def scenario():
            await step.load()
            return await step.load()

        topics = asyncio.run(scenario())

        assert [t.code for t in topics] == ["CS", "MATH"]
        assert topics[0].name == "Computer Science"
        assert topics[0].topic_id == 1
        repo.list_topics.assert_awaited_once()

    def test_load_failure_can_be_retried(self):
        from airlite.http import ApiError

        step, repo = self._build()
        repo.list_topics.side_effect = [ApiError("HTTP 500", 500), self.TOPICS]

        async def scenario():
            await step.load()
            assert step.load_error == "Failed to fetch topics from the server."
            assert not step.loaded
            await step.load()

        asyncio.run(scenario())
        assert step.load_error is None
        assert len(step.topics) == 2

    def test_malformed_topics_are_skipped(self):
        step, _ = self._build([{"code": "CS"}, {"fullName": "No code"}])
        topics = asyncio.run(step.load())
        assert [t.code for t in topics] == ["CS"]

    def test_toggle_and_submit(self):
        from signup.schemas import StepOutcome

        step, repo = self._build()
        assert step.toggle("MATH") is True
        assert step.toggle("CS") is True
        assert step.toggle("MATH") is False

        result = asyncio.run(step.submit({}))

        repo.save_interests.assert_awaited_once_with(["CS"])
        assert result.outcome is StepOutcome.ACCEPTED
        assert result.values == {"topicCodes": ["CS"]}

    def test_submit_failure_declines(self):
        from airlite.http import ApiError
        from signup.schemas import StepOutcome

        step, repo = self._build()
        repo.save_interests.side_effect = ApiError("x", 400, {"error": "Unknown topic code"})
        result = asyncio.run(step.submit({}))

        assert result.outcome is StepOutcome.DECLINED
        assert result.message == "Unknown topic code"
        assert step.skippable is False


class TestWizardFactory:
    def test_create_signup_wizard_wires_three_steps(self):
        import config
        from airlite import ApiSession
        from signup.app import create_signup_wizard
        from signup.services import AccountStep, RoleStep, TopicsStep

        wizard = create_signup_wizard(api=ApiSession("http://backend.test/api"))
        try:
            assert [type(s) for s in wizard.steps] == [AccountStep, RoleStep, TopicsStep]
            assert wizard.state.total_steps == 3
            assert wizard.completion_delay == config.settings.wizard.completion_delay
        finally:
            wizard.close()
