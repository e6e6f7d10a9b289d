"""
Form state machine and in-flight registry tests
"""

import pytest

from models.forms import DuplicateSubmission, FormState, FormStatus
from services.errors import ErrorKind
from services.submissions import SubmissionRegistry


class TestFormState:
    def test_success_path(self):
        form = FormState()
        form.begin()
        assert form.in_flight
        form.succeed()
        assert form.status is FormStatus.SUCCESS

    def test_failure_then_edit_returns_to_idle(self):
        form = FormState()
        form.begin()
        form.fail(ErrorKind.INVALID_CREDENTIALS, "Invalid email or password")
        assert form.status is FormStatus.FAILED
        assert form.error is ErrorKind.INVALID_CREDENTIALS

        form.edit()
        assert form.status is FormStatus.IDLE
        assert form.error is None
        assert form.message is None

    def test_begin_while_submitting_is_refused(self):
        form = FormState()
        form.begin()
        with pytest.raises(DuplicateSubmission):
            form.begin()

    def test_resubmit_after_failure_clears_errors(self):
        form = FormState()
        form.begin()
        form.fail(ErrorKind.VALIDATION, "Fix the form", field_errors={"email": "Invalid email address"})
        form.begin()
        assert form.field_errors == {}
        assert form.error is None
        assert form.message is None
        assert form.in_flight

    def test_edit_while_submitting_keeps_submission(self):
        form = FormState()
        form.begin()
        form.edit()
        assert form.in_flight


class TestSubmissionRegistry:
    @pytest.mark.asyncio
    async def test_claim_and_release(self):
        registry = SubmissionRegistry()
        async with registry.claim("form-1") as form:
            assert form.in_flight
            assert "form-1" in registry
        assert "form-1" not in registry
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_duplicate_claim_is_refused(self):
        registry = SubmissionRegistry()
        async with registry.claim("form-1"):
            with pytest.raises(DuplicateSubmission):
                async with registry.claim("form-1"):
                    pass
            assert "form-1" in registry

    @pytest.mark.asyncio
    async def test_release_on_error(self):
        registry = SubmissionRegistry()
        with pytest.raises(RuntimeError):
            async with registry.claim("form-1"):
                raise RuntimeError("boom")
        assert "form-1" not in registry
