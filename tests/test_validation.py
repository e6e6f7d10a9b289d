"""
Form validation tests
"""

import pytest

from services.errors import FormValidationError
from services.validation import validate_login, validate_signup


class TestLoginValidation:
    def test_valid_credentials_are_normalized(self):
        credentials = validate_login({"email": "  Alice@Example.COM ", "password": "secret1"})
        assert credentials.email == "alice@example.com"
        assert credentials.password == "secret1"
        assert credentials.remember_me is False

    def test_remember_me_checkbox(self):
        credentials = validate_login({"email": "a@b.com", "password": "secret1", "remember_me": "true"})
        assert credentials.remember_me is True

    def test_invalid_email(self):
        with pytest.raises(FormValidationError) as exc_info:
            validate_login({"email": "not-an-email", "password": "secret1"})
        assert exc_info.value.fields == {"email": "Invalid email address"}

    def test_empty_password(self):
        with pytest.raises(FormValidationError) as exc_info:
            validate_login({"email": "a@b.com", "password": ""})
        assert exc_info.value.fields == {"password": "Password is required"}

    def test_missing_fields(self):
        with pytest.raises(FormValidationError) as exc_info:
            validate_login({})
        assert exc_info.value.fields == {
            "email": "Email is required",
            "password": "Password is required",
        }


class TestSignupValidation:
    def test_valid_input(self, signup_form):
        form = validate_signup({**signup_form, "username": " alice ", "full_name": " Alice A "})
        assert form.username == "alice"
        assert form.full_name == "Alice A"
        assert form.terms_accepted is True

    def test_password_mismatch_reported_on_confirm_field(self, signup_form):
        with pytest.raises(FormValidationError) as exc_info:
            validate_signup({**signup_form, "confirm_password": "secret124"})
        assert exc_info.value.fields == {"confirm_password": "Passwords don't match"}

    def test_password_mismatch_reported_when_password_is_weak(self, signup_form):
        with pytest.raises(FormValidationError) as exc_info:
            validate_signup({**signup_form, "password": "short", "confirm_password": "other"})
        fields = exc_info.value.fields
        assert fields["password"] == "Password must be at least 8 characters"
        assert fields["confirm_password"] == "Passwords don't match"

    @pytest.mark.parametrize("terms", [None, "false", False])
    def test_terms_must_be_accepted(self, signup_form, terms):
        data = dict(signup_form)
        if terms is None:
            del data["terms_accepted"]
        else:
            data["terms_accepted"] = terms
        with pytest.raises(FormValidationError) as exc_info:
            validate_signup(data)
        assert exc_info.value.fields == {
            "terms_accepted": "You must accept the terms and conditions"
        }

    @pytest.mark.parametrize("username, message", [
        ("al", "Username must be at least 3 characters"),
        ("a" * 31, "Username must be at most 30 characters"),
        ("alice smith", "Username can only contain letters, numbers and underscores"),
        ("   ", "Username must be at least 3 characters"),
    ])
    def test_username_policy(self, signup_form, username, message):
        with pytest.raises(FormValidationError) as exc_info:
            validate_signup({**signup_form, "username": username})
        assert exc_info.value.fields == {"username": message}

    def test_full_name_required(self, signup_form):
        with pytest.raises(FormValidationError) as exc_info:
            validate_signup({**signup_form, "full_name": "  "})
        assert exc_info.value.fields == {"full_name": "Full name is required"}

    def test_password_needs_letter_and_digit(self, signup_form):
        with pytest.raises(FormValidationError) as exc_info:
            validate_signup({**signup_form, "password": "onlyletters", "confirm_password": "onlyletters"})
        assert exc_info.value.fields == {
            "password": "Password must contain at least one letter and one number"
        }
