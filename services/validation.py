from typing import Any, Dict, Mapping

from pydantic import ValidationError

from models.auth import PASSWORD_MISMATCH, LoginRequest, SignUpRequest
from services.errors import FormValidationError

FIELD_LABELS = {
    "email": "Email",
    "password": "Password",
    "remember_me": "Remember me",
    "username": "Username",
    "full_name": "Full name",
    "confirm_password": "Confirm password",
    "terms_accepted": "Terms acceptance",
}

# Messages that replace pydantic's built-in wording, keyed by field
FIELD_MESSAGES = {
    "email": "Invalid email address",
}


def field_errors(exc: ValidationError) -> Dict[str, str]:
    """Keep the first error reported for each field"""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "__root__"
        if field in errors:
            continue
        if error["type"] == "missing":
            errors[field] = f"{FIELD_LABELS.get(field, field)} is required"
        elif field in FIELD_MESSAGES:
            errors[field] = FIELD_MESSAGES[field]
        else:
            errors[field] = error["msg"]
    return errors


def validate_login(raw: Mapping[str, Any]) -> LoginRequest:
    try:
        return LoginRequest.model_validate(dict(raw))
    except ValidationError as exc:
        raise FormValidationError(field_errors(exc)) from None


def validate_signup(raw: Mapping[str, Any]) -> SignUpRequest:
    try:
        return SignUpRequest.model_validate(dict(raw))
    except ValidationError as exc:
        errors = field_errors(exc)
        # The model only compares passwords when the password itself passed
        if "confirm_password" not in errors and raw.get("password") != raw.get("confirm_password"):
            errors["confirm_password"] = PASSWORD_MISMATCH
        raise FormValidationError(errors) from None
