"""
Contact validator component.

Checks a candidate contact payload against `ContactPayload` and reports every
violation as a `FieldError`, in schema field order (name, email, phone, favorite).
Messages come from `MESSAGES`, keyed by field and pydantic error type, so a new
field only needs a schema entry and a message entry.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from pydantic import ValidationError as PydanticValidationError

from addressbook.components.contracts import (NAME_MAX_LENGTH,
                                              PHONE_MAX_LENGTH,
                                              ContactPayload,
                                              ContactValidation, FieldError)
from addressbook.core.errors import ValidationError

MESSAGES: Dict[str, Dict[str, str]] = {
    "name": {
        "missing": "Set name for contact",
        "string_type": '"name" must be a string',
        "string_too_short": '"name" is not allowed to be empty',
        "string_too_long": f'"name" must be at most {NAME_MAX_LENGTH} characters long',
    },
    "email": {
        "missing": '"email" is required',
        "string_type": '"email" must be a string',
        "value_error": '"email" must be a valid email',
    },
    "phone": {
        "missing": '"phone" is required',
        "string_type": '"phone" must be a string',
        "string_pattern_mismatch": '"phone" must contain digits only',
        "string_too_long": f'"phone" must be at most {PHONE_MAX_LENGTH} digits long',
    },
    "favorite": {
        "bool_type": '"favorite" must be a boolean',
    },
}

BODY_NOT_OBJECT = FieldError(field="body", code="object_type", message='"value" must be of type object')


def _message_for(field: str, code: str) -> str:
    return MESSAGES.get(field, {}).get(code, f'"{field}" is invalid')


def validate_contact(candidate: Any) -> ContactValidation:
    """
    Validate a candidate contact payload.

    A missing body (None) is treated as an empty object. On success `value` holds
    the normalized payload with `favorite` defaulted; unknown keys are dropped.
    """
    if candidate is None:
        candidate = {}
    if not isinstance(candidate, Mapping):
        return ContactValidation(errors=[BODY_NOT_OBJECT])

    try:
        payload = ContactPayload.model_validate(dict(candidate))
    except PydanticValidationError as exc:
        errors = []
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "body"
            errors.append(FieldError(field=field, code=error["type"], message=_message_for(field, error["type"])))
        return ContactValidation(errors=errors)

    return ContactValidation(value=payload.model_dump())


def require_valid_contact(candidate: Any) -> Dict[str, Any]:
    """Return the normalized payload or raise ValidationError with the first message"""
    result = validate_contact(candidate)
    if not result.ok:
        raise ValidationError(result.first_message)
    return result.value
