"""
Structural validation of incoming payloads.

Wraps pydantic so callers get either a typed record or a per-field error map
and never have to handle ``ValidationError`` themselves.
"""
from typing import Any, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.core.exceptions import WHOLE_OBJECT, ErrorMap
from app.schemas.patient_schemas import PatientCreateSchema

M = TypeVar("M", bound=BaseModel)

_VALUE_ERROR_PREFIX = "Value error, "
_REQUEST_SOURCES = ("body", "path", "query")


def _field_key(loc: Tuple[Any, ...]) -> str:
    if not loc:
        return WHOLE_OBJECT
    return ".".join(str(part) for part in loc)


def _message(error: Mapping[str, Any]) -> str:
    if error.get("type") == "missing" and error.get("loc"):
        label = str(error["loc"][-1]).replace("_", " ").capitalize()
        return f"{label} is required"
    msg = error.get("msg", "Invalid value")
    if msg.startswith(_VALUE_ERROR_PREFIX):
        msg = msg[len(_VALUE_ERROR_PREFIX):]
    return msg


def errors_to_map(
    raw_errors: Sequence[Mapping[str, Any]], strip_source: bool = False
) -> ErrorMap:
    """
    Group pydantic error dicts into ``{field_path: [messages]}``.

    Nested paths are dotted (``relation.0.relation_cnic``); errors raised by a
    model-level validator land under ``_errors``. With ``strip_source`` the
    leading ``body``/``path``/``query`` part of a request error location is
    dropped.
    """
    errors: ErrorMap = {}
    for error in raw_errors:
        loc = tuple(error.get("loc") or ())
        if strip_source and loc and loc[0] in _REQUEST_SOURCES:
            loc = loc[1:]
        errors.setdefault(_field_key(loc), []).append(_message(error))
    return errors


def errors_from_validation(exc: ValidationError) -> ErrorMap:
    """Convert a pydantic ``ValidationError`` to an error map."""
    return errors_to_map(exc.errors())


def validate_payload(
    schema: Type[M], payload: Any
) -> Tuple[Optional[M], Optional[ErrorMap]]:
    """Validate ``payload`` against ``schema``; exactly one of the pair is set."""
    if not isinstance(payload, Mapping):
        return None, {WHOLE_OBJECT: ["Request body must be an object"]}
    try:
        return schema.model_validate(dict(payload)), None
    except ValidationError as exc:
        return None, errors_from_validation(exc)


def validate_registration(
    payload: Any,
) -> Tuple[Optional[PatientCreateSchema], Optional[ErrorMap]]:
    return validate_payload(PatientCreateSchema, payload)
