"""Form contract validation.

Every input form (registration, profile update, campaign creation, ...)
is a pydantic model. ``collect_violations`` evaluates the whole form and
returns every field violation instead of stopping at the first one;
``validate_form`` raises ``FormValidationError`` carrying that list, and
the app turns it into a 422 envelope.
"""

from dataclasses import dataclass
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ValidationError
from starlette.datastructures import UploadFile
from starlette.requests import Request

from versalles.common.exceptions import FormValidationError

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class Violation:
    field: str
    message: str


def _violations_from(exc: ValidationError) -> list[Violation]:
    violations = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__all__"
        violations.append(Violation(field=field, message=error["msg"]))
    return violations


def collect_violations(schema: type[M], data: Mapping[str, Any]) -> list[Violation]:
    """Return every violation of ``schema`` in ``data`` (empty when valid)."""
    try:
        schema.model_validate(dict(data))
    except ValidationError as exc:
        return _violations_from(exc)
    return []


def validate_form(schema: type[M], data: Mapping[str, Any] | None) -> M:
    """Validate ``data`` against ``schema`` or raise FormValidationError."""
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise FormValidationError([Violation("__all__", "Expected an object")])
    try:
        return schema.model_validate(dict(data))
    except ValidationError as exc:
        raise FormValidationError(_violations_from(exc)) from None


async def read_payload(request: Request) -> dict[str, Any]:
    """Read a JSON, urlencoded or multipart body into a plain dict.

    File parts are dropped; this service stores no uploads.
    """
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise FormValidationError([Violation("__all__", "Malformed JSON body")]) from None
        if not isinstance(body, dict):
            raise FormValidationError([Violation("__all__", "Expected an object")])
        return body

    form = await request.form()
    return {
        key: value
        for key, value in form.items()
        if not isinstance(value, UploadFile)
    }
