"""
Declarative request validation.

Each endpoint declares its fields and the rules they must satisfy:

    CREATE_POST = RequestValidator(
        FieldRules("title", [length(1, 255, "..."), matches(r"...", "...")]),
        FieldRules("content", [length(1, 10000, "...")]),
        FieldRules("tags", [array(5, "..."), each(r"...", 50, "...")], optional=True),
        model=CreatePostRequest,
    )

Every rule of every field is evaluated, so one rejected request reports
the complete set of violations. The validator is a FastAPI dependency:
on success it returns the parsed request model.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable

from email_validator import EmailNotValidError, validate_email
from fastapi import Request
from pydantic import BaseModel, ValidationError

from scribe.core.errors import ValidationFailedError, ValidationViolation


# =============================================================================
# Rules
# =============================================================================


@dataclass(frozen=True)
class Rule:
    """A predicate over one field value plus the message shown when it fails."""

    check: Callable[[Any], bool]
    message: str

    def __call__(self, value: Any) -> bool:
        return self.check(value)


def length(min_length: int = 0, max_length: int | None = None, message: str = "") -> Rule:
    def check(value: Any) -> bool:
        if not isinstance(value, str):
            return False
        if len(value) < min_length:
            return False
        return max_length is None or len(value) <= max_length

    return Rule(check, message or f"Must be between {min_length} and {max_length} characters")


def matches(pattern: str, message: str) -> Rule:
    compiled = re.compile(pattern)
    return Rule(lambda value: isinstance(value, str) and compiled.fullmatch(value) is not None, message)


def not_empty(message: str) -> Rule:
    return Rule(lambda value: isinstance(value, str) and value.strip() != "", message)


def is_email(message: str = "Please provide a valid email") -> Rule:
    def check(value: Any) -> bool:
        if not isinstance(value, str):
            return False
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            return False
        return True

    return Rule(check, message)


def array(max_items: int, message: str) -> Rule:
    return Rule(lambda value: isinstance(value, list) and len(value) <= max_items, message)


def each(pattern: str, max_length: int, message: str) -> Rule:
    """Every element is a string matching ``pattern`` and at most ``max_length`` long."""
    compiled = re.compile(pattern)

    def check(value: Any) -> bool:
        if not isinstance(value, list):
            return False
        return all(
            isinstance(item, str) and len(item) <= max_length and compiled.fullmatch(item) is not None
            for item in value
        )

    return Rule(check, message)


# =============================================================================
# Validator
# =============================================================================


_MISSING = object()

INVALID_CHARACTERS = "Request body contains invalid characters"


def _encodable(value: Any) -> bool:
    """True when every string in a decoded JSON value can be written back out as UTF-8."""
    if isinstance(value, str):
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            return False
        return True
    if isinstance(value, dict):
        return all(_encodable(k) and _encodable(v) for k, v in value.items())
    if isinstance(value, list):
        return all(_encodable(item) for item in value)
    return True


@dataclass(frozen=True)
class FieldRules:
    name: str
    rules: list[Rule] = field(default_factory=list)
    optional: bool = False
    redact: bool = False


class RequestValidator:
    """Validates a JSON object body against per-field rules."""

    def __init__(self, *fields: FieldRules, model: type[BaseModel]):
        self.fields = fields
        self.model = model

    def violations(self, body: dict[str, Any]) -> list[ValidationViolation]:
        """Evaluate every rule; never stops at the first failure."""
        found: list[ValidationViolation] = []
        for field_rules in self.fields:
            value = body.get(field_rules.name, _MISSING)
            if value is _MISSING or value is None:
                if field_rules.optional:
                    continue
                value = None
            echoed = {} if field_rules.redact else {"value": value}
            for rule in field_rules.rules:
                if not rule(value):
                    found.append(ValidationViolation(field=field_rules.name, message=rule.message, **echoed))
        return found

    def validate(self, body: Any) -> BaseModel:
        """Return the parsed model or raise ``ValidationFailedError`` with every violation."""
        if not isinstance(body, dict):
            raise ValidationFailedError(
                violations=[ValidationViolation(field="body", message="Request body must be a JSON object")]
            )
        if not _encodable(body):
            raise ValidationFailedError(violations=[ValidationViolation(field="body", message=INVALID_CHARACTERS)])

        found = self.violations(body)
        if found:
            raise ValidationFailedError(violations=found)

        try:
            return self.model.model_validate(body)
        except ValidationError as e:
            raise ValidationFailedError(violations=violations_from_pydantic(e.errors())) from e

    async def __call__(self, request: Request) -> BaseModel:
        raw = await request.body()
        try:
            body = json.loads(raw) if raw else {}
        except (ValueError, UnicodeDecodeError):
            raise ValidationFailedError(
                violations=[ValidationViolation(field="body", message="Malformed JSON body")]
            )
        return self.validate(body)


def violations_from_pydantic(errors: Any) -> list[ValidationViolation]:
    """Translate pydantic / FastAPI error dicts into violations."""
    found = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        found.append(
            ValidationViolation(
                field=".".join(loc) or "body",
                message=error.get("msg", "Invalid value"),
                value=error.get("input"),
            )
        )
    return found
