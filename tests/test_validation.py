"""
Tests for declarative request validation.

Core principle: one rejected request reports every violation, not just
the first.
"""

import pytest

from scribe.api import schemas
from scribe.core.errors import ValidationFailedError
from scribe.core.models import CreatePostRequest, RegisterRequest
from scribe.core.validation import (
    INVALID_CHARACTERS,
    FieldRules,
    RequestValidator,
    array,
    each,
    length,
    matches,
)


def _violations(validator, body):
    with pytest.raises(ValidationFailedError) as exc_info:
        validator.validate(body)
    return exc_info.value.violations


# =============================================================================
# Rules
# =============================================================================


class TestRules:
    def test_length_bounds(self):
        rule = length(1, 3, "bad")

        assert rule("ab")
        assert not rule("")
        assert not rule("abcd")
        assert not rule(12)

    def test_matches_is_anchored(self):
        rule = matches(r"[a-z]+", "bad")

        assert rule("abc")
        assert not rule("abc1")

    def test_array_and_each(self):
        assert array(2, "bad")(["a", "b"])
        assert not array(2, "bad")(["a", "b", "c"])
        assert not array(2, "bad")("a")
        assert each(r"[a-z]+", 3, "bad")(["ab", "c"])
        assert not each(r"[a-z]+", 3, "bad")(["abcd"])
        assert not each(r"[a-z]+", 3, "bad")([1])


# =============================================================================
# Accumulation
# =============================================================================


class TestAccumulation:
    def test_every_offending_field_reported(self):
        violations = _violations(
            schemas.CREATE_POST,
            {"title": "", "content": "x" * 10001, "tags": [""]},
        )

        assert len(violations) >= 3
        assert {v.field for v in violations} == {"title", "content", "tags"}

    def test_every_failing_rule_reported(self):
        violations = _violations(
            schemas.REGISTER,
            {"username": "a!", "email": "alice@example.com", "password": "Password123!"},
        )

        assert [v.message for v in violations] == [
            "Username must be between 3 and 50 characters",
            "Username can only contain letters, numbers, and underscores",
        ]
        assert all(v.value == "a!" for v in violations)

    def test_missing_required_fields(self):
        violations = _violations(schemas.REGISTER, {})

        assert {v.field for v in violations} == {"username", "email", "password"}
        assert all(v.value is None for v in violations)

    def test_too_many_tags(self):
        violations = _violations(
            schemas.CREATE_POST,
            {"title": "Hello", "content": "Body", "tags": ["a", "b", "c", "d", "e", "f"]},
        )

        assert [v.message for v in violations] == ["Maximum 5 tags allowed"]

    def test_weak_password(self):
        violations = _violations(
            schemas.REGISTER,
            {"username": "alice", "email": "alice@example.com", "password": "password"},
        )

        assert len(violations) == 1
        assert violations[0].field == "password"

    @pytest.mark.parametrize("body", [None, [], "text", 3])
    def test_non_object_body(self, body):
        violations = _violations(schemas.CREATE_POST, body)

        assert violations[0].field == "body"


# =============================================================================
# Success
# =============================================================================


class TestParsing:
    def test_valid_body_becomes_model(self):
        data = schemas.CREATE_POST.validate({"title": "Hello, world!", "content": "Body", "tags": ["a-b"]})

        assert isinstance(data, CreatePostRequest)
        assert data.tags == ["a-b"]

    def test_optional_fields_may_be_absent_or_null(self):
        assert schemas.CREATE_POST.validate({"title": "Hi", "content": "x"}).tags is None
        assert schemas.UPDATE_POST.validate({"tags": None}).model_dump(exclude_none=True) == {}

    def test_email_normalized(self):
        data = schemas.REGISTER.validate(
            {"username": "alice", "email": "Alice@Example.com", "password": "Password123!"}
        )

        assert isinstance(data, RegisterRequest)
        assert data.email == "alice@example.com"

    def test_model_errors_become_violations(self):
        validator = RequestValidator(
            FieldRules("title", [length(1, 10, "bad title")]),
            model=CreatePostRequest,
        )

        # content is not covered by a rule but the model requires it
        violations = _violations(validator, {"title": "ok"})

        assert violations[0].field == "content"


# =============================================================================
# Body hygiene
# =============================================================================


class TestUnencodableText:
    def test_lone_surrogate_is_one_body_violation(self):
        violations = _violations(schemas.CREATE_POST, {"title": "", "content": "bad \ud800 text"})

        # Checked before the field rules, so the empty title is not reported.
        assert [(v.field, v.message) for v in violations] == [("body", INVALID_CHARACTERS)]

    @pytest.mark.parametrize(
        "body",
        [
            {"title": "Hi", "content": "x", "tags": ["ok", "\udfff"]},
            {"title": "Hi", "content": "x", "extra": {"nested": ["\ud800"]}},
            {"title": "Hi", "content": "x", "\ud800": "key"},
        ],
    )
    def test_nested_values_and_keys(self, body):
        violations = _violations(schemas.CREATE_POST, body)

        assert violations[0].message == INVALID_CHARACTERS

    def test_ordinary_unicode_passes(self):
        data = schemas.UPDATE_POST.validate({"content": "café \U0001f600"})

        assert data.content == "café \U0001f600"


class TestRedaction:
    def test_redacted_field_reports_no_value(self):
        body = {"username": "alice", "email": "a@x.com", "password": "hunter2secret"}

        violations = _violations(schemas.REGISTER, body)

        assert {v.field for v in violations} == {"password"}
        for violation in violations:
            assert "value" not in violation.model_fields_set
            assert violation.value is None

    def test_other_fields_still_echo(self):
        body = {"username": "a", "email": "a@x.com", "password": "Password123!"}

        violations = _violations(schemas.REGISTER, body)

        assert violations[0].value == "a"
