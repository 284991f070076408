"""
Request rule sets, one validator per endpoint that takes a body.
"""

from __future__ import annotations

from scribe.core.models import (
    CreatePostRequest,
    CreateUserRequest,
    LoginRequest,
    RegisterRequest,
    UpdatePostRequest,
    UpdateProfileRequest,
)
from scribe.core.validation import (
    FieldRules,
    RequestValidator,
    array,
    each,
    is_email,
    length,
    matches,
    not_empty,
)


# =============================================================================
# Shared field rules
# =============================================================================

USERNAME_RULES = [
    length(3, 50, "Username must be between 3 and 50 characters"),
    matches(r"^[a-zA-Z0-9_]+$", "Username can only contain letters, numbers, and underscores"),
]

EMAIL_RULES = [is_email("Please provide a valid email")]

PASSWORD_RULES = [
    length(8, None, "Password must be at least 8 characters long"),
    matches(
        r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]+$",
        "Password must contain at least one uppercase letter, one lowercase letter, "
        "one number, and one special character",
    ),
]

TITLE_RULES = [
    length(1, 255, "Title must be between 1 and 255 characters"),
    matches(r"^[a-zA-Z0-9\s.,!?]+$", "Title can only contain letters, numbers, spaces, and basic punctuation"),
]

CONTENT_RULES = [length(1, 10000, "Content must be between 1 and 10000 characters")]

TAG_RULES = [
    array(5, "Maximum 5 tags allowed"),
    each(
        r"^[a-zA-Z0-9-]+$",
        50,
        "Tags can only contain letters, numbers, and hyphens, and must be 50 characters or less",
    ),
]


# =============================================================================
# Auth
# =============================================================================

REGISTER = RequestValidator(
    FieldRules("username", USERNAME_RULES),
    FieldRules("email", EMAIL_RULES),
    FieldRules("password", PASSWORD_RULES, redact=True),
    model=RegisterRequest,
)

LOGIN = RequestValidator(
    FieldRules("email", EMAIL_RULES),
    FieldRules("password", [not_empty("Password is required")], redact=True),
    model=LoginRequest,
)


# =============================================================================
# Users
# =============================================================================

CREATE_USER = RequestValidator(
    FieldRules("username", USERNAME_RULES),
    FieldRules("email", EMAIL_RULES),
    FieldRules("password", PASSWORD_RULES, optional=True, redact=True),
    model=CreateUserRequest,
)

UPDATE_PROFILE = RequestValidator(
    FieldRules("username", USERNAME_RULES, optional=True),
    FieldRules("email", EMAIL_RULES, optional=True),
    model=UpdateProfileRequest,
)


# =============================================================================
# Posts
# =============================================================================

CREATE_POST = RequestValidator(
    FieldRules("title", TITLE_RULES),
    FieldRules("content", CONTENT_RULES),
    FieldRules("tags", TAG_RULES, optional=True),
    model=CreatePostRequest,
)

UPDATE_POST = RequestValidator(
    FieldRules("title", TITLE_RULES, optional=True),
    FieldRules("content", CONTENT_RULES, optional=True),
    FieldRules("tags", TAG_RULES, optional=True),
    model=UpdatePostRequest,
)
