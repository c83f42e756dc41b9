"""
Input validation for build requests.

Runs before any directory or process work. appName and packageName end up
as process arguments and inside generated project files, so nothing
unchecked may get past this point.
"""

import re
from typing import Any, Mapping

from .errors import ValidationError, ValidationErrorKind
from .models import BuildRequest

PACKAGE_NAME_RE = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)+$")

PACKAGE_NAME_RULES = (
    "Package name must be in reverse domain format: start with a lowercase "
    "letter, use only lowercase letters, digits and underscores in each "
    "segment, and have at least two dot-separated segments (e.g. com.example.game)"
)

# wire name -> attribute name
REQUIRED_FIELDS = (
    ("gameCode", "game_code"),
    ("appName", "app_name"),
    ("packageName", "package_name"),
)


def is_valid_package_name(package_name: str) -> bool:
    return bool(PACKAGE_NAME_RE.fullmatch(package_name))


def validate_build_request(data: Mapping[str, Any]) -> BuildRequest:
    """
    Check a raw request body and turn it into a BuildRequest.

    Raises:
        ValidationError: MissingField if any field is absent, not a string or
            blank; InvalidAppName if appName starts with "-" (it would read as
            a command-line option); InvalidPackageName if packageName breaks
            the grammar.
    """
    values = {}
    for wire_name, attr in REQUIRED_FIELDS:
        value = data.get(wire_name)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(
                ValidationErrorKind.MISSING_FIELD,
                wire_name,
                f"Missing required field: {wire_name}",
            )
        values[attr] = value

    # Game code is embedded verbatim, the identifiers are not
    values["app_name"] = values["app_name"].strip()
    values["package_name"] = values["package_name"].strip()

    if values["app_name"].startswith("-"):
        raise ValidationError(
            ValidationErrorKind.INVALID_APP_NAME,
            "appName",
            f"Invalid app name '{values['app_name']}'. App names must not start with '-'",
        )

    if not is_valid_package_name(values["package_name"]):
        raise ValidationError(
            ValidationErrorKind.INVALID_PACKAGE_NAME,
            "packageName",
            f"Invalid package name '{values['package_name']}'. {PACKAGE_NAME_RULES}",
        )

    return BuildRequest(**values)
