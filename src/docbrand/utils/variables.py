"""Template variable building and substitution.

Content strings reference variables as ``{{name}}`` or ``${name}``. Dotted
names walk into nested mappings (``{{user.email}}``). Unknown names are left
in place so a typo stays visible in the output.
"""

import logging
import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)

ANONYMOUS_USER = "משתמש אנונימי"

# Placeholder user strings that carry no identity
_NON_IDENTITY_USERS = {"User", "user", "anonymous"}

_PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([\w.\-]+)\s*\}\}|\$\{\s*([\w.\-]+)\s*\}")


def build_variables(
    site_url: str,
    extra: Mapping[str, Any] | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Build the document-level variable map.

    Args:
        site_url: Public site URL exposed as FRONTEND_URL and siteUrl.
        extra: Caller variables. They override the defaults.
        now: Clock override for deterministic output.

    Returns:
        New dict with defaults merged under the caller's variables.
    """
    now = now or datetime.now()
    variables: dict[str, Any] = {
        "date": now.strftime("%Y-%m-%d"),
        "time": now.strftime("%H:%M:%S"),
        "year": str(now.year),
        "FRONTEND_URL": site_url,
        "siteUrl": site_url,
    }
    if extra:
        variables.update(extra)
    return variables


def page_variables(
    variables: Mapping[str, Any], page_number: int, total_pages: int
) -> dict[str, Any]:
    """Add the per-page keys (1-based page number and page count)."""
    merged = dict(variables)
    merged.update(
        {
            "page": page_number,
            "pageNumber": page_number,
            "totalPages": total_pages,
        }
    )
    return merged


def resolve_user(
    variables: Mapping[str, Any], anonymous_label: str = ANONYMOUS_USER
) -> tuple[str, str]:
    """
    Extract the user's email and display name from the variable map.

    Priority is ``userObj`` (mapping), then ``user`` (mapping or string). A
    user string containing "@" is an email whose local part becomes the name;
    any other string is a name. Missing data falls back to the anonymous label.

    Args:
        variables: Variable map.
        anonymous_label: Value used when no identity is present.

    Returns:
        (email, name) tuple, never empty.
    """
    email = ""
    name = ""

    user_obj = variables.get("userObj")
    user = variables.get("user")

    if isinstance(user_obj, Mapping):
        email = user_obj.get("email") or user_obj.get("name") or ""
        name = user_obj.get("name") or user_obj.get("email") or ""
    elif isinstance(user, str):
        if "@" in user and len(user) > 3:
            email = user
            name = user.split("@")[0]
        elif user and user not in _NON_IDENTITY_USERS:
            email = user
            name = user
    elif isinstance(user, Mapping):
        email = user.get("email") or user.get("name") or ""
        name = user.get("name") or user.get("email") or ""

    return str(email or anonymous_label), str(name or anonymous_label)


def lookup_variable(variables: Mapping[str, Any], key: str) -> tuple[bool, Any]:
    """
    Find a variable by exact key, then by dotted path.

    Returns:
        (found, value) tuple.
    """
    if key in variables:
        return True, variables[key]

    current: Any = variables
    for part in key.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        else:
            return False, None
    return True, current


def substitute_variables(
    content: str | None,
    variables: Mapping[str, Any],
    anonymous_label: str = ANONYMOUS_USER,
) -> str:
    """
    Replace ``{{name}}`` and ``${name}`` placeholders in content.

    ``user.email`` and ``user.name`` always resolve (see resolve_user), so a
    user placeholder never leaks into a delivered document.

    Args:
        content: Text with placeholders. None is treated as empty.
        variables: Variable map (see build_variables / page_variables).
        anonymous_label: User value when the map carries no identity.

    Returns:
        Substituted text.
    """
    if not content:
        return ""

    user_email, user_name = resolve_user(variables, anonymous_label)
    user_values = {"user.email": user_email, "user.name": user_name}

    def replace(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        if key in user_values:
            return user_values[key]
        found, value = lookup_variable(variables, key)
        if not found:
            logger.debug(f"Unknown template variable '{key}', leaving placeholder")
            return match.group(0)
        if isinstance(value, Mapping):
            logger.debug(f"Template variable '{key}' is a mapping, leaving placeholder")
            return match.group(0)
        return "" if value is None else str(value)

    return _PLACEHOLDER_PATTERN.sub(replace, content)
