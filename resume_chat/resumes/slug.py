from __future__ import annotations

"""URL-safe share slugs for public resume chat pages."""

import re
import secrets
import string

_SLUG_ALPHABET = string.ascii_lowercase + string.digits
_SLUG_ID_LENGTH = 10
_NAME_SLUG_MAX = 20
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_VALID_SLUG_RE = re.compile(r"^[a-z0-9-]{10,40}$")


def _random_id(length: int = _SLUG_ID_LENGTH) -> str:
    return "".join(secrets.choice(_SLUG_ALPHABET) for _ in range(length))


def slugify_name(name: str) -> str:
    """Lower-case a name and collapse non-alphanumerics into single hyphens."""
    slug = _NON_ALNUM_RE.sub("-", name.lower()).strip("-")
    return slug[:_NAME_SLUG_MAX].rstrip("-")


def generate_slug(name: str | None = None) -> str:
    """Generate a share slug, prefixed with the owner's name when given."""
    suffix = _random_id()
    if not name:
        return suffix
    prefix = slugify_name(name)
    return f"{prefix}-{suffix}" if prefix else suffix


def is_valid_slug(slug: str) -> bool:
    """Return True for 10-40 lower-case alphanumerics and hyphens."""
    return bool(_VALID_SLUG_RE.match(slug))
