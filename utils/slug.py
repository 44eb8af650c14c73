import re
import secrets
import string

from core.config import settings

_ALPHABET = string.digits + string.ascii_lowercase


def slug_base(name: str | None) -> str | None:
    """
    Deterministic part of a slug.

    Lower-cases, turns whitespace runs into "_", drops everything outside
    [\\w-] and trims leading/trailing "-". This is also the natural key that
    uniqueness is enforced on.
    """
    if not name:
        return name
    value = re.sub(r"\s+", "_", name.lower())
    value = re.sub(r"[^\w-]+", "", value)
    return value.strip("-")


def random_suffix(length: int | None = None) -> str:
    length = length or settings.SLUG_SUFFIX_LENGTH
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def derive_slug(name: str | None) -> str | None:
    """
    URL-safe display slug: slug_base(name) plus a random base-36 suffix.

    The suffix makes slugs only probabilistically unique and a renamed entity
    gets a new slug every time, so never look records up by slug.
    """
    if not name:
        return name
    return f"{slug_base(name)}-{random_suffix()}"
