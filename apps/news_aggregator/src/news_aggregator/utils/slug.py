"""Slug helpers."""

from __future__ import annotations

import re
import secrets
import string
import unicodedata

_SUFFIX_ALPHABET = string.ascii_letters + string.digits


def slugify(value: str | None, separator: str = "-") -> str:
    text = unicodedata.normalize("NFKD", value or "")
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.replace("@", f"{separator}at{separator}").lower()
    text = re.sub(r"[^a-z0-9\s_-]+", "", text)
    text = re.sub(r"[\s_-]+", separator, text)
    return text.strip(separator)


def random_suffix(length: int = 8) -> str:
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))


def unique_slug(title: str | None, *, suffix_length: int = 8) -> str:
    base = slugify(title)
    suffix = random_suffix(suffix_length)
    if not base:
        return suffix
    return f"{base}-{suffix}"
