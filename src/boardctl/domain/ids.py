"""ID patterns, generation, and environment slugs.

Every entity gets ``{prefix}{12 hex chars}`` drawn from a random UUID.

INVARIANT: IDs are permanent. Once generated, an ID never changes.
"""

from __future__ import annotations

import re
import unicodedata
import uuid

TYPE_PREFIXES: dict[str, str] = {
    "user": "usr_",
    "environment": "env_",
    "board": "brd_",
    "card": "crd_",
}

ID_PATTERNS: dict[str, re.Pattern[str]] = {
    kind: re.compile(rf"^{prefix}[0-9a-f]{{12}}$") for kind, prefix in TYPE_PREFIXES.items()
}

SLUG_MAX_LENGTH = 50


def generate_id(kind: str) -> str:
    """Generate a new random ID for *kind*.

    Raises:
        ValueError: If *kind* is not a known entity type.
    """
    prefix = TYPE_PREFIXES.get(kind)
    if prefix is None:
        msg = f"Unknown entity type: {kind!r}. Expected one of {sorted(TYPE_PREFIXES)}"
        raise ValueError(msg)
    return f"{prefix}{uuid.uuid4().hex[:12]}"


def validate_id(entity_id: str, kind: str) -> bool:
    """Check whether *entity_id* matches the expected pattern for *kind*."""
    pattern = ID_PATTERNS.get(kind)
    if pattern is None:
        return False
    return pattern.match(entity_id) is not None


def slugify(text: str) -> str:
    """URL-friendly slug: lowercase ASCII, hyphen-separated, at most 50 chars.

    Examples:
        >>> slugify("Équipe Produto")
        'equipe-produto'
        >>> slugify("  --Sprint   #42-- ")
        'sprint-42'
    """
    decomposed = unicodedata.normalize("NFD", text.lower())
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = re.sub(r"[^a-z0-9\s-]", "", ascii_only)
    hyphenated = re.sub(r"-+", "-", re.sub(r"\s+", "-", cleaned))
    return hyphenated.strip("-")[:SLUG_MAX_LENGTH]


def unique_slug(base: str, existing: set[str]) -> str:
    """Append ``-2``, ``-3``, ... to *base* until it is not in *existing*."""
    slug = base
    counter = 2
    while slug in existing:
        slug = f"{base}-{counter}"
        counter += 1
    return slug
