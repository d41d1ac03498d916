# app/services/slug_parser.py  # Splits an invitation slug into guest-name tokens and the RSVP code.

# =================================================================================
# 🔗 INVITATION SLUG PARSER
# ---------------------------------------------------------------------------------
# Format: name-name-CODE (1..n name tokens, CODE = 6 alphanumeric chars).
# Shape validation only; no I/O. Every violation yields the same failure value
# so a probing client learns nothing about which rule failed.
# =================================================================================

import re
from dataclasses import dataclass, field
from typing import List, Optional

MIN_SLUG_LENGTH = 8  # 1-char name + hyphen + 6-char code.
_CODE_RE = re.compile(r"[A-Za-z0-9]{6}")


@dataclass(frozen=True)
class ParsedSlug:
    ok: bool
    names: List[str] = field(default_factory=list)
    code: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def invalid(cls) -> "ParsedSlug":
        return cls(ok=False, error="invalid_format")


def parse_slug(slug: Optional[str]) -> ParsedSlug:
    """Parses 'john-jane-abc123' into names ['john', 'jane'] and code 'ABC123'."""
    if not slug or len(slug) < MIN_SLUG_LENGTH or "-" not in slug:
        return ParsedSlug.invalid()

    *name_parts, code = slug.split("-")
    if not _CODE_RE.fullmatch(code):
        return ParsedSlug.invalid()

    names = [part for part in name_parts if part]
    if not names:
        return ParsedSlug.invalid()

    return ParsedSlug(ok=True, names=names, code=code.upper())
