"""
Search tokens for encrypted contact fields.

Tokens are stored next to (never instead of) the sealed value so that
substring filters run without decrypting every record. Leakage is bounded
to which records share a normalized contact fragment.
"""
import re
from dataclasses import dataclass

_NON_DIGITS = re.compile(r"[^0-9]+")


def normalize_email(value: str) -> str:
    """Trim surrounding whitespace and lowercase."""
    return value.strip().lower()


def normalize_phone(value: str) -> str:
    """Keep only the decimal digits 0-9."""
    return _NON_DIGITS.sub("", value)


@dataclass(frozen=True)
class SearchQuery:
    """Fragments of a free-text query matched against stored tokens."""

    text: str
    email: str
    digits: str

    @property
    def empty(self) -> bool:
        return not self.text


def query_fragments(q: str | None) -> SearchQuery:
    """Split a raw listing query into the fragments each token column needs.

    ``email`` is compared to email tokens, ``digits`` to phone tokens; an
    empty ``digits`` means phone tokens are not filtered at all.
    """
    text = (q or "").strip()
    return SearchQuery(
        text=text,
        email=normalize_email(text),
        digits=normalize_phone(text),
    )
