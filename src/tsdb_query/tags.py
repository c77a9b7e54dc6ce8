"""Tag sets and identifier sanitization."""

from __future__ import annotations

import unicodedata

from tsdb_query.errors import CleanError, CleanReason, QueryFormatError

_ALLOWED_PUNCTUATION = frozenset("-_./")


def _is_allowed(char: str) -> bool:
    if char in _ALLOWED_PUNCTUATION:
        return True
    category = unicodedata.category(char)
    # Letters (L*) and decimal digits (Nd)
    return category[0] == "L" or category == "Nd"


def clean(s: str) -> str:
    """Remove characters not allowed in metric names, tag keys and tag values.

    Letters, digits and ``- _ . /`` are kept, Unicode included. Raises
    CleanError if ``s`` is empty or if nothing is left after filtering.
    """
    if not s:
        raise CleanError(
            "metric/tagk/tagv cleaning passed a zero length string",
            CleanReason.EMPTY_INPUT,
        )
    cleaned = "".join(char for char in s if _is_allowed(char))
    if not cleaned:
        raise CleanError(
            "cleaning metric/tagk/tagv resulted in a zero length string",
            CleanReason.EMPTY_RESULT,
            original=s,
        )
    return cleaned


class TagSet(dict[str, str]):
    """Tag key to tag value mapping identifying a time series."""

    def equal(self, other: dict[str, str]) -> bool:
        """True if both sets hold exactly the same k=v pairs."""
        if len(self) != len(other):
            return False
        return all(k in other and other[k] == v for k, v in self.items())

    def subset(self, other: dict[str, str]) -> bool:
        """True if all k=v pairs in other are in self."""
        return all(k in self and self[k] == v for k, v in other.items())

    def tags(self) -> str:
        """Serialize as ``a=b,c=d``, alphabetized by key."""
        return ",".join(f"{k}={self[k]}" for k in sorted(self))

    def __str__(self) -> str:
        return f"{{{self.tags()}}}"

    def clean(self) -> TagSet:
        """Return a new TagSet with every key and value sanitized."""
        cleaned = TagSet()
        for k, v in self.items():
            try:
                kc = clean(k)
            except CleanError as e:
                raise e.annotate(k, e.cleaned) from e
            try:
                vc = clean(v)
            except CleanError as e:
                raise e.annotate(v, e.cleaned) from e
            cleaned[kc] = vc
        return cleaned


def parse_tags(text: str) -> TagSet:
    """Parse tagk=tagv pairs of the form ``k=v,m=o``.

    Whitespace around keys and values is trimmed. Raises QueryFormatError on
    a pair without ``=`` or on a duplicated key.
    """
    ts = TagSet()
    for pair in text.split(","):
        key, sep, value = pair.partition("=")
        if not sep:
            raise QueryFormatError(f"tsdb: bad tag: {pair}")
        key = key.strip()
        value = value.strip()
        if key in ts:
            raise QueryFormatError(f"tsdb: duplicated tag: {pair}")
        ts[key] = value
    return ts


__all__ = ["TagSet", "clean", "parse_tags"]
