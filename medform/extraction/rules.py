"""Field-level match rules applied to OCR text.

:class:`TextRule` captures the value following a label,
:class:`BooleanRule` resolves a checkbox-style yes/no line into a
:class:`TriState`, and :class:`GenderRule` reduces a captured sex/gender
value to a one-letter code.
"""

import re
from dataclasses import dataclass

from .models import TriState

_CHECKED_BOX = re.compile(r"\[\s*x\s*\]", re.IGNORECASE)

# Label/value separator: ":" or "-" (possibly repeated) with spaces around.
_SEPARATOR_OPTIONAL = r"[ \t]*(?:[:\-]+[ \t]*)?"
_SEPARATOR_REQUIRED = r"[ \t]*[:\-]+[ \t]*"


def extract_value(text: str, patterns: tuple[re.Pattern[str], ...]) -> str:
    """Return the first captured group of the first matching pattern.

    Args:
        text: Full document text.
        patterns: Candidate patterns in priority order.

    Returns:
        Trimmed captured value, or an empty string if nothing matches.
    """
    for pattern in patterns:
        match = pattern.search(text)
        if match and match.group(1):
            return match.group(1).strip()
    return ""


def check_boolean(text: str, keywords: tuple[str, ...]) -> TriState:
    """Resolve a checkbox field by scanning keyword-bearing lines.

    The first line that contains a keyword and either "yes"/"[x]" or "no"
    decides the value. Keyword lines carrying neither token are skipped.

    Args:
        text: Full document text.
        keywords: Context keywords identifying the field's line.

    Returns:
        ``TriState.TRUE``/``FALSE`` for a resolved line, otherwise
        ``TriState.UNKNOWN``.
    """
    lowered = tuple(k.lower() for k in keywords)
    for line in text.split("\n"):
        lower_line = line.lower()
        if not any(k in lower_line for k in lowered):
            continue
        if "yes" in lower_line or _CHECKED_BOX.search(lower_line):
            return TriState.TRUE
        if "no" in lower_line:
            return TriState.FALSE
    return TriState.UNKNOWN


def normalize_gender(raw: str) -> str:
    """Map a raw sex/gender value to ``M``, ``F``, ``O`` or empty."""
    value = raw.upper()
    if value.startswith("M"):
        return "M"
    if value.startswith("F"):
        return "F"
    if value:
        return "O"
    return ""


def label_pattern(
    label: str, value: str, *, separator_required: bool = False
) -> re.Pattern[str]:
    """Compile a case-insensitive ``<label> [:-] <value>`` pattern.

    Args:
        label: Regex for the field label.
        value: Regex for the accepted value characters (captured).
        separator_required: Whether ``:``/``-`` must follow the label.
            Used for short generic labels that also occur in running text.

    Returns:
        Compiled pattern whose first group is the value.
    """
    separator = _SEPARATOR_REQUIRED if separator_required else _SEPARATOR_OPTIONAL
    return re.compile(rf"{label}{separator}({value})", re.IGNORECASE)


@dataclass(frozen=True)
class TextRule:
    """Free-text field captured after one of several labels."""

    patterns: tuple[re.Pattern[str], ...]

    def apply(self, text: str) -> str:
        return extract_value(text, self.patterns)


@dataclass(frozen=True)
class BooleanRule:
    """Tri-state field resolved from keyword-bearing lines."""

    keywords: tuple[str, ...]

    def apply(self, text: str) -> TriState:
        return check_boolean(text, self.keywords)


@dataclass(frozen=True)
class GenderRule:
    """Sex/gender text field normalised to a one-letter code."""

    source: TextRule

    def apply(self, text: str) -> str:
        return normalize_gender(self.source.apply(text))


FieldRule = TextRule | BooleanRule | GenderRule
