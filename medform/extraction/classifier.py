"""Template classification for known clinical form layouts.

Identifies the form template by keyword presence in normalised text.
Rules are evaluated in a fixed priority order and the first match wins.
"""

import re
from dataclasses import dataclass

from medform.utils.logger import get_logger

from .models import TemplateHint, TemplateId

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ClassificationRule:
    """Keyword rule assigning a template.

    The rule matches when any phrase in ``any_phrases`` is present, or when
    ``all_phrases`` is non-empty and every phrase in it is present.
    """

    template: TemplateId
    any_phrases: tuple[str, ...] = ()
    all_phrases: tuple[str, ...] = ()

    def matches(self, normalized_text: str) -> bool:
        if any(phrase in normalized_text for phrase in self.any_phrases):
            return True
        return bool(self.all_phrases) and all(
            phrase in normalized_text for phrase in self.all_phrases
        )


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        template=TemplateId.HANDOVER_SHEET_OT,
        any_phrases=("handover sheet",),
        all_phrases=("identification", "situation", "assessment"),
    ),
    ClassificationRule(
        template=TemplateId.GENERAL_ADMISSION,
        any_phrases=("general admission", "treatment consent", "obstetric exam"),
    ),
)


def normalize_text(text: str) -> str:
    """Lowercase text and collapse runs of whitespace to single spaces."""
    return _WHITESPACE.sub(" ", text.lower()).strip()


def resolve_hint(hint: str | None) -> TemplateId | None:
    """Return the template named by an explicit hint.

    Args:
        hint: Raw hint value. ``auto``, ``None`` and unrecognised values
            all mean automatic detection.

    Returns:
        The hinted template, or ``None`` when detection should run.
    """
    if hint is None:
        return None
    try:
        parsed = TemplateHint(hint)
    except ValueError:
        logger.debug("Ignoring unrecognised template hint %r", hint)
        return None
    if parsed is TemplateHint.AUTO:
        return None
    return TemplateId(parsed.value)


class TemplateClassifier:
    """Assigns one of the known templates to OCR text.

    Args:
        rules: Classification rules in priority order.
    """

    def __init__(
        self, rules: tuple[ClassificationRule, ...] = CLASSIFICATION_RULES
    ) -> None:
        self.rules = rules

    def classify(
        self, text: str, hint: str | None = TemplateHint.AUTO
    ) -> TemplateId:
        """Classify text, honouring an explicit hint.

        Args:
            text: Full document text.
            hint: Template hint. A recognised non-auto hint is returned as
                is, without checking it against the text.

        Returns:
            Matched template id, or ``TemplateId.UNKNOWN``.
        """
        hinted = resolve_hint(hint)
        if hinted is not None:
            logger.info("Using template from hint: %s", hinted)
            return hinted

        normalized = normalize_text(text)
        for rule in self.rules:
            if rule.matches(normalized):
                logger.info("Classified document as '%s'", rule.template)
                return rule.template

        logger.info("No template rule matched, classified as 'unknown'")
        return TemplateId.UNKNOWN


_default_classifier = TemplateClassifier()


def classify(text: str, hint: str | None = TemplateHint.AUTO) -> TemplateId:
    """Classify text with the default rule set."""
    return _default_classifier.classify(text, hint)
