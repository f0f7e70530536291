"""Rule-table driven field extraction into an :class:`ExtractionRecord`.

Common identity fields are always extracted. The template-specific
sub-record is filled only for a classified template; for ``unknown`` it is
left at its defaults.
"""

from collections.abc import Sequence

from pydantic import BaseModel

from medform.utils.logger import get_logger

from .classifier import TemplateClassifier
from .field_tables import COMMON_RULES, TEMPLATE_VARIANTS, TemplateVariant
from .models import (
    PAGE_DELIMITER,
    ExtractionRecord,
    TemplateHint,
    TemplateId,
    TriState,
)
from .rules import FieldRule

logger = get_logger(__name__)


def set_field(group: BaseModel, path: str, value: object) -> None:
    """Assign ``value`` to a dotted attribute path inside a record group."""
    *parents, leaf = path.split(".")
    target = group
    for name in parents:
        target = getattr(target, name)
    setattr(target, leaf, value)


class FieldExtractor:
    """Applies per-field rule tables to document text.

    Args:
        common_rules: Rules for the fields shared by every template.
        variants: Template-specific attribute and rule table bindings.
    """

    def __init__(
        self,
        common_rules: dict[str, FieldRule] = COMMON_RULES,
        variants: dict[TemplateId, TemplateVariant] = TEMPLATE_VARIANTS,
    ) -> None:
        self.common_rules = common_rules
        self.variants = variants

    def extract(self, text: str, template: TemplateId) -> ExtractionRecord:
        """Build a fresh record for ``text`` using the template's rules.

        Args:
            text: Full document text.
            template: Classified template id.

        Returns:
            Populated record. Unmatched fields keep their defaults.
        """
        record = ExtractionRecord(template=template)
        populated = self._apply_rules(record.common, self.common_rules, text)

        variant = self.variants.get(template)
        if variant is not None:
            group = getattr(record, variant.attribute)
            populated += self._apply_rules(group, variant.rules, text)

        logger.info(
            "Extracted %d populated fields for template '%s'", populated, template
        )
        return record

    def _apply_rules(
        self, group: BaseModel, rules: dict[str, FieldRule], text: str
    ) -> int:
        """Fill ``group`` from ``rules`` and count fields that matched."""
        populated = 0
        for path, rule in rules.items():
            value = rule.apply(text)
            set_field(group, path, value)
            if value not in ("", TriState.UNKNOWN):
                populated += 1
            else:
                logger.debug("No match for field '%s'", path)
        return populated


_default_classifier = TemplateClassifier()
_default_extractor = FieldExtractor()


def extract(text: str, template: TemplateId) -> ExtractionRecord:
    """Extract fields from text for an already classified template."""
    return _default_extractor.extract(text, template)


def extract_data(
    page_texts: Sequence[str],
    template_hint: str | None = TemplateHint.AUTO,
    delimiter: str = PAGE_DELIMITER,
) -> ExtractionRecord:
    """Classify and extract a multi-page document.

    Args:
        page_texts: Recognised text of each page, in page order.
        template_hint: ``auto`` or an explicit template id.
        delimiter: Separator placed between pages.

    Returns:
        The extraction record for the whole document.
    """
    full_text = delimiter.join(page_texts)
    template = _default_classifier.classify(full_text, template_hint)
    return _default_extractor.extract(full_text, template)
