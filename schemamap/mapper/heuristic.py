"""Heuristic mapping engine for generating initial field mapping suggestions."""
import logging
from typing import Any, List, Sequence

from schemamap.mapper.mapping import MappingSuggestion, TransformationType
from schemamap.mapper.similarity import best_match

logger = logging.getLogger(__name__)


class HeuristicMapper:
    """Suggest source -> target field mappings from field name similarity."""

    MIN_SCORE = 0.3
    MIN_CONFIDENCE = 0.6
    # The first few source fields always get a suggestion, even a weak one
    ALWAYS_SUGGEST = 3

    SAMPLE_VALUES = (
        ("id", 1001),
        ("name", "John Doe"),
        ("email", "john.doe@example.com"),
        ("phone", "+1-555-123-4567"),
        ("date", "2024-01-15"),
        ("price", 99.99),
        ("amount", 99.99),
        ("address", "123 Main St, City, State"),
    )

    def suggest_mappings(
        self, source_fields: Sequence[str], target_fields: Sequence[str]
    ) -> List[MappingSuggestion]:
        """Generate mapping suggestions for the source fields."""
        suggestions = []

        if not target_fields:
            return suggestions

        for index, source_field in enumerate(source_fields):
            match = best_match(source_field, target_fields)

            if match.score > self.MIN_SCORE or index < self.ALWAYS_SUGGEST:
                suggestions.append(
                    MappingSuggestion(
                        source_field=source_field,
                        target_field=match.field,
                        transformation_type=self.infer_transformation_type(
                            source_field, match.field
                        ),
                        confidence=max(self.MIN_CONFIDENCE, match.score),
                        reasoning=(
                            f"Field name similarity suggests mapping "
                            f"{source_field} to {match.field}"
                        ),
                        transformation_logic=f"{source_field} -> {match.field}",
                        potential_issues=self.potential_issues(source_field, match.field),
                        sample_transformation={
                            "input": self.sample_value(source_field),
                            "output": self.sample_value(match.field),
                        },
                    )
                )

        logger.info(
            f"Suggested {len(suggestions)} mappings for {len(source_fields)} source fields"
        )
        return suggestions

    @staticmethod
    def infer_transformation_type(source_field: str, target_field: str) -> TransformationType:
        """Guess the transformation a field pair needs."""
        source = source_field.lower()
        target = target_field.lower()

        if "date" in source or "date" in target:
            return TransformationType.FORMAT_STANDARDIZATION
        if "phone" in source or "phone" in target:
            return TransformationType.FORMAT_STANDARDIZATION
        if "email" in source or "email" in target:
            return TransformationType.VALUE_NORMALIZATION
        if "name" in source and "name" in target:
            return TransformationType.VALUE_NORMALIZATION

        return TransformationType.DIRECT_MAPPING

    @staticmethod
    def potential_issues(source_field: str, target_field: str) -> List[str]:
        """List warnings for a field pair."""
        issues = []
        source = source_field.lower()
        target = target_field.lower()

        if "date" in source and "date" not in target:
            issues.append("Date format conversion may be required")

        if "phone" in source and "phone" not in target:
            issues.append("Phone number format standardization needed")

        if len(source_field) > len(target_field) + 10:
            issues.append("Source field may contain more data than target can accommodate")

        return issues

    @classmethod
    def sample_value(cls, field_name: str) -> Any:
        """Illustrative value for a field, used in previews."""
        name = field_name.lower()

        for keyword, value in cls.SAMPLE_VALUES:
            if keyword in name:
                return value

        return "Sample Value"
