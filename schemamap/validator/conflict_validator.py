"""Conflict detection for field mappings."""
from typing import Callable, Dict, Iterable, List

from schemamap.mapper.mapping import Conflict, ConflictType, Mapping


class ConflictValidator:
    """Validates a mapping collection and reports conflicts."""

    def validate(self, mappings: Iterable[Mapping]) -> List[Conflict]:
        """
        Recompute conflicts from scratch.

        Only active mappings are considered. Groups are reported in the
        order their field first appears, and affected ids keep mapping order.

        Args:
            mappings: Mapping collection in insertion order

        Returns:
            List[Conflict]: duplicate_source conflicts, then duplicate_target
        """
        active = [m for m in mappings if m.is_active]

        conflicts = []
        conflicts.extend(self._duplicate_sources(active))
        conflicts.extend(self._duplicate_targets(active))
        return conflicts

    def _duplicate_sources(self, mappings: List[Mapping]) -> List[Conflict]:
        return [
            Conflict(
                id=f"conflict-duplicate-source-{source_field}",
                type=ConflictType.DUPLICATE_SOURCE,
                description=f'Multiple mappings found for source field "{source_field}"',
                affected_mappings=ids,
                suggested_resolution="Keep the most recent mapping or merge the transformations",
            )
            for source_field, ids in self._group(mappings, lambda m: m.source_field).items()
            if len(ids) > 1
        ]

    def _duplicate_targets(self, mappings: List[Mapping]) -> List[Conflict]:
        return [
            Conflict(
                id=f"conflict-duplicate-target-{target_field}",
                type=ConflictType.DUPLICATE_TARGET,
                description=f'Multiple mappings found for target field "{target_field}"',
                affected_mappings=ids,
                suggested_resolution="Combine source fields or use different target fields",
            )
            for target_field, ids in self._group(mappings, lambda m: m.target_field).items()
            if len(ids) > 1
        ]

    @staticmethod
    def _group(mappings: List[Mapping], key: Callable[[Mapping], str]) -> Dict[str, List[str]]:
        groups: Dict[str, List[str]] = {}
        for mapping in mappings:
            groups.setdefault(key(mapping), []).append(mapping.id)
        return groups
