"""Tests for ConflictValidator."""
from schemamap.mapper.mapping import ConflictType, Mapping, MappingStatus
from schemamap.validator.conflict_validator import ConflictValidator


def mapping(mapping_id, source, target, status=MappingStatus.ACTIVE):
    return Mapping(id=mapping_id, source_field=source, target_field=target, status=status)


class TestConflictValidator:
    """Test duplicate detection."""

    def test_no_conflicts(self):
        """Test distinct pairs are valid."""
        mappings = [mapping("m1", "a", "x"), mapping("m2", "b", "y")]
        assert ConflictValidator().validate(mappings) == []

    def test_duplicate_source(self):
        """Test one conflict per repeated source field."""
        mappings = [mapping("m1", "a", "x"), mapping("m2", "b", "y"), mapping("m3", "a", "z")]

        conflicts = ConflictValidator().validate(mappings)

        assert len(conflicts) == 1
        assert conflicts[0].id == "conflict-duplicate-source-a"
        assert conflicts[0].type == ConflictType.DUPLICATE_SOURCE
        assert conflicts[0].affected_mappings == ["m1", "m3"]
        assert conflicts[0].description == 'Multiple mappings found for source field "a"'

    def test_sources_reported_before_targets(self):
        """Test duplicate sources come first, then duplicate targets."""
        mappings = [
            mapping("m1", "a", "x"),
            mapping("m2", "b", "x"),
            mapping("m3", "a", "y"),
        ]

        conflicts = ConflictValidator().validate(mappings)

        assert [c.id for c in conflicts] == [
            "conflict-duplicate-source-a",
            "conflict-duplicate-target-x",
        ]
        assert conflicts[1].affected_mappings == ["m1", "m2"]

    def test_inactive_mappings_ignored(self):
        """Test only active mappings are compared."""
        mappings = [
            mapping("m1", "a", "x"),
            mapping("m2", "a", "x", status=MappingStatus.DISABLED),
            mapping("m3", "a", "x", status=MappingStatus.PENDING),
        ]

        assert ConflictValidator().validate(mappings) == []
