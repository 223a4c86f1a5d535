"""Tests for the natural-language command parser."""
import pytest

from schemamap.commands.parser import (
    COMMAND_PATTERNS,
    CommandType,
    MappingCommandParser,
    parse_command,
)


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def source_fields():
    return ["customer_id", "name", "email", "order_date"]


@pytest.fixture
def target_fields():
    return ["user_id", "full_name", "email_address", "created_at"]


@pytest.fixture
def parse(source_fields, target_fields):
    parser = MappingCommandParser()

    def _parse(text):
        return parser.parse_command(text, source_fields, target_fields)

    return _parse


# ============================================================================
# TEST: Command patterns
# ============================================================================


class TestCommandPatterns:
    """Each pattern recognises its own instruction shape."""

    def test_patterns_are_ordered_create_first(self):
        """Test the create patterns are tried before the others."""
        types = [p.command_type for p in COMMAND_PATTERNS]
        assert types[:3] == [CommandType.CREATE] * 3
        assert types[3:] == [
            CommandType.UPDATE,
            CommandType.DELETE,
            CommandType.MODIFY_TRANSFORMATION,
            CommandType.SET_CONFIDENCE,
        ]

    def test_map_pattern_in_isolation(self):
        """Test the 'map X to Y' pattern extracts raw tokens."""
        assert COMMAND_PATTERNS[0].match("Map Foo to Bar") == {
            "source_field": "Foo",
            "target_field": "Bar",
        }
        assert COMMAND_PATTERNS[0].match("Delete mapping for foo") is None

    def test_delete_pattern_in_isolation(self):
        """Test the delete pattern extracts only the source."""
        delete = COMMAND_PATTERNS[4]
        assert delete.match("remove the mapping for foo") == {"source_field": "foo"}
        assert delete.match("Map foo to bar") is None

    def test_custom_pattern_list(self):
        """Test the parser only uses the patterns it is given."""
        parser = MappingCommandParser(patterns=COMMAND_PATTERNS[4:5])
        result = parser.parse_command("Map a to b")
        assert result.command is None


# ============================================================================
# TEST: Parsing
# ============================================================================


class TestCreateCommands:
    """Test create instructions."""

    def test_map_resolved(self, parse):
        """Test exact field names give confidence 0.9."""
        result = parse("Map customer_id to user_id")

        assert result.confidence == 0.9
        assert result.command.type == CommandType.CREATE
        assert result.command.source_field == "customer_id"
        assert result.command.target_field == "user_id"
        assert result.ambiguities == []

    def test_original_text_kept(self, parse):
        """Test the verbatim instruction travels with the command."""
        result = parse("  Map customer_id to user_id  ")
        assert result.command.original_command == "  Map customer_id to user_id  "

    def test_case_insensitive_canonical_spelling(self, parse):
        """Test tokens resolve to the vocabulary spelling."""
        result = parse("MAP Customer_ID TO USER_ID")

        assert result.confidence == 0.9
        assert result.command.source_field == "customer_id"
        assert result.command.target_field == "user_id"

    def test_quoted_fields(self, parse):
        """Test quotes around field names are ignored."""
        result = parse('Map "email" to `email_address`')

        assert result.command.source_field == "email"
        assert result.command.target_field == "email_address"

    def test_trailing_punctuation(self, parse):
        """Test sentence punctuation is not part of the field."""
        result = parse("Map name to full_name.")

        assert result.command.target_field == "full_name"
        assert result.confidence == 0.9

    def test_map_field_keyword(self, parse):
        """Test the optional 'field' word."""
        result = parse("map field email to email_address")
        assert result.command.source_field == "email"

    def test_create_mapping_from(self, parse):
        """Test 'create a mapping from X to Y'."""
        result = parse("Create a mapping from email to email_address")

        assert result.command.type == CommandType.CREATE
        assert result.command.source_field == "email"
        assert result.command.target_field == "email_address"

    def test_connect_with(self, parse):
        """Test 'connect X with Y'."""
        result = parse("connect name with full_name")

        assert result.command.type == CommandType.CREATE
        assert result.command.target_field == "full_name"

    def test_misspelled_source(self, parse):
        """Test a typo lowers confidence and suggests the real field."""
        result = parse("Map custmer_id to user_id")

        assert result.confidence == 0.6
        assert "customer_id" in result.suggestions
        assert any("custmer_id" in a for a in result.ambiguities)
        assert result.command.source_field == "custmer_id"

    def test_misspelled_target(self, parse):
        """Test a typo in the target is reported as a target ambiguity."""
        result = parse("Map name to fullname")

        assert result.confidence == 0.6
        assert result.suggestions == ["full_name"]
        assert result.ambiguities[0].startswith('Target field "fullname" not found')

    def test_unknown_field_without_candidates(self, parse):
        """Test a field with no look-alike is still ambiguous."""
        result = parse("Map zzzzzzzz to user_id")

        assert result.confidence == 0.6
        assert result.suggestions == []
        assert result.ambiguities == ['Source field "zzzzzzzz" not found']

    def test_empty_vocabulary_accepts_tokens(self):
        """Test tokens pass through when no vocabulary is known."""
        result = parse_command("Map a to b")

        assert result.confidence == 0.9
        assert result.command.source_field == "a"
        assert result.command.target_field == "b"


class TestOtherCommands:
    """Test update, delete, transformation and confidence instructions."""

    def test_update(self, parse):
        """Test 'update mapping for X to Y'."""
        result = parse("Update the mapping for email to email_address")

        assert result.command.type == CommandType.UPDATE
        assert result.command.source_field == "email"
        assert result.command.target_field == "email_address"

    def test_delete(self, parse):
        """Test 'delete mapping for X'."""
        result = parse("Delete mapping for email")

        assert result.command.type == CommandType.DELETE
        assert result.command.source_field == "email"
        assert result.command.target_field is None
        assert result.confidence == 0.9

    def test_unmap(self, parse):
        """Test 'unmap mapping for X'."""
        result = parse("unmap the mapping for name")
        assert result.command.type == CommandType.DELETE

    def test_modify_transformation(self, parse):
        """Test 'change transformation for X to TYPE'."""
        result = parse("Change transformation for order_date to format_standardization")

        assert result.command.type == CommandType.MODIFY_TRANSFORMATION
        assert result.command.source_field == "order_date"
        assert result.command.transformation_type == "format_standardization"
        assert result.confidence == 0.9

    def test_unknown_transformation_type(self, parse):
        """Test a transformation outside the enumeration is ambiguous."""
        result = parse("Set transformation type for email to uppercase")

        assert result.confidence == 0.6
        assert 'Unknown transformation type "uppercase"' in result.ambiguities

    def test_partial_transformation_type_suggests(self, parse):
        """Test a partial type name suggests the full one."""
        result = parse("Set transformation for email to filter")
        assert "filtering" in result.suggestions

    def test_confidence_percentage(self, parse):
        """Test percentages are converted to fractions."""
        result = parse("Set confidence for email to 95%")

        assert result.command.type == CommandType.SET_CONFIDENCE
        assert result.command.confidence == pytest.approx(0.95)
        assert result.confidence == 0.9

    def test_confidence_fraction(self, parse):
        """Test fractions are kept as they are."""
        result = parse("change the confidence for email to 0.7")
        assert result.command.confidence == pytest.approx(0.7)

    def test_confidence_out_of_range(self, parse):
        """Test values above 100% are ambiguous."""
        result = parse("Set confidence for email to 150")

        assert result.confidence == 0.6
        assert "Confidence must be between 0 and 1 (or 0% and 100%)" in result.ambiguities

    def test_first_pattern_wins(self, parse):
        """Test an instruction matching several shapes uses the first pattern."""
        result = parse("Delete mapping for email and map name to full_name")

        assert result.command.type == CommandType.CREATE
        assert result.command.source_field == "name"


class TestUnrecognised:
    """Test instructions without a command shape."""

    def test_fields_mentioned(self, parse):
        """Test known fields without a command give an unknown command."""
        result = parse("what about email?")

        assert result.command.type == CommandType.UNKNOWN
        assert result.confidence == 0.3
        assert result.ambiguities == ["Command not recognized"]
        assert "Detected fields: email" in result.suggestions
        assert any(s.startswith("Try:") for s in result.suggestions)

    def test_nothing_recognised(self, parse):
        """Test unrelated text gives no command."""
        result = parse("hello there")

        assert result.command is None
        assert result.confidence == 0
        assert result.ambiguities == ["No mapping command detected"]

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_blank_input(self, parse, text):
        """Test blank input never raises."""
        result = parse(text)

        assert result.command is None
        assert result.confidence == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
