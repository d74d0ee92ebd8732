"""Unit tests for the variable categorizer."""

import pytest

from app.strategies.template_engine.categorizer import VariableCategorizer
from app.strategies.template_engine.models import PropertyType
from app.strategies.template_engine.normalizer import VariableNormalizer


class TestVariableCategorizer:
    """Test suite for VariableCategorizer."""

    @pytest.fixture
    def categorizer(self):
        """Create a categorizer instance."""
        return VariableCategorizer()

    @pytest.fixture
    def variables(self):
        """Variables as stored on an imported template."""
        return {
            "Heading.text": "Hello",
            "Logo.source": "https://x/l.png",
            "Panel.fill": "#ff0000",
        }

    def test_sections(self, categorizer, variables):
        result = categorizer.categorize(variables)

        assert [v.key for v in result.text_variables] == ["Heading.text"]
        assert [v.key for v in result.media_variables] == ["Logo.source"]
        assert [v.key for v in result.color_variables] == ["Panel.fill"]
        assert result.has_variables is True
        assert result.formatted_variables == variables

    def test_variable_fields(self, categorizer, variables):
        variable = categorizer.categorize(variables).color_variables[0]

        assert variable.element_name == "Panel"
        assert variable.value == "#ff0000"
        assert variable.property_type == PropertyType.FILL

    def test_round_trips_to_variables(self, categorizer, variables):
        assert categorizer.categorize(variables).to_variables() == variables

    def test_sections_sorted_by_element_name(self, categorizer):
        result = categorizer.categorize(
            {"Title.text": "t", "Caption.text": "c", "Subtitle.text": "s"}
        )

        assert [v.element_name for v in result.text_variables] == ["Caption", "Subtitle", "Title"]

    def test_nested_source_keys_are_skipped(self, categorizer):
        result = categorizer.categorize(
            {
                "Video.source.source": "a",
                "Image.source.url": "b",
                "Logo.source": "c",
            }
        )

        assert [v.key for v in result.media_variables] == ["Logo.source"]

    def test_duplicates_keep_first(self, categorizer):
        result = categorizer.categorize({"Heading.text": "first", "Heading.text.text": "second"})

        assert len(result.text_variables) == 1
        assert result.text_variables[0].value == "first"

    def test_unknown_property_types_are_dropped(self, categorizer):
        result = categorizer.categorize({"Heading.font_size": "5 vmin", "Plain": "x"})

        assert result.has_variables is False
        assert result.formatted_variables == {"Heading.font_size": "5 vmin", "Plain": "x"}

    def test_none_values_are_skipped(self, categorizer):
        result = categorizer.categorize({"Heading.text": None, "Heading.text.text": "kept"})

        assert [v.value for v in result.text_variables] == ["kept"]

    def test_numbers_are_not_stringified(self, categorizer):
        result = categorizer.categorize({"Counter.text": 42})

        assert result.text_variables[0].value == 42

    def test_empty(self, categorizer):
        result = categorizer.categorize({})

        assert result.has_variables is False
        assert result.text_variables == []
        assert result.formatted_variables == {}

    def test_has_variables_is_serialized(self, categorizer, variables):
        assert categorizer.categorize(variables).model_dump()["has_variables"] is True

    def test_normalized_deep_keys_round_trip(self, categorizer):
        normalized = VariableNormalizer().normalize(
            {"Logo.source.source": "https://x/l.png", "Video.source.url": "https://x/v.mp4", "Heading.text": "Hi"}
        )

        result = categorizer.categorize(normalized)

        assert [v.key for v in result.media_variables] == ["Logo.source", "Video.source"]
        assert result.has_variables is True
        assert result.to_variables() == normalized
