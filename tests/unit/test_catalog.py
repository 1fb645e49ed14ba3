"""Unit tests for the aesthetic parameter catalog."""

import pytest

from aestheticlab.core.catalog import (
    AESTHETIC_OPTIONS,
    DEFAULT_PARAMETER,
    AestheticParameter,
    prune_variations,
    toggle_variation,
    variations_for,
)


class TestCatalogContents:
    """Tests for the static option lists."""

    def test_every_parameter_has_options(self):
        """Test that each parameter owns a non-empty option list."""
        for parameter in AestheticParameter:
            assert len(AESTHETIC_OPTIONS[parameter]) > 0

    def test_labels_unique_within_parameter(self):
        """Test that labels are not repeated inside one parameter."""
        for options in AESTHETIC_OPTIONS.values():
            assert len(set(options)) == len(options)

    def test_style_options_in_display_order(self):
        """Test the Style list keeps its display order."""
        assert variations_for(AestheticParameter.STYLE)[:3] == (
            "Ukiyo-e",
            "Cyberpunk",
            "Surrealism",
        )

    def test_lighting_contains_comma_labels(self):
        """Test labels containing commas are kept whole."""
        assert "Soft, diffused lighting" in variations_for(AestheticParameter.LIGHTING)

    def test_parameter_display_values(self):
        """Test parameter values are the display names."""
        assert AestheticParameter.STYLE.value == "Style"
        assert AestheticParameter.LIGHTING.value == "Lighting"
        assert AestheticParameter.COMPOSITION.value == "Composition"

    def test_default_parameter_is_style(self):
        """Test the form starts on Style."""
        assert DEFAULT_PARAMETER is AestheticParameter.STYLE

    def test_variations_for_accepts_string(self):
        """Test lookup by display string."""
        assert variations_for("Composition") == AESTHETIC_OPTIONS[AestheticParameter.COMPOSITION]

    def test_variations_for_unknown_parameter(self):
        """Test lookup of an unknown parameter fails."""
        with pytest.raises(ValueError):
            variations_for("Colour")


class TestPruneVariations:
    """Tests for prune_variations."""

    def test_keeps_valid_labels_in_order(self):
        """Test valid labels survive in selection order."""
        result = prune_variations(["Cyberpunk", "Ukiyo-e"], AestheticParameter.STYLE)
        assert result == ("Cyberpunk", "Ukiyo-e")

    def test_drops_labels_from_other_parameter(self):
        """Test switching parameter drops foreign labels."""
        result = prune_variations(["Cyberpunk", "Neon glow"], AestheticParameter.LIGHTING)
        assert result == ("Neon glow",)

    def test_empty_selection(self):
        """Test pruning an empty selection."""
        assert prune_variations([], AestheticParameter.STYLE) == ()


class TestToggleVariation:
    """Tests for toggle_variation."""

    def test_adds_unselected_label_at_end(self):
        """Test a new label is appended."""
        result = toggle_variation(("Cyberpunk",), "Ukiyo-e", AestheticParameter.STYLE)
        assert result == ("Cyberpunk", "Ukiyo-e")

    def test_removes_selected_label(self):
        """Test toggling a selected label removes it."""
        result = toggle_variation(("Cyberpunk", "Ukiyo-e"), "Cyberpunk", AestheticParameter.STYLE)
        assert result == ("Ukiyo-e",)

    def test_toggle_twice_restores_selection(self):
        """Test toggling the same label twice is a round trip."""
        selected = ("Cyberpunk",)
        once = toggle_variation(selected, "Vaporwave", AestheticParameter.STYLE)
        twice = toggle_variation(once, "Vaporwave", AestheticParameter.STYLE)
        assert twice == selected

    def test_unknown_label_returns_same_selection(self):
        """Test labels outside the catalog are ignored."""
        selected = ("Cyberpunk",)
        result = toggle_variation(selected, "Neon glow", AestheticParameter.STYLE)
        assert result is selected
