"""Tests for melodyquest.ui.colors – palette and color blending."""

from __future__ import annotations

import pytest

from melodyquest.ui.colors import QuestColors, blend_hex, slice_color


# ===========================================================================
# QuestColors
# ===========================================================================

class TestQuestColors:
    @pytest.mark.parametrize("name", ["BG_TOP", "PRIMARY", "CORRECT", "INCORRECT", "TEXT_PRIMARY"])
    def test_hex_constants(self, name: str):
        value = getattr(QuestColors, name)
        assert value.startswith("#") and len(value) == 7

    def test_card_bg_is_rgba(self):
        assert QuestColors.CARD_BG.startswith("rgba(")

    def test_confetti_palette(self):
        assert len(QuestColors.CONFETTI) == 6


# ===========================================================================
# blend_hex
# ===========================================================================

class TestBlendHex:
    def test_endpoints(self):
        assert blend_hex("#FF0000", "#0000FF", 0.0) == "#FF0000"
        assert blend_hex("#FF0000", "#0000FF", 1.0) == "#0000FF"

    def test_midpoint(self):
        result = blend_hex("#000000", "#FFFFFF", 0.5)
        assert all(126 <= int(result[i:i + 2], 16) <= 128 for i in (1, 3, 5))

    def test_clamped(self):
        assert blend_hex("#FF0000", "#0000FF", -1.0) == "#FF0000"
        assert blend_hex("#FF0000", "#0000FF", 2.0) == "#0000FF"

    @pytest.mark.parametrize("a, b", [("FF0000", "#0000FF"), ("#FFF", "#000000"), ("#GGHHII", "#000000"), ("", "")])
    def test_invalid_returns_first(self, a: str, b: str):
        assert blend_hex(a, b, 0.5) == a


# ===========================================================================
# slice_color
# ===========================================================================

class TestSliceColor:
    def test_valid_hex(self):
        for i in range(6):
            color = slice_color(i)
            assert color.startswith("#") and len(color) == 7

    def test_neighbours_differ(self):
        assert slice_color(0) != slice_color(1)

    def test_wraps_palette(self):
        assert slice_color(0) == slice_color(6)
