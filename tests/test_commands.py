"""Test property commands: strokes, color, alignment, scale factors, oblique."""

import pytest

from mtextparser.context import FormattingContext, LineAlignment, ScaleFactor
from mtextparser.strings import int2rgb
from mtextparser.tokens import TokenType

from conftest import assert_types, words

W = TokenType.WORD


class TestStrokes:
    def test_underline(self, first_word):
        token = first_word(r"\LUnderlined\l")
        assert token.data == "Underlined"
        assert token.ctx.underline is True
        assert token.ctx.continue_stroke is True

    def test_overline(self, first_word):
        assert first_word(r"\OText").ctx.overline is True

    def test_strike_through(self, first_word):
        assert first_word(r"\KText").ctx.strike_through is True

    def test_clear_stroke(self, lex):
        tokens = lex(r"\La\lb")
        assert tokens[1].ctx.underline is False
        assert tokens[1].ctx.continue_stroke is False

    def test_continue_stroke_while_any_stroke_active(self, lex):
        tokens = lex(r"\L\Oa\lb\oc")
        assert [t.ctx.continue_stroke for t in tokens] == [True, True, False]

    def test_command_flushes_word(self, lex):
        tokens = lex(r"Hello\LWorld")
        assert_types(tokens, [W, W])
        assert tokens[0].ctx.underline is False
        assert tokens[1].ctx.underline is True

    def test_optional_terminator_not_consumed_by_strokes(self, lex):
        assert words(lex(r"\L;a")) == [";a"]


class TestAlignment:
    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            (r"\A0;x", LineAlignment.BOTTOM),
            (r"\A1;x", LineAlignment.MIDDLE),
            (r"\A2;x", LineAlignment.TOP),
            (r"\A2x", LineAlignment.TOP),
        ],
    )
    def test_alignment(self, first_word, content, expected):
        token = first_word(content)
        assert token.data == "x"
        assert token.ctx.align == expected

    def test_invalid_digit_resets_to_bottom(self, lex):
        tokens = lex(r"\A2;a\A5;b")
        assert tokens[0].ctx.align == LineAlignment.TOP
        assert tokens[1].data == "5;b"
        assert tokens[1].ctx.align == LineAlignment.BOTTOM

    def test_missing_digit(self, lex):
        tokens = lex(r"\A;b")
        assert words(tokens) == ["b"]
        assert tokens[0].ctx.align == LineAlignment.BOTTOM


class TestAciColor:
    def test_color(self, lex):
        tokens = lex(r"\C1Red Text")
        assert words(tokens) == ["Red", "Text"]
        assert tokens[0].ctx.aci == 1

    def test_color_with_terminator(self, first_word):
        token = first_word(r"\C256;x")
        assert token.data == "x"
        assert token.ctx.aci == 256

    def test_out_of_range_is_consumed_and_ignored(self, lex):
        tokens = lex(r"\C1000;")
        assert tokens == []

    def test_out_of_range_keeps_color(self, first_word):
        token = first_word(r"\C3;\C1000;x")
        assert token.data == "x"
        assert token.ctx.aci == 3

    def test_sign_makes_command_a_no_op(self, lex):
        tokens = lex(r"\C+5")
        assert words(tokens) == ["+5"]
        assert tokens[0].ctx.aci == 7

    def test_aci_clears_rgb(self, first_word):
        token = first_word(r"\c255;\C2;x")
        assert token.ctx.rgb is None
        assert token.ctx.aci == 2

    def test_rgb_clears_aci(self, first_word):
        token = first_word(r"\C2;\c255;x")
        assert token.ctx.rgb == (0, 0, 255)
        assert token.ctx.aci is None

    def test_leading_zeros(self, first_word):
        assert first_word(r"\C0001;x").ctx.aci == 1

    def test_oversized_value_is_consumed_and_ignored(self, lex):
        tokens = lex("\\C" + "1" * 5000 + ";A")
        assert words(tokens) == ["A"]
        assert tokens[0].ctx.aci == 7


class TestRgbColor:
    def test_rgb(self, first_word):
        token = first_word(r"\c16711680;x")
        assert token.ctx.rgb == (255, 0, 0)

    def test_rgb_component_order(self, first_word):
        token = first_word(r"\c255;x")
        assert token.ctx.rgb == (0, 0, 255)

    def test_rgb_masked_to_24_bits(self, first_word):
        token = first_word(r"\c16777471;x")  # 0x10000FF
        assert token.ctx.rgb == (0, 0, 255)

    def test_missing_value(self, first_word):
        token = first_word(r"\c;x")
        assert token.data == "x"
        assert token.ctx.rgb is None
        assert token.ctx.aci == 7

    def test_long_value_keeps_low_24_bits(self, first_word):
        digits = "123456789012345678901234567890"
        b, g, r = int2rgb(int(digits) & 0xFFFFFF)
        assert first_word(f"\\c{digits};x").ctx.rgb == (r, g, b)

    def test_oversized_value(self, first_word):
        # 10**5000 - 1 is all ones in its low 24 bits
        token = first_word("\\c" + "9" * 5000 + ";A")
        assert token.data == "A"
        assert token.ctx.rgb == (255, 255, 255)
        assert token.ctx.aci is None


class TestHeight:
    def test_absolute(self, first_word):
        token = first_word(r"\H2.5;Text")
        assert token.data == "Text"
        assert token.ctx.cap_height == ScaleFactor(2.5)

    def test_relative(self, first_word):
        token = first_word(r"\H2.5x;Text")
        assert token.ctx.cap_height == ScaleFactor(2.5, relative=True)

    def test_optional_terminator(self, first_word):
        token = first_word(r"\H2.5Text")
        assert token.data == "Text"
        assert token.ctx.cap_height == ScaleFactor(2.5)

    @pytest.mark.parametrize("content", [r"\H-2.5;Text", r"\H+2.5;Text"])
    def test_sign_is_discarded(self, first_word, content):
        assert first_word(content).ctx.cap_height == ScaleFactor(2.5)

    @pytest.mark.parametrize("content", [r"\H.5x;Text", r"\H-.5x;Text", r"\H+.5x;Text"])
    def test_without_leading_zero(self, first_word, content):
        assert first_word(content).ctx.cap_height == ScaleFactor(0.5, relative=True)

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            (r"\H1e2;Text", 100.0),
            (r"\H1e-2;Text", 0.01),
            (r"\H.5e2;Text", 50.0),
            (r"\H.5e-2;Text", 0.005),
        ],
    )
    def test_exponent(self, first_word, content, expected):
        token = first_word(content)
        assert token.data == "Text"
        assert token.ctx.cap_height.value == pytest.approx(expected)

    @pytest.mark.parametrize(
        ("content", "rest"),
        [
            (r"\H1..5;Text", ".5;Text"),
            (r"\H1e;Text", "e;Text"),
            (r"\H1e+;Text", "e+;Text"),
        ],
    )
    def test_longest_valid_prefix(self, first_word, content, rest):
        token = first_word(content)
        assert token.data == rest
        assert token.ctx.cap_height == ScaleFactor(1.0)

    def test_complex_expressions(self, first_word):
        token = first_word(r"\H+1.5e-1x;Text")
        assert token.ctx.cap_height.value == pytest.approx(0.15)
        assert token.ctx.cap_height.relative is True
        token = first_word(r"\H-.5e+2x;Text")
        assert token.ctx.cap_height == ScaleFactor(50.0, relative=True)

    def test_absolute_then_relative(self, lex):
        tokens = lex(r"\H2.5;Large\H.5x;Small")
        assert_types(tokens, [W, W])
        assert tokens[0].data == "Large"
        assert tokens[0].ctx.cap_height == ScaleFactor(2.5, relative=False)
        assert tokens[1].data == "Small"
        assert tokens[1].ctx.cap_height == ScaleFactor(0.5, relative=True)

    def test_no_value(self, first_word):
        token = first_word(r"\H;Text")
        assert token.data == "Text"
        assert token.ctx.cap_height == ScaleFactor(1.0)

    def test_overflow_is_left_as_text(self, first_word):
        token = first_word(r"\H1e999;Text")
        assert token.data == "\\H1e999;Text"
        assert token.ctx.cap_height == ScaleFactor(1.0)

    def test_relative_overflow_keeps_suffix(self, first_word):
        assert first_word(r"\H1e999x;Text").data == "\\H1e999x;Text"

    def test_overflow_is_not_a_property_change(self, lex):
        tokens = lex(r"a\W1e999;b", properties=True)
        assert_types(tokens, [W, W])
        assert tokens[1].data == "\\W1e999;b"


class TestWidthAndTracking:
    @pytest.mark.parametrize(("cmd", "field"), [("W", "width_factor"), ("T", "char_tracking_factor")])
    def test_absolute(self, first_word, cmd, field):
        token = first_word(f"\\{cmd}2.5;Text")
        assert token.data == "Text"
        assert getattr(token.ctx, field) == ScaleFactor(2.5)

    @pytest.mark.parametrize(("cmd", "field"), [("W", "width_factor"), ("T", "char_tracking_factor")])
    def test_relative(self, first_word, cmd, field):
        token = first_word(f"\\{cmd}.5x;Text")
        assert getattr(token.ctx, field) == ScaleFactor(0.5, relative=True)

    @pytest.mark.parametrize(("cmd", "field"), [("W", "width_factor"), ("T", "char_tracking_factor")])
    def test_sign_is_discarded(self, first_word, cmd, field):
        token = first_word(f"\\{cmd}-2.5Text")
        assert token.data == "Text"
        assert getattr(token.ctx, field) == ScaleFactor(2.5)

    def test_multiple(self, lex):
        tokens = lex(r"\W2.5;First\W.5x;Second")
        assert tokens[0].ctx.width_factor == ScaleFactor(2.5)
        assert tokens[1].ctx.width_factor == ScaleFactor(0.5, relative=True)


class TestOblique:
    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            (r"\Q15;Text", 15.0),
            (r"\Q-15;Text", -15.0),
            (r"\Q15Text", 15.0),
            (r"\Q15.5;Text", 15.5),
        ],
    )
    def test_oblique(self, first_word, content, expected):
        token = first_word(content)
        assert token.data == "Text"
        assert token.ctx.oblique == expected

    def test_no_relative_suffix(self, first_word):
        token = first_word(r"\Q15x;")
        assert token.data == "x;"
        assert token.ctx.oblique == 15.0

    def test_overflow_is_left_as_text(self, first_word):
        token = first_word(r"\Q-1e999;x")
        assert token.data == "\\Q-1e999;x"
        assert token.ctx.oblique == 0.0

    def test_multiple(self, lex):
        tokens = lex(r"\Q15;First\Q-30;Second")
        assert [t.ctx.oblique for t in tokens] == [15.0, -30.0]


class TestUnknownCommands:
    def test_unknown_letter_is_literal(self, lex):
        tokens = lex(r"\ZText")
        assert_types(tokens, [W])
        assert tokens[0].data == "\\ZText"
        assert tokens[0].ctx == FormattingContext()

    def test_unknown_letter_flushes_previous_word(self, lex):
        assert words(lex(r"ab\zcd")) == ["ab", "\\zcd"]

    def test_parsing_continues_after_unknown(self, lex):
        tokens = lex(r"\j\LA")
        assert words(tokens) == ["\\j", "A"]
        assert tokens[1].ctx.underline is True
