"""Unit tests for the LaTeX to MathML engine."""

from __future__ import annotations

import pytest

from latex2sre.errors import ConversionError
from latex2sre.math_engine import MathEngine, unwrap_math


class TestUnwrapMath:
    """Tests for unwrap_math."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("x=1", "x=1"),
            ("  x=1  ", "x=1"),
            ("$x=1$", "x=1"),
            ("$$x=1$$", "x=1"),
            (r"\(x=1\)", "x=1"),
            (r"\[x=1\]", "x=1"),
            (r"\begin{equation}x=1\end{equation}", "x=1"),
        ],
    )
    def test_unwraps_delimiters(self, raw: str, expected: str) -> None:
        assert unwrap_math(raw) == expected

    def test_keeps_text_around_math(self) -> None:
        assert unwrap_math("let $x=1$") == "let $x=1$"

    def test_empty(self) -> None:
        assert unwrap_math("   ") == ""


class TestMathEngine:
    """Tests for MathEngine."""

    @pytest.fixture
    def engine(self) -> MathEngine:
        engine = MathEngine()
        engine.initialize()
        return engine

    def test_initialize(self, engine: MathEngine) -> None:
        assert engine.initialized

    def test_convert_returns_math_element(self, engine: MathEngine) -> None:
        node = engine.convert("x=1")
        assert node.tag.endswith("math")
        assert node.get("display") == "block"

    def test_serialize_is_parseable_mathml(self, engine: MathEngine) -> None:
        mathml = engine.to_mathml("a^2+b^2=c^2")
        assert mathml.startswith("<math")
        assert "msup" in mathml

    def test_convert_before_initialize(self) -> None:
        with pytest.raises(ConversionError, match="not initialized"):
            MathEngine().convert("x=1")

    def test_invalid_latex(self, engine: MathEngine) -> None:
        with pytest.raises(ConversionError, match="x\\^"):
            engine.convert("x^")

    def test_blank_expression(self, engine: MathEngine) -> None:
        with pytest.raises(ConversionError, match="empty"):
            engine.convert("   ")
