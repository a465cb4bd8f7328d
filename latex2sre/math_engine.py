"""
LaTeX to MathML conversion.

Input lines may carry their own math-mode delimiters ($...$, \\(...\\),
\\[...\\], or a math environment). These are unwrapped first with
pylatexenc, then the bare expression is converted to a MathML element
tree by latex2mathml.
"""

import re
import logging
from typing import Iterable, Optional, Tuple
from xml.etree.ElementTree import Element, tostring

from latex2mathml.converter import convert_to_element
from pylatexenc.latexnodes import parsers as latex_parsers
from pylatexenc.latexnodes.nodes import (
    LatexCharsNode,
    LatexCommentNode,
    LatexEnvironmentNode,
    LatexMathNode,
)
from pylatexenc.latexwalker import LatexWalker, LatexWalkerError

from .errors import ConfigurationError, ConversionError

logger = logging.getLogger(__name__)

MATH_ENVIRONMENTS = {
    "equation",
    "equation*",
    "align",
    "align*",
    "gather",
    "gather*",
    "multline",
    "multline*",
    "eqnarray",
    "eqnarray*",
    "displaymath",
    "math",
}


class MathEngine:
    """
    Wrapper around latex2mathml.

    Attributes:
        display: MathML display mode ("block" or "inline")
    """

    def __init__(self, display: str = "block"):
        self.display = display
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Check the converter works once before any real input."""
        if self._initialized:
            return
        try:
            convert_to_element("x", display=self.display)
        except Exception as e:
            raise ConfigurationError(f"Math engine failed to initialize: {e}") from e
        self._initialized = True
        logger.debug("Math engine ready (display=%s)", self.display)

    def convert(self, latex: str) -> Element:
        """
        Convert a LaTeX expression to a MathML element tree.

        Raises:
            ConversionError: If the expression cannot be parsed
        """
        if not self._initialized:
            raise ConversionError("Math engine not initialized")

        expression = unwrap_math(latex)
        if not expression:
            raise ConversionError(f'Conversion error for "{latex}": empty expression')
        try:
            return convert_to_element(expression, display=self.display)
        except Exception as e:
            raise ConversionError(f'Conversion error for "{latex}": {e}') from e

    @staticmethod
    def serialize(node: Element) -> str:
        return tostring(node, encoding="unicode")

    def to_mathml(self, latex: str) -> str:
        return self.serialize(self.convert(latex))


def unwrap_math(latex: str) -> str:
    """
    Remove math-mode delimiters around a whole expression.

    Examples:
        >>> unwrap_math("$x=1$")
        'x=1'
        >>> unwrap_math("x=1")
        'x=1'
    """
    stripped = latex.strip()
    if not stripped:
        return stripped

    parse_result = _safe_parse(stripped)
    if parse_result is None:
        return stripped

    _, nodelist = parse_result
    significant = [node for node in nodelist if not _is_blank(node)]
    if len(significant) != 1 or not _is_math_node(significant[0]):
        return stripped

    node = significant[0]
    raw = stripped[node.pos:node.pos + node.len]
    return _strip_math_delimiters(raw).strip()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _safe_parse(tex_content: str) -> Optional[Tuple[LatexWalker, Iterable]]:
    try:
        walker = LatexWalker(tex_content)
        parser = latex_parsers.LatexGeneralNodesParser()
        nodes, _ = walker.parse_content(parser)
        if nodes is None:
            return walker, []
        top_level = nodes.nodelist if hasattr(nodes, "nodelist") else [nodes]
        return walker, top_level
    except (LatexWalkerError, ValueError):
        return None


def _is_blank(node) -> bool:
    if isinstance(node, LatexCommentNode):
        return True
    return isinstance(node, LatexCharsNode) and not node.chars.strip()


def _is_math_node(node) -> bool:
    if isinstance(node, LatexMathNode):
        return True
    return (
        isinstance(node, LatexEnvironmentNode)
        and (node.environmentname or "") in MATH_ENVIRONMENTS
    )


def _strip_math_delimiters(raw_latex: str) -> str:
    stripped = raw_latex.strip()

    if stripped.startswith(r"\(") and stripped.endswith(r"\)"):
        return stripped[2:-2]

    if stripped.startswith(r"\[") and stripped.endswith(r"\]"):
        return stripped[2:-2]

    if stripped.startswith("$$") and stripped.endswith("$$"):
        return stripped[2:-2]

    if stripped.startswith("$") and stripped.endswith("$"):
        return stripped[1:-1]

    env_match = re.match(
        r"\\begin\{([^\}]+)\}(.*)\\end\{\1\}\s*$", stripped, flags=re.DOTALL
    )
    if env_match:
        return env_match.group(2).strip()

    return stripped
