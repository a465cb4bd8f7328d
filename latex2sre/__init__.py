"""
latex2sre - Convert LaTeX math expressions to spoken math and braille.

This package provides tools to:
- Convert LaTeX to MathML and read MathML aloud with locale rule files
- Locate locale data next to the executable, in the package, or embedded
- Extract embedded locale data when running as a self-contained build
- Write and check the manifest of embedded locale files
"""

__version__ = "1.1.0"
