"""
Speech engine driven by locale rule files.

Every word the engine produces comes from locale data:

- base.json maps characters found in MathML (operators, Greek letters,
  invisible operators) to canonical symbol names
- <locale>.json maps symbol names to words and holds one template per
  layout construct (superscript, fraction, root, ...), grouped by domain
  and style

The MathML tree is read depth first; each construct is rendered by
filling its template with the text of its children.
"""

import html
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
from xml.etree.ElementTree import Element, ParseError, fromstring

from ..errors import AssetNotFoundError, ConfigurationError, ConversionError
from .base import SpeechEngine

logger = logging.getLogger(__name__)

BASE_RULESET = "base"
BRAILLE_LOCALE = "nemeth"
DEFAULT_KEY = "default"

# Marks where a number starts; replaced by the numeric indicator in braille
_NUMBER_MARK = "\x00"


@dataclass
class LocaleRules:
    """
    Rules of one locale for one domain and style.

    Attributes:
        locale: Locale name
        separator: String placed between sibling parts
        symbols: Symbol name to text
        templates: Construct name to template, style rules over domain defaults
        letters: Letter transcription (braille only)
        digits: Digit transcription (braille only)
        numeric_indicator: Prefix for numbers at the start of a word (braille only)
    """
    locale: str
    separator: str = " "
    symbols: Dict[str, str] = field(default_factory=dict)
    templates: Dict[str, str] = field(default_factory=dict)
    letters: Dict[str, str] = field(default_factory=dict)
    digits: Dict[str, str] = field(default_factory=dict)
    numeric_indicator: str = ""

    @classmethod
    def from_data(cls, data: Dict, domain: str, style: str) -> "LocaleRules":
        locale = str(data.get("locale", ""))
        rules = data.get("rules") or {}
        domain_rules = rules.get(domain) or rules.get(DEFAULT_KEY)
        if not domain_rules:
            raise ConversionError(
                f"Domain '{domain}' is not available for locale '{locale}'"
            )
        templates = dict(domain_rules.get(DEFAULT_KEY, {}))
        if style != DEFAULT_KEY:
            if style not in domain_rules:
                logger.debug("Style %s not defined for %s/%s, using default", style, locale, domain)
            templates.update(domain_rules.get(style, {}))
        return cls(
            locale=locale,
            separator=data.get("separator", " "),
            symbols=dict(data.get("symbols", {})),
            templates=templates,
            letters=dict(data.get("letters", {})),
            digits=dict(data.get("digits", {})),
            numeric_indicator=data.get("numeric_indicator", ""),
        )


class RuleSpeechEngine(SpeechEngine):
    """
    Reads MathML aloud using locale rule files.

    base.json is loaded by ready(); a missing base ruleset is fatal.
    The locale itself is loaded on the first conversion, so a missing
    locale only fails the expressions that need it.
    """

    def __init__(self) -> None:
        super().__init__()
        self._characters: Dict[str, str] = {}
        self._rules: Optional[LocaleRules] = None

    @property
    def locale_name(self) -> str:
        if self.options.modality == "braille":
            return BRAILLE_LOCALE
        return self.options.locale

    def ready(self) -> None:
        if self.options is None:
            raise ConfigurationError("Speech engine setup() must be called before ready()")
        if self.loader is None and self.json_path is None:
            raise ConfigurationError("Speech engine has no locale data source")
        try:
            base = self.read_locale(BASE_RULESET)
        except (AssetNotFoundError, ConversionError) as e:
            raise ConfigurationError(f"Speech engine setup failed: {e}") from e
        self._characters = dict(base.get("characters", {}))
        self._rules = None
        self._ready = True
        logger.debug(
            "Speech engine ready: locale=%s domain=%s style=%s modality=%s",
            self.locale_name, self.options.domain, self.options.style, self.options.modality
        )

    def rules(self) -> LocaleRules:
        if self._rules is None:
            data = self.read_locale(self.locale_name)
            self._rules = LocaleRules.from_data(data, self.options.domain, self.options.style)
        return self._rules

    def to_speech(self, mathml: str) -> str:
        if not self._ready:
            raise ConversionError("Speech engine not ready")
        rules = self.rules()
        try:
            root = fromstring(mathml)
        except ParseError as e:
            raise ConversionError(f"Invalid MathML: {e}") from e
        return MathReader(rules, self._characters).read(root)


class MathReader:
    """Renders one MathML tree with a set of locale rules."""

    def __init__(self, rules: LocaleRules, characters: Dict[str, str]):
        self.rules = rules
        self.characters = characters

    def read(self, root: Element) -> str:
        text = re.sub(r"\s+", " ", self._read(root)).strip()
        return self._place_numeric_indicators(text)

    # -- tree walk ---------------------------------------------------------

    def _read(self, node: Element) -> str:
        handler = getattr(self, f"_read_{_local_name(node.tag)}", None)
        if handler is not None:
            return handler(node)
        # math, mrow, mstyle, mpadded, semantics, mtable, ...
        return self._join(self._read(child) for child in node)

    def _join(self, parts: Iterable[str]) -> str:
        return self.rules.separator.join(part for part in parts if part)

    def _read_mi(self, node: Element) -> str:
        text = _text(node)
        if len(text) > 1:
            return self.rules.symbols.get(text, text)
        return self._read_letter(text)

    def _read_letter(self, char: str) -> str:
        name = self.characters.get(char)
        if name is not None:
            return self.rules.symbols.get(name, name)
        if self.rules.letters:
            letter = self.rules.letters.get(char.lower(), char)
            if char.isupper():
                return self._apply("capital", [letter], letter=letter)
            return letter
        if char.isascii() and char.isupper():
            return self._apply("capital", [char], letter=char)
        return char

    def _read_mn(self, node: Element) -> str:
        text = _text(node)
        if not self.rules.digits:
            return text
        digits = "".join(self.rules.digits.get(char, char) for char in text)
        return _NUMBER_MARK + digits

    def _read_mo(self, node: Element) -> str:
        text = _text(node)
        name = self.characters.get(text)
        if name is None:
            return self.rules.symbols.get(text, text)
        if not name:
            return ""
        return self.rules.symbols.get(name, name.replace("-", " "))

    def _read_mtext(self, node: Element) -> str:
        return _text(node)

    def _read_mspace(self, node: Element) -> str:
        return ""

    def _read_msup(self, node: Element) -> str:
        base, script = self._children(node, 2)
        base_text = self._read(base)
        exponent = _unwrap(script)
        if _local_name(exponent.tag) == "mn":
            value = _text(exponent)
            if value == "2" and "squared" in self.rules.templates:
                return self._apply("squared", [base_text], base=base_text)
            if value == "3" and "cubed" in self.rules.templates:
                return self._apply("cubed", [base_text], base=base_text)
        script_text = self._read(script)
        return self._apply("power", [base_text, script_text], base=base_text, script=script_text)

    def _read_msub(self, node: Element) -> str:
        base, script = (self._read(child) for child in self._children(node, 2))
        return self._apply("subscript", [base, script], base=base, script=script)

    def _read_msubsup(self, node: Element) -> str:
        base, sub, sup = (self._read(child) for child in self._children(node, 3))
        return self._apply("subsup", [base, sub, sup], base=base, sub=sub, sup=sup)

    def _read_mfrac(self, node: Element) -> str:
        num, den = (self._read(child) for child in self._children(node, 2))
        return self._apply("fraction", [num, den], num=num, den=den)

    def _read_msqrt(self, node: Element) -> str:
        body = self._join(self._read(child) for child in node)
        return self._apply("sqrt", [body], body=body)

    def _read_mroot(self, node: Element) -> str:
        body, index = (self._read(child) for child in self._children(node, 2))
        return self._apply("root", [index, body], index=index, body=body)

    def _read_munder(self, node: Element) -> str:
        base, script = (self._read(child) for child in self._children(node, 2))
        return self._apply("underscript", [base, script], base=base, script=script)

    def _read_mover(self, node: Element) -> str:
        base, script = (self._read(child) for child in self._children(node, 2))
        return self._apply("overscript", [base, script], base=base, script=script)

    def _read_munderover(self, node: Element) -> str:
        base, under, over = (self._read(child) for child in self._children(node, 3))
        return self._apply("underover", [base, under, over], base=base, under=under, over=over)

    # -- helpers -----------------------------------------------------------

    def _apply(self, construct: str, fallback: List[str], **parts: str) -> str:
        template = self.rules.templates.get(construct)
        if template is None:
            return self._join(fallback)
        try:
            return template.format(**parts)
        except (KeyError, IndexError, ValueError) as e:
            raise ConversionError(
                f"Bad '{construct}' rule in locale {self.rules.locale}: {e}"
            ) from e

    @staticmethod
    def _children(node: Element, count: int) -> List[Element]:
        children = list(node)
        if len(children) != count:
            raise ConversionError(
                f"<{_local_name(node.tag)}> expects {count} children, got {len(children)}"
            )
        return children

    def _place_numeric_indicators(self, text: str) -> str:
        indicator = self.rules.numeric_indicator
        out = []
        for i, char in enumerate(text):
            if char != _NUMBER_MARK:
                out.append(char)
            elif indicator and (i == 0 or text[i - 1] == " "):
                out.append(indicator)
        return "".join(out)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _text(node: Element) -> str:
    return html.unescape(node.text or "").strip()


def _unwrap(node: Element) -> Element:
    """Skip <mrow> wrappers with a single child."""
    while _local_name(node.tag) == "mrow" and len(node) == 1:
        node = node[0]
    return node
