"""
Speech engines for latex2sre.

The pipeline only depends on the SpeechEngine interface; the concrete
engine is chosen here and injected at startup.
"""

from .base import SpeechEngine
from .rule_engine import LocaleRules, MathReader, RuleSpeechEngine

ENGINES = {
    "rules": RuleSpeechEngine,
}


def get_engine(name: str = "rules") -> SpeechEngine:
    """
    Create a speech engine by name.

    Raises:
        ValueError: If the engine name is unknown
    """
    try:
        engine_cls = ENGINES[name]
    except KeyError:
        raise ValueError(
            f"Unknown speech engine: {name}. "
            f"Supported engines: {', '.join(sorted(ENGINES))}"
        )
    return engine_cls()


__all__ = [
    "get_engine",
    "SpeechEngine",
    "RuleSpeechEngine",
    "LocaleRules",
    "MathReader",
]
