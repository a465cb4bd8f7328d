"""
Abstract base class for speech engines.

This module defines the interface the pipeline relies on to turn a
serialized MathML tree into spoken or braille text.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ..config import ConversionOptions
from ..errors import AssetNotFoundError, ConversionError

LocaleLoader = Callable[[str], str]


class SpeechEngine(ABC):
    """
    Abstract base class for speech engines.

    Engines are driven in three steps: setup() records the options and
    where locale data comes from, ready() performs the one-time
    initialization, and to_speech() converts one expression.
    """

    def __init__(self) -> None:
        self.options: Optional[ConversionOptions] = None
        self.loader: Optional[LocaleLoader] = None
        self.json_path: Optional[Path] = None
        self._ready = False

    def setup(
        self,
        options: ConversionOptions,
        loader: Optional[LocaleLoader] = None,
        json_path: Optional[Path] = None
    ) -> None:
        """
        Configure the engine.

        Args:
            options: Locale, domain, style and modality
            loader: Callback returning a locale's JSON text by name
            json_path: Directory of locale JSON files, used when no loader is given
        """
        self.options = options
        self.loader = loader
        self.json_path = Path(json_path) if json_path is not None else None
        self._ready = False

    @property
    def is_ready(self) -> bool:
        return self._ready

    @abstractmethod
    def ready(self) -> None:
        """
        Finish initialization.

        Raises:
            ConfigurationError: If the engine cannot be used
        """
        pass

    @abstractmethod
    def to_speech(self, mathml: str) -> str:
        """
        Convert serialized MathML to text.

        Raises:
            ConversionError: If the expression cannot be read
            AssetNotFoundError: If the locale data is missing
        """
        pass

    def read_locale_text(self, name: str) -> str:
        """Return raw JSON text of a locale from the loader or the data path."""
        if self.loader is not None:
            return self.loader(name)
        if self.json_path is None:
            raise AssetNotFoundError(name, "no locale data source")
        file_path = self.json_path / f"{name}.json"
        try:
            return file_path.read_text(encoding='utf-8')
        except FileNotFoundError as e:
            raise AssetNotFoundError(name, str(file_path)) from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConversionError(f"Locale data for {name} could not be read from {file_path}: {e}") from e

    def read_locale(self, name: str) -> Dict[str, Any]:
        text = self.read_locale_text(name)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConversionError(f"Locale data for {name} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConversionError(f"Locale data for {name} must be a JSON object")
        return data
