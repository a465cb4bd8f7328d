"""
Per-process cache of locale JSON text.

One data source is chosen for the whole process: embedded assets when no
locale data directory has been resolved, the resolved directory otherwise.
Successful loads are kept for the life of the process. Failed lookups are
not cached, so a locale that appears on disk mid-run is picked up.
"""

import logging
from typing import Dict

from .config import RuntimeConfig
from .errors import ConversionError, LocaleNotFoundError
from .locator import embedded_loader

logger = logging.getLogger(__name__)


class LocaleDataCache:
    """Loads and memoizes locale data by name."""

    def __init__(self, config: RuntimeConfig):
        self.config = config
        self._entries: Dict[str, str] = {}
        self.reads = 0

    def __contains__(self, locale: str) -> bool:
        return locale in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def load_locale(self, locale: str) -> str:
        """
        Return the JSON text of a locale.

        Raises:
            LocaleNotFoundError: If the chosen source has no data for it
        """
        cached = self._entries.get(locale)
        if cached is not None:
            return cached

        if self.config.state.path is None and self.config.assets is not None:
            text = self._load_from_assets(locale)
        else:
            text = self._load_from_fs(locale)

        self._entries[locale] = text
        return text

    def _load_from_assets(self, locale: str) -> str:
        self.reads += 1
        return embedded_loader(self.config.assets)(locale)

    def _load_from_fs(self, locale: str) -> str:
        base = self.config.state.path
        if base is None:
            raise LocaleNotFoundError(locale, "no locale data path resolved")

        file_path = base / f"{locale}.json"
        logger.debug("reading %s", file_path)
        self.reads += 1
        try:
            return file_path.read_text(encoding='utf-8')
        except FileNotFoundError as e:
            raise LocaleNotFoundError(locale, str(file_path)) from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConversionError(f"Locale data for {locale} could not be read from {file_path}: {e}") from e
