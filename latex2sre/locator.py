"""
Decide where locale data comes from.

Resolution walks an ordered list of strategies and the first one that
produces a result wins:

1. An explicit override path (config file or SRE_JSON_PATH)
2. A mathmaps directory next to the running executable
3. The package's own mathmaps directory (development install)
4. A loader reading embedded assets directly (self-contained build)

The locator never raises for "nothing found"; it returns None and leaves
it to the engine setup to decide that this is fatal.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .assets import MATHMAPS_DIRNAME, EmbeddedAssets, locale_asset_name
from .config import RuntimeConfig
from .errors import AssetNotFoundError, ConversionError

logger = logging.getLogger(__name__)

LocaleLoader = Callable[[str], str]


@dataclass
class Resolution:
    """
    Outcome of a successful resolution.

    Exactly one of path and loader is set.
    """
    source: str
    path: Optional[Path] = None
    loader: Optional[LocaleLoader] = None

    @property
    def is_path(self) -> bool:
        return self.path is not None


class ResolutionStrategy(ABC):
    """One way of finding locale data."""

    name = "strategy"

    @abstractmethod
    def try_resolve(self, config: RuntimeConfig) -> Optional[Resolution]:
        """Return a Resolution, or None if this strategy does not apply."""
        pass


class OverridePathStrategy(ResolutionStrategy):
    """Explicit directory from configuration or the environment."""

    name = "override"

    def try_resolve(self, config: RuntimeConfig) -> Optional[Resolution]:
        if config.override_path is None:
            return None
        # Validity is checked by the caller; a bad override is a config error
        return Resolution(self.name, path=Path(config.override_path))


class SiblingDirectoryStrategy(ResolutionStrategy):
    """mathmaps directory shipped next to the executable."""

    name = "sibling"

    def try_resolve(self, config: RuntimeConfig) -> Optional[Resolution]:
        candidate = Path(config.executable).parent / MATHMAPS_DIRNAME
        if candidate.is_dir():
            return Resolution(self.name, path=candidate)
        return None


class DevelopmentTreeStrategy(ResolutionStrategy):
    """The package's own data directory, outside of a frozen build."""

    name = "development"

    def try_resolve(self, config: RuntimeConfig) -> Optional[Resolution]:
        if config.frozen:
            return None
        candidate = Path(config.package_data_dir)
        if candidate.is_dir():
            return Resolution(self.name, path=candidate)
        return None


class EmbeddedLoaderStrategy(ResolutionStrategy):
    """Read embedded assets directly, deferring extraction."""

    name = "embedded"

    def try_resolve(self, config: RuntimeConfig) -> Optional[Resolution]:
        if config.assets is None:
            return None
        return Resolution(self.name, loader=embedded_loader(config.assets))


def embedded_loader(assets: EmbeddedAssets) -> LocaleLoader:
    """Build a loader returning a locale's JSON text from embedded assets."""

    def load(locale: str) -> str:
        name = locale_asset_name(locale)
        try:
            text = assets.get_text(name)
        except (OSError, UnicodeDecodeError) as e:
            raise ConversionError(f"Locale data for {locale} could not be read from embedded assets: {e}") from e
        logger.debug("Embedded asset %s: %s", name, "hit" if text is not None else "miss")
        if text is None:
            raise AssetNotFoundError(locale, "embedded assets")
        return text

    return load


def default_strategies() -> List[ResolutionStrategy]:
    return [
        OverridePathStrategy(),
        SiblingDirectoryStrategy(),
        DevelopmentTreeStrategy(),
        EmbeddedLoaderStrategy(),
    ]


class AssetLocator:
    """Runs resolution strategies in order until one succeeds."""

    def __init__(self, strategies: Optional[Sequence[ResolutionStrategy]] = None):
        self.strategies = list(strategies) if strategies is not None else default_strategies()

    def resolve(self, config: RuntimeConfig) -> Optional[Resolution]:
        for strategy in self.strategies:
            resolution = strategy.try_resolve(config)
            if resolution is not None:
                logger.debug("Locale data resolved by %s strategy", strategy.name)
                return resolution
            logger.debug("Strategy %s did not apply", strategy.name)
        return None
