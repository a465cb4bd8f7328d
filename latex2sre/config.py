"""
Runtime configuration for latex2sre.

Everything that used to be process-wide state (the override path, the
resolved locale data path, embedded asset access) lives on a single
RuntimeConfig object that is created once at startup and passed to the
locator, the extractor and the engine setup.
"""

import json
import logging
import os
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional

from dotenv import load_dotenv

from .assets import PACKAGE_MATHMAPS_DIR, EmbeddedAssets, detect_embedded_assets, is_frozen
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_JSON_PATH = "SRE_JSON_PATH"

DEFAULT_LOCALE = "en"
DEFAULT_DOMAIN = "mathspeak"
DEFAULT_STYLE = "default"
DEFAULT_MODALITY = "speech"

SPEECH_OPTION_KEYS = ("locale", "domain", "style", "modality")


class ResolvedPathState:
    """
    Holder for the one directory designated as the locale data source.

    The path can be set at most once. Setting it again to the same path is
    a no-op; setting it to a different path is a configuration error.
    """

    def __init__(self) -> None:
        self._path: Optional[Path] = None
        self.source: Optional[str] = None

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def is_set(self) -> bool:
        return self._path is not None

    def set(self, path: Path, source: str) -> Path:
        path = Path(path)
        if self._path is not None:
            if self._path != path:
                raise ConfigurationError(
                    f"Locale data path already set to {self._path} ({self.source}), "
                    f"refusing to switch to {path}"
                )
            return self._path
        self._path = path
        self.source = source
        logger.debug("Locale data path set to %s (%s)", path, source)
        return path


@dataclass
class RuntimeConfig:
    """
    Startup configuration for asset resolution.

    Attributes:
        override_path: Explicit locale data directory (config file or SRE_JSON_PATH)
        executable: Path of the running executable
        frozen: Whether this is a self-contained executable
        package_data_dir: The package's own mathmaps directory
        assets: Embedded asset access, if this build carries assets
        state: The resolved locale data path
    """
    override_path: Optional[Path] = None
    executable: Path = field(default_factory=lambda: Path(sys.executable))
    frozen: bool = False
    package_data_dir: Path = PACKAGE_MATHMAPS_DIR
    assets: Optional[EmbeddedAssets] = None
    state: ResolvedPathState = field(default_factory=ResolvedPathState)

    @classmethod
    def from_env(cls, override_path: Optional[Path] = None) -> "RuntimeConfig":
        """
        Build the configuration from the environment.

        Loads a .env file if present, then reads SRE_JSON_PATH. An explicit
        override_path argument wins over the environment.
        """
        load_dotenv()
        env_path = os.getenv(ENV_JSON_PATH)
        path = override_path or (Path(env_path) if env_path else None)
        frozen = is_frozen()
        return cls(
            override_path=path,
            frozen=frozen,
            assets=detect_embedded_assets(frozen),
        )


class ConversionKey(NamedTuple):
    """Cache key of one conversion request; fields compare exactly."""
    expression: str
    locale: str
    domain: str
    style: str
    modality: str


@dataclass(frozen=True)
class ConversionOptions:
    """Speech parameters passed through to the speech engine."""
    locale: str = DEFAULT_LOCALE
    domain: str = DEFAULT_DOMAIN
    style: str = DEFAULT_STYLE
    modality: str = DEFAULT_MODALITY

    def key_for(self, expression: str) -> ConversionKey:
        return ConversionKey(expression, self.locale, self.domain, self.style, self.modality)

    def with_overrides(self, custom: Dict[str, Any]) -> "ConversionOptions":
        """Return a copy with speech options from a config mapping applied."""
        changes = {key: custom[key] for key in SPEECH_OPTION_KEYS if key in custom}
        return replace(self, **changes)


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """
    Load a JSON config file with extra speech engine options.

    Args:
        config_path: Path to the JSON file

    Returns:
        The parsed options mapping

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a JSON object
    """
    config_path = Path(config_path).resolve()
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            custom = json.load(f)
    except (OSError, ValueError) as e:
        # ValueError covers JSONDecodeError and UnicodeDecodeError
        raise ConfigurationError(f"Error loading config file: {e}") from e

    if not isinstance(custom, dict):
        raise ConfigurationError(f"Config file must contain a JSON object: {config_path}")

    known = set(SPEECH_OPTION_KEYS) | {"json"}
    for key in sorted(set(custom) - known):
        logger.warning("Ignoring unknown config option: %s", key)

    for key in sorted(set(custom) & known):
        value = custom[key]
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(
                f"Config option '{key}' must be a non-empty string, got {value!r}"
            )

    logger.debug("Loaded custom config: %s", custom)
    return custom
