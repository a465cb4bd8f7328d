"""
Conversion pipeline: LaTeX -> MathML -> speech.

Engine setup runs in a fixed order. The math engine comes first because it
has no data dependency. Then locale data is resolved exactly once and the
speech engine is set up against it. After that each expression is
converted synchronously, with the conversion cache in front.
"""

import logging
from typing import Optional

from .config import ConversionOptions, RuntimeConfig
from .conversion_cache import ConversionCache
from .errors import ConfigurationError, ConversionError, ExtractionError
from .extractor import AssetExtractor
from .locale_cache import LocaleDataCache
from .locator import AssetLocator
from .math_engine import MathEngine
from .speech import SpeechEngine, get_engine

logger = logging.getLogger(__name__)


def resolve_locale_source(
    config: RuntimeConfig,
    locator: Optional[AssetLocator] = None
) -> LocaleDataCache:
    """
    Decide where locale data comes from and return a cache over it.

    Directory results are recorded on config.state. When only embedded
    assets are available they are extracted to a temporary directory; if
    that fails, locale data is read from the embedded assets directly.

    Raises:
        ConfigurationError: If the override path is not a directory, or no
            locale data source exists at all
    """
    locator = locator or AssetLocator()
    resolution = locator.resolve(config)

    if resolution is None:
        raise ConfigurationError(
            "Locale data not found. Set SRE_JSON_PATH to a directory of mathmaps."
        )

    if resolution.is_path:
        if not resolution.path.is_dir():
            raise ConfigurationError(f"Locale data path is not a directory: {resolution.path}")
        config.state.set(resolution.path, resolution.source)
    else:
        try:
            AssetExtractor(config).ensure_extracted()
        except ExtractionError as e:
            logger.warning("Extraction failed, reading embedded assets directly: %s", e)

    return LocaleDataCache(config)


class Latex2Sre:
    """
    LaTeX to speech converter.

    Attributes:
        options: Speech options used for every conversion
        config: Runtime configuration (asset resolution state)
        math_engine: LaTeX to MathML converter
        speech_engine: MathML to text engine
        cache: Conversion result cache
        conversions: Number of conversions actually computed
    """

    def __init__(
        self,
        options: Optional[ConversionOptions] = None,
        config: Optional[RuntimeConfig] = None,
        use_cache: bool = True,
        math_engine: Optional[MathEngine] = None,
        speech_engine: Optional[SpeechEngine] = None,
        locator: Optional[AssetLocator] = None
    ):
        self.options = options or ConversionOptions()
        self.config = config or RuntimeConfig.from_env()
        self.math_engine = math_engine or MathEngine()
        self.speech_engine = speech_engine or get_engine()
        self.cache = ConversionCache(enabled=use_cache)
        self.locator = locator
        self.locales: Optional[LocaleDataCache] = None
        self.conversions = 0

    def setup(self) -> None:
        """
        Initialize both engines.

        Raises:
            ConfigurationError: If either engine cannot be set up
        """
        self.math_engine.initialize()

        logger.debug("Embedded assets available: %s", self.config.assets is not None)
        logger.debug("Locale data path before setup: %s", self.config.state.path or "")

        self.locales = resolve_locale_source(self.config, self.locator)
        self.speech_engine.setup(
            self.options,
            loader=self.locales.load_locale,
            json_path=self.config.state.path
        )
        self.speech_engine.ready()
        logger.debug("Speech engine setup complete")

    def convert(self, latex: str) -> str:
        """
        Convert one LaTeX expression to speech.

        Raises:
            ConversionError: If the expression cannot be converted
            AssetNotFoundError: If the locale data is missing
        """
        key = self.options.key_for(latex)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit: %s", latex)
            return cached

        mathml = self.math_engine.to_mathml(latex)
        try:
            speech = self.speech_engine.to_speech(mathml)
        except ConversionError as e:
            raise ConversionError(f'Conversion error for "{latex}": {e}') from e

        self.conversions += 1
        self.cache.put(key, speech)
        return speech
