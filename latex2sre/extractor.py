"""
Extract embedded locale data to a temporary directory.

The speech engine is happiest with a directory of files. A self-contained
build only has embedded blobs, so on first use they are copied into a
fresh temporary directory, driven by the embedded manifest. The directory
is recorded on the resolved-path state and reused for the rest of the
process; it is never deleted here.
"""

import json
import logging
import tempfile
from pathlib import Path
from typing import List

from .assets import MANIFEST_NAME, MATHMAPS_DIRNAME, EmbeddedAssets, asset_name
from .config import RuntimeConfig
from .errors import ExtractionError

logger = logging.getLogger(__name__)

TEMP_PREFIX = "latex2sre-"


def read_manifest(assets: EmbeddedAssets) -> List[str]:
    """
    Read the list of embedded locale files.

    Raises:
        ExtractionError: If the manifest is missing or malformed
    """
    try:
        text = assets.get_text(asset_name(MANIFEST_NAME))
    except (OSError, UnicodeDecodeError) as e:
        raise ExtractionError(f"Embedded manifest could not be read: {e}") from e
    if text is None:
        raise ExtractionError("Embedded manifest not found")
    logger.debug("manifest fetch length=%d", len(text))

    try:
        manifest = json.loads(text)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Embedded manifest is not valid JSON: {e}") from e

    files = manifest.get("files") if isinstance(manifest, dict) else None
    if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
        raise ExtractionError("Embedded manifest has no 'files' list")
    return files


class AssetExtractor:
    """
    Materializes embedded assets as files, at most once per process.

    Attributes:
        config: Runtime configuration holding the assets and the path state
        extracted_count: Number of files written by the last extraction
    """

    def __init__(self, config: RuntimeConfig):
        self.config = config
        self.extracted_count = 0

    def ensure_extracted(self) -> Path:
        """
        Return a directory holding the locale files, extracting if needed.

        Returns:
            The resolved locale data directory

        Raises:
            ExtractionError: If there are no embedded assets, the manifest
                cannot be read, or no temporary directory can be created.
                The path state is left unset in that case.
        """
        state = self.config.state
        if state.is_set():
            logger.debug("Assets already available at %s", state.path)
            return state.path

        assets = self.config.assets
        if assets is None:
            raise ExtractionError("Embedded assets are not available in this build")

        files = read_manifest(assets)

        try:
            tmp_base = Path(tempfile.mkdtemp(prefix=TEMP_PREFIX))
            dest_dir = tmp_base / MATHMAPS_DIRNAME
            dest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExtractionError(f"Could not create extraction directory: {e}") from e

        count = 0
        for filename in files:
            try:
                data = assets.get_asset(asset_name(filename))
            except OSError as e:
                logger.warning("Embedded asset %s could not be read, skipping: %s", filename, e)
                continue
            if data is None:
                logger.warning("Embedded asset %s is missing, skipping", filename)
                continue
            logger.debug("asset %s length=%d", filename, len(data))
            try:
                (dest_dir / Path(filename).name).write_bytes(data)
            except OSError as e:
                raise ExtractionError(f"Could not write {filename} to {dest_dir}: {e}") from e
            count += 1

        self.extracted_count = count
        state.set(dest_dir, "extracted")
        logger.debug("Extracted mathmaps to %s (%d files)", dest_dir, count)
        return dest_dir
