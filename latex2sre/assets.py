"""
Access to locale data embedded in the current build.

A normal install ships the mathmaps as plain files inside the package.
A self-contained build (a frozen executable or a zipped application)
carries the same files as package resources that may not be readable
through the filesystem, so they are exposed here as named blobs:

- ``mathmaps/<locale>.json`` for each locale or shared ruleset
- ``mathmaps/manifest.json`` listing every embedded locale file
"""

import sys
from abc import ABC, abstractmethod
from importlib import resources
from pathlib import Path
from typing import Dict, Mapping, Optional

PACKAGE_NAME = "latex2sre"
MATHMAPS_DIRNAME = "mathmaps"
MANIFEST_NAME = "manifest.json"

PACKAGE_MATHMAPS_DIR = Path(__file__).resolve().parent / MATHMAPS_DIRNAME


def asset_name(filename: str) -> str:
    """Logical asset name for a file in the mathmaps directory."""
    return f"{MATHMAPS_DIRNAME}/{filename}"


def locale_asset_name(locale: str) -> str:
    return asset_name(f"{locale}.json")


class EmbeddedAssets(ABC):
    """Named blobs bundled into the running build."""

    @abstractmethod
    def get_asset(self, name: str) -> Optional[bytes]:
        """
        Return the content of an embedded asset.

        Args:
            name: Logical asset name (e.g., "mathmaps/en.json")

        Returns:
            Raw bytes, or None if the build carries no such asset
        """
        pass

    def get_text(self, name: str) -> Optional[str]:
        data = self.get_asset(name)
        if data is None:
            return None
        return data.decode("utf-8")


class PackageAssets(EmbeddedAssets):
    """Assets read from package resources via importlib.resources."""

    def __init__(self, package: str = PACKAGE_NAME):
        self.package = package

    def get_asset(self, name: str) -> Optional[bytes]:
        resource = resources.files(self.package)
        for part in name.split("/"):
            resource = resource.joinpath(part)
        if not resource.is_file():
            return None
        return resource.read_bytes()


class MappingAssets(EmbeddedAssets):
    """Assets held in memory, keyed by logical name."""

    def __init__(self, blobs: Optional[Mapping[str, bytes]] = None):
        self._blobs: Dict[str, bytes] = dict(blobs or {})

    def get_asset(self, name: str) -> Optional[bytes]:
        return self._blobs.get(name)

    @classmethod
    def from_directory(cls, directory: Path) -> "MappingAssets":
        """Load every JSON file of a mathmaps directory as an asset."""
        directory = Path(directory)
        blobs = {
            asset_name(path.name): path.read_bytes()
            for path in sorted(directory.glob("*.json"))
        }
        return cls(blobs)


def is_frozen() -> bool:
    """True when running as a self-contained executable."""
    return bool(getattr(sys, "frozen", False))


def detect_embedded_assets(frozen: Optional[bool] = None) -> Optional[EmbeddedAssets]:
    """
    Return embedded asset access when running as a self-contained build.

    A build counts as self-contained when it is frozen, or when the
    package's mathmaps are not reachable as a directory on disk (the
    package was imported from an archive).
    """
    if frozen is None:
        frozen = is_frozen()
    if frozen or not PACKAGE_MATHMAPS_DIR.is_dir():
        return PackageAssets()
    return None
