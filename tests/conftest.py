"""Shared fixtures for latex2sre tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from latex2sre.assets import PACKAGE_MATHMAPS_DIR, MappingAssets, asset_name
from latex2sre.config import ENV_JSON_PATH, RuntimeConfig


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's SRE_JSON_PATH out of the tests."""
    monkeypatch.delenv(ENV_JSON_PATH, raising=False)


@pytest.fixture
def mathmaps_dir() -> Path:
    """The package's own locale data directory."""
    return PACKAGE_MATHMAPS_DIR


@pytest.fixture
def embedded_assets(mathmaps_dir: Path) -> MappingAssets:
    """In-memory copy of every shipped locale file plus the manifest."""
    return MappingAssets.from_directory(mathmaps_dir)


@pytest.fixture
def manifest_files(mathmaps_dir: Path) -> list[str]:
    return sorted(p.name for p in mathmaps_dir.glob("*.json") if p.name != "manifest.json")


@pytest.fixture
def frozen_config(tmp_path: Path, embedded_assets: MappingAssets) -> RuntimeConfig:
    """Configuration of a self-contained build with no sibling mathmaps."""
    return RuntimeConfig(
        executable=tmp_path / "bin" / "latex2sre",
        frozen=True,
        assets=embedded_assets,
    )


@pytest.fixture
def dev_config(tmp_path: Path) -> RuntimeConfig:
    """Configuration of a plain development install."""
    return RuntimeConfig(executable=tmp_path / "venv" / "bin" / "python")


@pytest.fixture
def make_assets():
    """Factory building embedded assets from file name to text."""

    def build(blobs: dict[str, str]) -> MappingAssets:
        return MappingAssets({asset_name(name): text.encode("utf-8") for name, text in blobs.items()})

    return build
