"""Unit tests for the asset locator strategies."""

from __future__ import annotations

from pathlib import Path

import pytest

from latex2sre.assets import MappingAssets, PackageAssets, detect_embedded_assets
from latex2sre.config import RuntimeConfig
from latex2sre.errors import AssetNotFoundError, ConversionError
from latex2sre.locator import (
    AssetLocator,
    DevelopmentTreeStrategy,
    EmbeddedLoaderStrategy,
    OverridePathStrategy,
    SiblingDirectoryStrategy,
    embedded_loader,
)


class TestStrategies:
    """Each strategy in isolation."""

    def test_override_applies_when_set(self, tmp_path: Path) -> None:
        config = RuntimeConfig(override_path=tmp_path)
        resolution = OverridePathStrategy().try_resolve(config)
        assert resolution.path == tmp_path
        assert resolution.source == "override"

    def test_override_skipped_when_unset(self) -> None:
        assert OverridePathStrategy().try_resolve(RuntimeConfig()) is None

    def test_sibling_found_next_to_executable(self, tmp_path: Path) -> None:
        (tmp_path / "bin" / "mathmaps").mkdir(parents=True)
        config = RuntimeConfig(executable=tmp_path / "bin" / "latex2sre")
        resolution = SiblingDirectoryStrategy().try_resolve(config)
        assert resolution.path == tmp_path / "bin" / "mathmaps"

    def test_sibling_missing(self, tmp_path: Path) -> None:
        config = RuntimeConfig(executable=tmp_path / "bin" / "latex2sre")
        assert SiblingDirectoryStrategy().try_resolve(config) is None

    def test_development_tree_used_when_not_frozen(self, dev_config: RuntimeConfig, mathmaps_dir: Path) -> None:
        resolution = DevelopmentTreeStrategy().try_resolve(dev_config)
        assert resolution.path == mathmaps_dir

    def test_development_tree_skipped_when_frozen(self, frozen_config: RuntimeConfig) -> None:
        assert DevelopmentTreeStrategy().try_resolve(frozen_config) is None

    def test_embedded_loader_reads_assets(self, frozen_config: RuntimeConfig, mathmaps_dir: Path) -> None:
        resolution = EmbeddedLoaderStrategy().try_resolve(frozen_config)
        assert resolution.path is None
        assert resolution.loader("en") == (mathmaps_dir / "en.json").read_text(encoding="utf-8")

    def test_embedded_loader_missing_locale(self, frozen_config: RuntimeConfig) -> None:
        resolution = EmbeddedLoaderStrategy().try_resolve(frozen_config)
        with pytest.raises(AssetNotFoundError):
            resolution.loader("xx")

    def test_embedded_loader_undecodable_locale(self) -> None:
        loader = embedded_loader(MappingAssets({"mathmaps/de.json": b'{"locale": "\xff\xfe"}'}))
        with pytest.raises(ConversionError, match="de could not be read"):
            loader("de")

    def test_embedded_loader_skipped_without_assets(self, dev_config: RuntimeConfig) -> None:
        assert EmbeddedLoaderStrategy().try_resolve(dev_config) is None


class TestAssetLocator:
    """Resolution order of the default strategy chain."""

    def test_override_beats_embedded_assets(self, tmp_path: Path, frozen_config: RuntimeConfig) -> None:
        override = tmp_path / "override"
        override.mkdir()
        frozen_config.override_path = override
        resolution = AssetLocator().resolve(frozen_config)
        assert resolution.source == "override"
        assert resolution.path == override

    def test_sibling_beats_development_tree(self, tmp_path: Path) -> None:
        (tmp_path / "bin" / "mathmaps").mkdir(parents=True)
        config = RuntimeConfig(executable=tmp_path / "bin" / "python")
        assert AssetLocator().resolve(config).source == "sibling"

    def test_development_install_resolves_package_data(self, dev_config: RuntimeConfig) -> None:
        assert AssetLocator().resolve(dev_config).source == "development"

    def test_frozen_build_defers_to_embedded_loader(self, frozen_config: RuntimeConfig) -> None:
        resolution = AssetLocator().resolve(frozen_config)
        assert resolution.source == "embedded"
        assert resolution.loader is not None

    def test_nothing_found_returns_none(self, tmp_path: Path) -> None:
        config = RuntimeConfig(executable=tmp_path / "latex2sre", frozen=True)
        assert AssetLocator().resolve(config) is None

    def test_custom_strategy_order(self, tmp_path: Path, frozen_config: RuntimeConfig) -> None:
        frozen_config.override_path = tmp_path
        locator = AssetLocator([EmbeddedLoaderStrategy(), OverridePathStrategy()])
        assert locator.resolve(frozen_config).source == "embedded"


class TestEmbeddedAssets:
    """Tests for embedded asset access."""

    def test_package_assets_read_shipped_files(self, mathmaps_dir: Path) -> None:
        assets = PackageAssets()
        assert assets.get_asset("mathmaps/en.json") == (mathmaps_dir / "en.json").read_bytes()
        assert assets.get_asset("mathmaps/missing.json") is None

    def test_mapping_assets_from_directory(self, mathmaps_dir: Path) -> None:
        assets = MappingAssets.from_directory(mathmaps_dir)
        assert assets.get_text("mathmaps/manifest.json") is not None
        assert assets.get_asset("en.json") is None

    def test_detect_embedded_assets(self) -> None:
        assert detect_embedded_assets(frozen=False) is None
        assert isinstance(detect_embedded_assets(frozen=True), PackageAssets)
