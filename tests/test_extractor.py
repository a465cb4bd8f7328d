"""Unit tests for AssetExtractor."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from latex2sre.assets import MappingAssets
from latex2sre.config import RuntimeConfig
from latex2sre.errors import ExtractionError
from latex2sre.extractor import AssetExtractor, read_manifest


@pytest.fixture
def mkdtemp_calls(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Record every temporary directory the extractor creates."""
    calls: list[str] = []
    real_mkdtemp = tempfile.mkdtemp

    def spy(*args, **kwargs):
        path = real_mkdtemp(*args, **kwargs)
        calls.append(path)
        return path

    monkeypatch.setattr(tempfile, "mkdtemp", spy)
    return calls


class TestReadManifest:
    """Tests for read_manifest."""

    def test_lists_shipped_files(self, embedded_assets, manifest_files: list[str]) -> None:
        assert sorted(read_manifest(embedded_assets)) == manifest_files

    def test_missing_manifest(self, make_assets) -> None:
        with pytest.raises(ExtractionError, match="not found"):
            read_manifest(make_assets({"en.json": "{}"}))

    def test_malformed_manifest(self, make_assets) -> None:
        with pytest.raises(ExtractionError, match="not valid JSON"):
            read_manifest(make_assets({"manifest.json": "{files:"}))

    def test_manifest_without_files_list(self, make_assets) -> None:
        with pytest.raises(ExtractionError, match="'files'"):
            read_manifest(make_assets({"manifest.json": json.dumps({"files": "en.json"})}))

    def test_undecodable_manifest(self) -> None:
        with pytest.raises(ExtractionError, match="could not be read"):
            read_manifest(MappingAssets({"mathmaps/manifest.json": b'{"files": ["\xff"]}'}))


class TestEnsureExtracted:
    """Tests for AssetExtractor.ensure_extracted."""

    def test_extracts_every_manifest_file(
        self, frozen_config: RuntimeConfig, mathmaps_dir: Path, manifest_files: list[str]
    ) -> None:
        extractor = AssetExtractor(frozen_config)
        dest = extractor.ensure_extracted()

        assert dest.name == "mathmaps"
        assert dest.parent.name.startswith("latex2sre-")
        assert sorted(p.name for p in dest.iterdir()) == manifest_files
        for name in manifest_files:
            assert (dest / name).read_bytes() == (mathmaps_dir / name).read_bytes()
        assert extractor.extracted_count == len(manifest_files)
        assert frozen_config.state.path == dest
        assert frozen_config.state.source == "extracted"

    def test_idempotent(self, frozen_config: RuntimeConfig, mkdtemp_calls: list[str]) -> None:
        extractor = AssetExtractor(frozen_config)
        first = extractor.ensure_extracted()
        second = extractor.ensure_extracted()
        again = AssetExtractor(frozen_config).ensure_extracted()

        assert first == second == again
        assert len(mkdtemp_calls) == 1

    def test_existing_path_short_circuits(
        self, tmp_path: Path, frozen_config: RuntimeConfig, mkdtemp_calls: list[str]
    ) -> None:
        frozen_config.state.set(tmp_path, "override")
        assert AssetExtractor(frozen_config).ensure_extracted() == tmp_path
        assert mkdtemp_calls == []

    def test_no_assets_leaves_state_unset(self, dev_config: RuntimeConfig) -> None:
        with pytest.raises(ExtractionError):
            AssetExtractor(dev_config).ensure_extracted()
        assert not dev_config.state.is_set()

    def test_bad_manifest_leaves_state_unset(self, tmp_path: Path, make_assets, mkdtemp_calls: list[str]) -> None:
        config = RuntimeConfig(executable=tmp_path / "latex2sre", frozen=True, assets=make_assets({"en.json": "{}"}))
        with pytest.raises(ExtractionError):
            AssetExtractor(config).ensure_extracted()
        assert not config.state.is_set()
        assert mkdtemp_calls == []

    def test_temp_dir_failure(self, frozen_config: RuntimeConfig, monkeypatch: pytest.MonkeyPatch) -> None:
        def fail(*args, **kwargs):
            raise PermissionError("read-only file system")

        monkeypatch.setattr(tempfile, "mkdtemp", fail)
        with pytest.raises(ExtractionError, match="extraction directory"):
            AssetExtractor(frozen_config).ensure_extracted()
        assert not frozen_config.state.is_set()

    def test_partial_manifest_skips_missing_entries(
        self, tmp_path: Path, make_assets, caplog: pytest.LogCaptureFixture
    ) -> None:
        assets = make_assets({
            "manifest.json": json.dumps({"files": ["base.json", "fr.json", "en.json"]}),
            "base.json": '{"characters": {}}',
            "en.json": '{"locale": "en"}',
        })
        config = RuntimeConfig(executable=tmp_path / "latex2sre", frozen=True, assets=assets)
        extractor = AssetExtractor(config)

        with caplog.at_level("WARNING"):
            dest = extractor.ensure_extracted()

        assert sorted(p.name for p in dest.iterdir()) == ["base.json", "en.json"]
        assert extractor.extracted_count == 2
        assert "fr.json" in caplog.text
