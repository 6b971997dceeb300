"""Tests for build-directory and module-list loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from inline_require.errors import ConfigurationError
from inline_require.sources import RawSource, SourceMapSource
from inline_require.utils import discover_files, load_assets, load_modules


def _write(tmpdir: Path, name: str, content: str) -> Path:
    p = tmpdir / name
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content)
    return p


class TestLoadModules:
    def test_entries_become_modules(self, tmp_path):
        path = _write(tmp_path, "modules.json", json.dumps([
            {"id": "./foo.js", "ident": "./src/foo.js"},
            {"id": 7, "ident": "./node_modules/bar/index.js", "side_effect_free": True},
        ]))
        modules = load_modules(path)

        assert [m.id for m in modules] == ["./foo.js", 7]
        assert modules[0].side_effect_free is None
        assert modules[1].side_effect_free is True

    @pytest.mark.parametrize("flag", ["false", "true", 0, 1])
    def test_non_boolean_flag_is_rejected(self, tmp_path, flag):
        path = _write(tmp_path, "modules.json", json.dumps([
            {"id": "./bar.js", "ident": "./node_modules/bar/index.js", "side_effect_free": flag},
        ]))
        with pytest.raises(ConfigurationError, match="modules.json"):
            load_modules(path)

    def test_non_object_entry_is_rejected(self, tmp_path):
        path = _write(tmp_path, "modules.json", json.dumps(["./foo.js"]))
        with pytest.raises(ConfigurationError, match="must be an object"):
            load_modules(path)


def test_discover_skips_maps(tmp_path):
    _write(tmp_path, "main.js", "1;")
    _write(tmp_path, "main.js.map", "{}")
    _write(tmp_path, "nested/chunk.js", "2;")

    assert [p.name for p in discover_files(tmp_path)] == ["main.js", "chunk.js"]


def test_load_assets_pairs_sidecar_maps(tmp_path):
    _write(tmp_path, "main.js", "1;")
    _write(tmp_path, "main.js.map", json.dumps({"version": 3, "mappings": "AAAA"}))
    _write(tmp_path, "other.js", "2;")

    assets = load_assets(tmp_path)

    assert isinstance(assets["main.js"], SourceMapSource)
    assert assets["main.js"].map()["mappings"] == "AAAA"
    assert isinstance(assets["other.js"], RawSource)
