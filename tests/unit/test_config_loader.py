"""Tests for ConfigLoader."""

import json

import pytest

from collectionkit.config import ConfigLoader
from collectionkit.core.specifications import ChainSpecifications, ParallelSpec


class TestConfigLoader:
    """Test YAML and JSON loading."""

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "chain.yaml"
        path.write_text(
            "parallel:\n"
            "  workers: 6\n"
            "  chunk_size: 50\n"
            "async:\n"
            "  yield_every: 10\n"
            "log_level: info\n"
        )

        specs = ConfigLoader.from_yaml(path)

        assert specs.parallel.max_workers == 6
        assert specs.parallel.chunk_size == 50
        assert specs.async_.yield_every == 10
        assert specs.log_level == "INFO"

    def test_from_json(self, tmp_path):
        path = tmp_path / "chain.json"
        path.write_text(json.dumps({"parallel": {"max_workers": 2}}))

        specs = ConfigLoader.from_json(path)

        assert specs.parallel.max_workers == 2
        assert specs.async_.yield_every == 0

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert ConfigLoader.from_yaml(path).log_level == "WARNING"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader.from_yaml(tmp_path / "nope.yaml")
        with pytest.raises(FileNotFoundError):
            ConfigLoader.from_json(tmp_path / "nope.json")

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("parallel:\n  workers: 0\n")
        with pytest.raises(ValueError, match="Invalid configuration"):
            ConfigLoader.from_yaml(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("parallel: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            ConfigLoader.from_yaml(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError, match="mapping"):
            ConfigLoader.from_json(path)

    @pytest.mark.parametrize("fmt", ["yaml", "json"])
    def test_save_and_reload(self, tmp_path, fmt):
        specs = ChainSpecifications(
            parallel=ParallelSpec(max_workers=3, chunk_size=11),
            log_level="ERROR",
        )
        path = tmp_path / f"out.{fmt}"

        getattr(ConfigLoader, f"to_{fmt}")(specs, path)
        loaded = getattr(ConfigLoader, f"from_{fmt}")(path)

        assert loaded == specs
