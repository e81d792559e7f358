"""Tests for YAML defaults and CLI argument merging."""
from __future__ import annotations

import pytest

from guess_exercise.app import parse_args
from guess_exercise.config import AppConfig, coerce_source, config_keys, load_config_file


def _write(tmp_path, text: str):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfigFile:
    def test_reads_mapping(self, tmp_path):
        path = _write(tmp_path, "stride: 30\nkeypoint_conf: 0.4\n")
        assert load_config_file(path) == {"stride": 30, "keypoint_conf": 0.4}

    def test_accepts_hyphenated_keys(self, tmp_path):
        path = _write(tmp_path, "relay-url: http://localhost:3002/api/detectionpose\n")
        assert load_config_file(path) == {"relay_url": "http://localhost:3002/api/detectionpose"}

    def test_empty_file(self, tmp_path):
        assert load_config_file(_write(tmp_path, "")) == {}

    def test_unknown_key(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown config key"):
            load_config_file(_write(tmp_path, "strides: 3\n"))

    def test_non_mapping_root(self, tmp_path):
        with pytest.raises(ValueError, match="mapping"):
            load_config_file(_write(tmp_path, "- 1\n- 2\n"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config_file(tmp_path / "missing.yaml")


class TestParseArgs:
    def test_defaults(self):
        assert parse_args([]) == AppConfig()

    def test_cli_flags(self):
        config = parse_args(["--stride", "10", "--relay-url", "http://x/api", "--flip-y", "--no-preview"])
        assert config.stride == 10
        assert config.relay_url == "http://x/api"
        assert config.flip_y is True
        assert config.no_preview is True
        assert config.no_log is False

    def test_cli_overrides_file(self, tmp_path):
        path = _write(tmp_path, "stride: 30\nfps: 25\nflip_y: true\n")
        config = parse_args(["--config", str(path), "--stride", "5", "--no-flip-y"])
        assert config.stride == 5
        assert config.fps == 25
        assert config.flip_y is False
        assert config.imgsz == AppConfig().imgsz


def test_config_keys_match_fields():
    keys = config_keys()
    assert "relay_url" in keys
    assert "config" not in keys


def test_coerce_source():
    assert coerce_source("0") == 0
    assert coerce_source(" 2 ") == 2
    assert coerce_source("/dev/video0") == "/dev/video0"
