#!/usr/bin/env python3
"""
Tests for configuration loading and validation
"""

import os
import json
import pytest
import yaml

from crbh.config import ConfigManager, ConfigSchema, DEFAULT_CONFIG


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("CRBH_"):
            monkeypatch.delenv(key)


class TestConfigManager:

    def test_defaults(self):
        manager = ConfigManager()
        assert manager.get('search.evalue') == 1e-5
        assert manager.get('search.max_target_seqs') == 50
        assert manager.get('curve.min_length') == 10
        assert manager.get_tool_path('makeblastdb') == "makeblastdb"
        assert manager.get_path('output_file') == "reciprocal_hits.txt"
        assert manager.get_path('working_dir', "/tmp") == "/tmp"
        assert manager.errors == []

    def test_missing_key_returns_default(self):
        manager = ConfigManager()
        assert manager.get('search.nothing', 3) == 3
        assert manager.get('search.evalue.deeper', 'x') == 'x'

    def test_yaml_file_merges_with_defaults(self, tmp_path):
        path = tmp_path / "crbh.yml"
        path.write_text(yaml.safe_dump({'search': {'threads': 8}}))

        manager = ConfigManager(str(path))

        assert manager.get('search.threads') == 8
        assert manager.get('search.evalue') == 1e-5

    def test_defaults_not_mutated(self, tmp_path):
        path = tmp_path / "crbh.yml"
        path.write_text(yaml.safe_dump({'search': {'threads': 16}}))
        ConfigManager(str(path))
        assert DEFAULT_CONFIG['search']['threads'] == 1

    def test_json_file(self, tmp_path):
        path = tmp_path / "crbh.json"
        path.write_text(json.dumps({'curve': {'window_fraction': 0.2}}))
        assert ConfigManager(str(path)).get('curve.window_fraction') == 0.2

    def test_local_overlay(self, tmp_path):
        (tmp_path / "crbh.yml").write_text(yaml.safe_dump({'search': {'threads': 2, 'evalue': 1e-3}}))
        (tmp_path / "crbh.local.yml").write_text(yaml.safe_dump({'search': {'threads': 6}}))

        manager = ConfigManager(str(tmp_path / "crbh.yml"))

        assert manager.get('search.threads') == 6
        assert manager.get('search.evalue') == 1e-3

    def test_environment_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "crbh.yml"
        path.write_text(yaml.safe_dump({'search': {'threads': 2}}))
        monkeypatch.setenv("CRBH_SEARCH__THREADS", "12")
        monkeypatch.setenv("CRBH_SEARCH__EVALUE", "1e-10")
        monkeypatch.setenv("CRBH_PATHS__WORKING_DIR", "/scratch/crbh")

        manager = ConfigManager(str(path))

        assert manager.get('search.threads') == 12
        assert manager.get('search.evalue') == 1e-10
        assert manager.get_path('working_dir') == "/scratch/crbh"

    def test_unreadable_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "broken.yml"
        path.write_text("search: [unclosed")
        assert ConfigManager(str(path)).get('search.threads') == 1

    def test_missing_file_keeps_defaults(self, tmp_path):
        assert ConfigManager(str(tmp_path / "absent.yml")).get('search.threads') == 1

    def test_invalid_type_reported(self, tmp_path):
        path = tmp_path / "crbh.yml"
        path.write_text(yaml.safe_dump({'search': {'threads': 'many'}}))
        manager = ConfigManager(str(path))
        assert any("search.threads" in error for error in manager.errors)


class TestConfigSchema:

    def test_defaults_are_valid(self):
        assert ConfigSchema.validate(DEFAULT_CONFIG) == []

    def test_missing_section(self):
        config = {key: value for key, value in DEFAULT_CONFIG.items() if key != 'tools'}
        errors = ConfigSchema.validate(config)
        assert "Missing required configuration section: tools" in errors

    def test_missing_field(self):
        config = {**DEFAULT_CONFIG, 'search': {'threads': 1}}
        errors = ConfigSchema.validate(config)
        assert "Missing required configuration field: search.evalue" in errors

    def test_bool_is_not_a_number(self):
        config = {**DEFAULT_CONFIG, 'search': {'evalue': True, 'threads': 1}}
        errors = ConfigSchema.validate(config)
        assert any(error.startswith("Invalid type for search.evalue") for error in errors)
