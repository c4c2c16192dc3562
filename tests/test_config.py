"""Tests for configuration loading."""

import pytest
import tempfile
from pathlib import Path
from stats_repository.config import load_config, Config, StoreConfig


def _write_config(text):
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        f.write(text)
        return f.name


def test_load_full_config():
    """Test loading every section."""
    config_path = _write_config("""
store:
  type: postgresql
  host: localhost
  port: 5432
  database: analytics
  user: stats
  password: secret

statistics:
  internal_db_name: stats_schema
  max_allowed_in_element_num_of_delete: 50
  stats_cache_size: 1000

logging:
  level: DEBUG
  structured: true

catalogs:
  internal:
    id: 0
    databases:
      sales:
        id: 10
        tables:
          orders:
            id: 100
            columns:
              amount: DOUBLE
""")

    try:
        config = load_config(config_path)

        # Verify store config
        assert config.store.type == "postgresql"
        assert config.store.config["host"] == "localhost"
        assert config.store.config["port"] == 5432
        assert "type" not in config.store.config

        # Verify statistics config
        assert config.statistics.internal_db_name == "stats_schema"
        assert config.statistics.max_allowed_in_element_num_of_delete == 50
        assert config.statistics.stats_cache_size == 1000
        assert config.statistics.statistic_table == "column_statistics"

        # Verify logging config
        assert config.logging.level == "DEBUG"
        assert config.logging.structured is True

        assert "internal" in config.catalogs
    finally:
        Path(config_path).unlink()


def test_load_empty_config_uses_defaults():
    """Test that an empty file yields the default configuration."""
    config_path = _write_config("")

    try:
        config = load_config(config_path)

        assert config.store.type == "duckdb"
        assert config.store.config["path"] == ":memory:"
        assert config.statistics.max_allowed_in_element_num_of_delete == 100
        assert config.statistics.stats_cache_size == 500000
        assert config.logging.level == "INFO"
        assert config.catalogs == {}
    finally:
        Path(config_path).unlink()


def test_store_type_defaults_to_duckdb():
    config_path = _write_config("""
store:
  path: /tmp/stats.duckdb
""")

    try:
        config = load_config(config_path)

        assert config.store.type == "duckdb"
        assert config.store.config == {"path": "/tmp/stats.duckdb"}
    finally:
        Path(config_path).unlink()


def test_missing_config_file():
    """Test error handling for missing config file."""
    with pytest.raises(FileNotFoundError):
        load_config("nonexistent_config.yaml")


def test_delete_batch_size_must_be_positive():
    config_path = _write_config("""
statistics:
  max_allowed_in_element_num_of_delete: 0
""")

    try:
        with pytest.raises(ValueError):
            load_config(config_path)
    finally:
        Path(config_path).unlink()


def test_unknown_statistics_option_is_rejected():
    config_path = _write_config("""
statistics:
  no_such_option: 1
""")

    try:
        with pytest.raises(TypeError):
            load_config(config_path)
    finally:
        Path(config_path).unlink()


def test_default_config():
    config = Config()

    assert isinstance(config.store, StoreConfig)
    assert config.statistics.histogram_table == "histogram_statistics"
