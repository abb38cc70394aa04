"""
Tests for configuration module.
"""

import pytest
from pathlib import Path

from loguru import logger

from tapboard.utils.config import (
    TapBoardConfig,
    KeyboardMetrics,
    LearnConfig,
    TessellationConfig,
    MorphConfig,
    load_config,
)
from tapboard.utils.logger import setup_logger


class TestKeyboardMetrics:
    """Tests for KeyboardMetrics."""

    def test_default_metrics(self):
        """Test default key metrics."""
        metrics = KeyboardMetrics()
        assert metrics.min_key_width == 20.0
        assert metrics.min_key_height == 36.0
        assert metrics.key_spacing == 4.0


class TestTapBoardConfig:
    """Tests for main TapBoardConfig."""

    def test_default_config(self):
        """Test default configuration."""
        config = TapBoardConfig()
        assert isinstance(config.metrics, KeyboardMetrics)
        assert isinstance(config.learn, LearnConfig)
        assert isinstance(config.tessellation, TessellationConfig)
        assert isinstance(config.morph, MorphConfig)
        assert config.learn.total_iterations == 3
        assert config.learn.training_phrase == "the quick brown fox jumps over the lazy dog"
        assert config.tessellation.strategy == "sweep"
        assert config.layout_path is None

    def test_nested_dicts_are_converted(self):
        """Test that nested dicts become dataclasses."""
        config = TapBoardConfig(learn={"training_phrase": "ab", "total_iterations": 2})
        assert isinstance(config.learn, LearnConfig)
        assert config.learn.training_phrase == "ab"

    def test_unknown_strategy_raises_error(self):
        """Test that unknown tessellation strategies are rejected."""
        with pytest.raises(ValueError):
            TapBoardConfig(tessellation=TessellationConfig(strategy="delaunay"))

    def test_invalid_iterations_raises_error(self):
        """Test that fewer than one iteration is rejected."""
        with pytest.raises(ValueError):
            TapBoardConfig(learn=LearnConfig(total_iterations=0))

    def test_invalid_morph_step_raises_error(self):
        """Test that a non-positive morph step is rejected."""
        with pytest.raises(ValueError):
            TapBoardConfig(morph=MorphConfig(step=0))

    def test_save_and_load_yaml(self, temp_dir):
        """Test saving and loading configuration from YAML."""
        config = TapBoardConfig(
            tessellation=TessellationConfig(strategy="dense", width=320.0),
            layout_path="layouts/user.json",
        )
        config_path = Path(temp_dir) / "config.yaml"

        config.to_yaml(str(config_path))
        assert config_path.exists()

        loaded = TapBoardConfig.from_yaml(str(config_path))
        assert loaded.tessellation.strategy == "dense"
        assert loaded.tessellation.width == 320.0
        assert loaded.layout_path == "layouts/user.json"
        assert loaded.metrics == config.metrics

    def test_load_nonexistent_file(self):
        """Test loading from non-existent file raises error."""
        with pytest.raises(FileNotFoundError):
            TapBoardConfig.from_yaml("nonexistent.yaml")

    def test_load_empty_file(self, temp_dir):
        """Test loading an empty file raises error."""
        config_path = Path(temp_dir) / "empty.yaml"
        config_path.write_text("")
        with pytest.raises(ValueError):
            TapBoardConfig.from_yaml(str(config_path))

    def test_load_unknown_key(self, temp_dir):
        """Test that unknown keys raise ValueError."""
        config_path = Path(temp_dir) / "bad.yaml"
        config_path.write_text("colors: {a: red}\n")
        with pytest.raises(ValueError):
            TapBoardConfig.from_yaml(str(config_path))

    def test_load_config_defaults(self):
        """Test load_config without a path returns defaults."""
        assert load_config() == TapBoardConfig()

    def test_shipped_config_loads(self):
        """Test the bundled configuration file."""
        path = Path(__file__).parent.parent / "configs" / "keyboard_config.yaml"
        config = load_config(str(path))
        assert config.tessellation.strategy == "sweep"
        assert config.layout_path == "results/keyboard_layout.json"


class TestSetupLogger:
    """Tests for setup_logger."""

    def test_invalid_level_raises_error(self, temp_dir):
        """Test that an unknown log level is rejected."""
        with pytest.raises(ValueError):
            setup_logger(log_dir=temp_dir, log_level="VERBOSE")

    def test_file_sink(self, temp_dir):
        """Test that a named log file receives messages."""
        handlers = setup_logger(log_dir=temp_dir, log_level="debug", log_file="session.log")
        logger.debug("layout rebuilt")
        for handler in handlers:
            logger.remove(handler)

        assert len(handlers) == 2
        assert "layout rebuilt" in (Path(temp_dir) / "session.log").read_text()

    def test_console_only(self):
        """Test that no file sink is added without a directory."""
        handlers = setup_logger(log_dir=None)
        for handler in handlers:
            logger.remove(handler)
        assert len(handlers) == 1
