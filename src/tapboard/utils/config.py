"""
Configuration management for TapBoard.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any
from pathlib import Path
import yaml
from loguru import logger


STRATEGIES = ("sweep", "dense")


@dataclass
class KeyboardMetrics:
    """Physical key metrics, in device points."""

    min_key_width: float = 20.0
    min_key_height: float = 36.0
    key_spacing: float = 4.0
    row_spacing: float = 8.0
    horizontal_margin: float = 4.0


@dataclass
class LearnConfig:
    """Configuration for training sessions."""

    training_phrase: str = "the quick brown fox jumps over the lazy dog"
    total_iterations: int = 3


@dataclass
class TessellationConfig:
    """Configuration for the Voronoi surface."""

    strategy: str = "sweep"  # "sweep" (Fortune) or "dense" (raster oracle)
    width: float = 375.0
    height: float = 216.0
    resolution: float = 1.0
    include_boundary_sites: bool = False
    boundary_margin: float = 0.0


@dataclass
class MorphConfig:
    """Configuration for edge-tap key resizing."""

    edge_threshold: float = 4.0
    step: float = 4.0


@dataclass
class TapBoardConfig:
    """Main configuration class for TapBoard."""

    metrics: KeyboardMetrics = field(default_factory=KeyboardMetrics)
    learn: LearnConfig = field(default_factory=LearnConfig)
    tessellation: TessellationConfig = field(default_factory=TessellationConfig)
    morph: MorphConfig = field(default_factory=MorphConfig)

    # Where learned layouts are written after a session; None disables saving
    layout_path: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.metrics, dict):
            self.metrics = KeyboardMetrics(**self.metrics)
        if isinstance(self.learn, dict):
            self.learn = LearnConfig(**self.learn)
        if isinstance(self.tessellation, dict):
            self.tessellation = TessellationConfig(**self.tessellation)
        if isinstance(self.morph, dict):
            self.morph = MorphConfig(**self.morph)
        self.validate()

    def validate(self) -> None:
        """
        Check value ranges.

        Raises:
            ValueError: If any setting is out of range
        """
        if self.tessellation.strategy not in STRATEGIES:
            raise ValueError(
                f"Unknown tessellation strategy: {self.tessellation.strategy}. "
                f"Must be one of {STRATEGIES}"
            )
        if self.tessellation.width <= 0 or self.tessellation.height <= 0:
            raise ValueError("Tessellation width and height must be positive")
        if self.tessellation.resolution <= 0:
            raise ValueError(f"resolution must be positive, got {self.tessellation.resolution}")
        if self.learn.total_iterations < 1:
            raise ValueError(f"total_iterations must be at least 1, got {self.learn.total_iterations}")
        if not self.learn.training_phrase:
            raise ValueError("training_phrase must not be empty")
        if self.morph.step <= 0:
            raise ValueError(f"morph step must be positive, got {self.morph.step}")

    @classmethod
    def from_yaml(cls, config_path: str) -> "TapBoardConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            TapBoardConfig instance

        Raises:
            FileNotFoundError: If config file does not exist
            ValueError: If config file is invalid
        """
        config_file = Path(config_path)

        if not config_file.exists():
            error_msg = f"Configuration file not found: {config_path}"
            logger.error(error_msg)
            raise FileNotFoundError(error_msg)

        try:
            with open(config_file, 'r') as f:
                config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            error_msg = f"Invalid YAML in configuration file: {e}"
            logger.error(error_msg)
            raise ValueError(error_msg)

        if config_dict is None:
            error_msg = f"Configuration file is empty: {config_path}"
            logger.error(error_msg)
            raise ValueError(error_msg)

        try:
            return cls(**config_dict)
        except TypeError as e:
            error_msg = f"Unknown configuration key in {config_path}: {e}"
            logger.error(error_msg)
            raise ValueError(error_msg)

    def to_dict(self) -> Dict[str, Any]:
        """Return the configuration as plain nested dicts."""
        return asdict(self)

    def to_yaml(self, output_path: str) -> None:
        """
        Save configuration to YAML file.

        Args:
            output_path: Path to save configuration file

        Raises:
            IOError: If file cannot be written
        """
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(output_file, 'w') as f:
                yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

            logger.info(f"Configuration saved to {output_path}")

        except IOError as e:
            error_msg = f"Failed to write configuration file: {e}"
            logger.error(error_msg)
            raise IOError(error_msg)


def load_config(config_path: Optional[str] = None) -> TapBoardConfig:
    """Load configuration from YAML, or return defaults when no path is given."""
    if config_path is None:
        return TapBoardConfig()
    return TapBoardConfig.from_yaml(config_path)
