"""
Configuration for htaguard.

Supports configuration via:
1. Environment variables (highest priority)
2. TOML config file (htaguard.toml)
3. Default values (lowest priority)

Environment variables:
- HTAGUARD_CONFIG_FILE: Path to TOML config file
- HTAGUARD_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
- HTAGUARD_STRUCTURED_LOGGING: Emit JSON log lines (true/false)
- HTAGUARD_MAX_INPUT_BYTES: Maximum raw tree payload size in bytes
- HTAGUARD_MAX_NODES: Maximum node count accepted by the input gate
- HTAGUARD_MAX_DEPTH: Maximum tree depth accepted by the input gate

Example htaguard.toml:

    [logging]
    level = "DEBUG"
    structured = false

    [thresholds]
    max_depth = 5
    long_task_hours = 24

    [limits]
    max_nodes = 2000
"""

import os
import logging
from dataclasses import dataclass, field
from importlib.metadata import version as get_package_version, PackageNotFoundError
from pathlib import Path
from typing import Optional, Dict, Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from htaguard.core.security import MAX_INPUT_SIZE, MAX_NODE_COUNT, MAX_TREE_DEPTH


logger = logging.getLogger(__name__)


def _get_version() -> str:
    """Get package version from metadata (single source of truth: pyproject.toml)."""
    try:
        return get_package_version("htaguard")
    except PackageNotFoundError:
        return "0.3.0"  # Fallback for dev without install


_PACKAGE_VERSION = _get_version()


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


@dataclass
class ValidationThresholds:
    """Rule thresholds used by the validation passes.

    Attributes:
        max_depth: Sibling groups deeper than this raise EXCESSIVE_DEPTH
        max_children: Nodes with more children raise TOO_MANY_CHILDREN
        max_title_length: Longer titles raise LONG_TITLE
        min_title_length: Shorter titles raise SHORT_TITLE
        large_estimate_hours: Larger estimates raise LARGE_ESTIMATE
        long_task_hours: Leaf tasks above this raise LONG_TASK
        min_estimate_completeness: Ratio of estimated nodes below which
            INCOMPLETE_ESTIMATES is raised
        min_description_completeness: Ratio of described nodes below which
            INCOMPLETE_DESCRIPTIONS is raised
        large_project_hours: Total leaf hours above this raise LARGE_PROJECT;
            also the upper bound of the feasibility metric's scaled range
        breakdown_ratio: Children's estimate sum above this multiple of the
            parent's estimate raises UNREALISTIC_BREAKDOWN
    """

    max_depth: int = 6
    max_children: int = 8
    max_title_length: int = 100
    min_title_length: int = 5
    large_estimate_hours: float = 1000
    long_task_hours: float = 40
    min_estimate_completeness: float = 0.7
    min_description_completeness: float = 0.5
    large_project_hours: float = 2000
    breakdown_ratio: float = 3.0

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "ValidationThresholds":
        """Create thresholds from TOML dict (typically [thresholds] section).

        Args:
            data: Dict from TOML parsing

        Returns:
            ValidationThresholds instance
        """
        defaults = cls()
        return cls(
            max_depth=int(data.get("max_depth", defaults.max_depth)),
            max_children=int(data.get("max_children", defaults.max_children)),
            max_title_length=int(
                data.get("max_title_length", defaults.max_title_length)
            ),
            min_title_length=int(
                data.get("min_title_length", defaults.min_title_length)
            ),
            large_estimate_hours=float(
                data.get("large_estimate_hours", defaults.large_estimate_hours)
            ),
            long_task_hours=float(
                data.get("long_task_hours", defaults.long_task_hours)
            ),
            min_estimate_completeness=float(
                data.get(
                    "min_estimate_completeness", defaults.min_estimate_completeness
                )
            ),
            min_description_completeness=float(
                data.get(
                    "min_description_completeness",
                    defaults.min_description_completeness,
                )
            ),
            large_project_hours=float(
                data.get("large_project_hours", defaults.large_project_hours)
            ),
            breakdown_ratio=float(
                data.get("breakdown_ratio", defaults.breakdown_ratio)
            ),
        )


@dataclass
class LimitsConfig:
    """Input gate limits applied before validation.

    Attributes:
        max_input_bytes: Maximum raw JSON payload size
        max_nodes: Maximum node count in one forest
        max_depth: Maximum root-to-leaf depth
    """

    max_input_bytes: int = MAX_INPUT_SIZE
    max_nodes: int = MAX_NODE_COUNT
    max_depth: int = MAX_TREE_DEPTH

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "LimitsConfig":
        """Create limits from TOML dict (typically [limits] section)."""
        return cls(
            max_input_bytes=int(data.get("max_input_bytes", MAX_INPUT_SIZE)),
            max_nodes=int(data.get("max_nodes", MAX_NODE_COUNT)),
            max_depth=int(data.get("max_depth", MAX_TREE_DEPTH)),
        )


@dataclass
class HtaGuardConfig:
    """htaguard configuration with support for env vars and TOML overrides."""

    # Logging configuration
    log_level: str = "INFO"
    structured_logging: bool = True

    # Rule thresholds
    thresholds: ValidationThresholds = field(default_factory=ValidationThresholds)

    # Input gate limits
    limits: LimitsConfig = field(default_factory=LimitsConfig)

    name: str = "htaguard"
    version: str = field(default_factory=lambda: _PACKAGE_VERSION)

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "HtaGuardConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. TOML config file
        3. Default values
        """
        config = cls()

        # Load TOML config if available
        toml_path = config_file or os.environ.get("HTAGUARD_CONFIG_FILE")
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            # Try default locations
            for default_path in ["htaguard.toml", ".htaguard.toml"]:
                if Path(default_path).exists():
                    config._load_toml(Path(default_path))
                    break

        # Override with environment variables
        config._load_env()

        return config

    def _load_toml(self, path: Path) -> None:
        """Load configuration from TOML file."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)

            # Logging settings
            if "logging" in data:
                log = data["logging"]
                if "level" in log:
                    self.log_level = str(log["level"]).upper()
                if "structured" in log:
                    self.structured_logging = _parse_bool(log["structured"])

            # Rule thresholds
            if "thresholds" in data:
                self.thresholds = ValidationThresholds.from_toml_dict(
                    data["thresholds"]
                )

            # Input gate limits
            if "limits" in data:
                self.limits = LimitsConfig.from_toml_dict(data["limits"])

        except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
            logger.error(f"Error loading config file {path}: {e}")

    def _load_env(self) -> None:
        """Load configuration from environment variables."""
        # Log level
        if level := os.environ.get("HTAGUARD_LOG_LEVEL"):
            self.log_level = level.upper()

        if structured := os.environ.get("HTAGUARD_STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(structured)

        # Input gate limits
        if max_bytes := os.environ.get("HTAGUARD_MAX_INPUT_BYTES"):
            try:
                self.limits.max_input_bytes = int(max_bytes)
            except ValueError:
                pass
        if max_nodes := os.environ.get("HTAGUARD_MAX_NODES"):
            try:
                self.limits.max_nodes = int(max_nodes)
            except ValueError:
                pass
        if max_depth := os.environ.get("HTAGUARD_MAX_DEPTH"):
            try:
                self.limits.max_depth = int(max_depth)
            except ValueError:
                pass

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        from htaguard.core.logging_config import configure_logging

        configure_logging(
            level=getattr(logging, self.log_level, logging.INFO),
            format="structured" if self.structured_logging else "human",
        )


# Global configuration instance
_config: Optional[HtaGuardConfig] = None


def get_config() -> HtaGuardConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = HtaGuardConfig.from_env()
    return _config


def set_config(config: HtaGuardConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
