"""CLI configuration.

Provides the resolved configuration for a CLI invocation, leveraging the
shared htaguard.config module.
"""

from typing import Optional

from htaguard.config import (
    HtaGuardConfig,
    LimitsConfig,
    ValidationThresholds,
    get_config,
)


class CLIContext:
    """CLI execution context with resolved configuration.

    Holds the effective configuration for a CLI command, including
    any overrides from command-line options.
    """

    def __init__(
        self,
        config_file: Optional[str] = None,
        config: Optional[HtaGuardConfig] = None,
    ):
        """Initialize CLI context.

        Args:
            config_file: Explicit TOML path from --config.
            config: Optional config instance (uses global if neither is given).
        """
        if config is not None:
            self._config = config
        elif config_file:
            self._config = HtaGuardConfig.from_env(config_file)
        else:
            self._config = get_config()

    @property
    def config(self) -> HtaGuardConfig:
        """Get the underlying configuration."""
        return self._config

    @property
    def thresholds(self) -> ValidationThresholds:
        return self._config.thresholds

    @property
    def limits(self) -> LimitsConfig:
        return self._config.limits


def create_context(config_file: Optional[str] = None) -> CLIContext:
    """Create a CLI context with optional overrides.

    Args:
        config_file: Optional TOML config path.

    Returns:
        Configured CLIContext instance.
    """
    return CLIContext(config_file=config_file)
