"""CLI configuration module.

Configuration is read from environment variables; command-line options
override it.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class BuildConfig:
    """CLI configuration container.

    Attributes:
        declaration_path: Path to the TOML build declaration
        output_dir: Directory publications are staged into
        log_level: Name of the logging level for the console handler
    """

    declaration_path: Path
    output_dir: Path
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "BuildConfig":
        """Create configuration from environment variables.

        Environment variables:
            JCONV_DECLARATION: Build declaration path (default: "conventions.toml")
            JCONV_OUTPUT_DIR: Staging directory (default: "build/publications")
            JCONV_LOG_LEVEL: Logging level (default: "WARNING")
        """
        return cls(
            declaration_path=Path(os.getenv("JCONV_DECLARATION", "conventions.toml")),
            output_dir=Path(os.getenv("JCONV_OUTPUT_DIR", "build/publications")),
            log_level=os.getenv("JCONV_LOG_LEVEL", "WARNING").upper(),
        )

    def validate(self) -> None:
        """Validate the configuration.

        Raises:
            ValueError: If a value is not usable.
        """
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Unsupported log level: {self.log_level}")
        if not str(self.declaration_path):
            raise ValueError("JCONV_DECLARATION must not be empty")

    @property
    def logging_level(self) -> int:
        return logging.getLevelName(self.log_level)
