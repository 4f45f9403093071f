"""Configuration management for SubScalpel."""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from subscalpel.exceptions import ConfigError


def _validate_language_codes(codes: List[str]) -> List[str]:
    for code in codes:
        if len(code) not in (2, 3):
            raise ValueError(
                f"Invalid language code '{code}': must be 2 or 3 characters"
            )
    return codes


class Profile(BaseModel):
    """Named set of selection and output settings."""

    languages: List[str] = Field(default_factory=list, description="Language selection")
    exclusions: List[str] = Field(default_factory=list, description="Exclusion tokens")
    output_template: Optional[str] = Field(default=None, description="Filename template")
    output_dir: Optional[str] = Field(default=None, description="Output directory")

    @field_validator("languages")
    @classmethod
    def validate_languages(cls, v: List[str]) -> List[str]:
        """Validate language codes."""
        return _validate_language_codes(v)


class ProcessingConfig(BaseModel):
    """Processing configuration."""

    max_workers: int = Field(default=4, ge=1, description="Maximum concurrent files in batch mode")
    remux_first: bool = Field(
        default=True, description="Mux selected tracks into a temporary .mks before extracting"
    )
    keep_temp_files: bool = Field(default=False, description="Keep the temporary .mks file")
    timeout_seconds: Optional[int] = Field(
        default=None, description="Timeout for external tools (None waits indefinitely)"
    )


class ToolsConfig(BaseModel):
    """External tool executables."""

    mkvmerge: str = Field(default="mkvmerge", description="mkvmerge executable")
    mkvextract: str = Field(default="mkvextract", description="mkvextract executable")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    format: str = Field(default="text", description="Log format (json or text)")
    level: str = Field(default="warning", description="Log level")
    output: Optional[str] = Field(default=None, description="Optional log file path")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        if v.lower() not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError("Invalid log level")
        return v.lower()


class AppliedConfig(BaseModel):
    """Effective settings after applying a profile and CLI flags."""

    languages: List[str] = Field(default_factory=list)
    exclusions: List[str] = Field(default_factory=list)
    output_template: Optional[str] = None
    output_dir: Optional[str] = None

    def merge_with_cli(
        self,
        languages: Optional[List[str]] = None,
        exclusions: Optional[List[str]] = None,
        output_template: Optional[str] = None,
        output_dir: Optional[str] = None,
    ) -> "AppliedConfig":
        """Merge CLI values over this configuration.

        CLI values win whenever they are set.

        Args:
            languages: Selection tokens from the command line
            exclusions: Exclusion tokens from the command line
            output_template: Filename template from the command line
            output_dir: Output directory from the command line

        Returns:
            New AppliedConfig instance
        """
        return AppliedConfig(
            languages=languages or self.languages,
            exclusions=exclusions or self.exclusions,
            output_template=output_template or self.output_template,
            output_dir=output_dir or self.output_dir,
        )


class Config(BaseModel):
    """Main configuration model."""

    default_languages: List[str] = Field(
        default_factory=list, description="Default selection languages"
    )
    exclusions: List[str] = Field(default_factory=list, description="Default exclusion tokens")
    output_template: Optional[str] = Field(default=None, description="Default filename template")
    output_dir: Optional[str] = Field(default=None, description="Default output directory")
    profiles: Dict[str, Profile] = Field(default_factory=dict, description="Named profiles")
    processing: ProcessingConfig = Field(
        default_factory=ProcessingConfig, description="Processing configuration"
    )
    tools: ToolsConfig = Field(default_factory=ToolsConfig, description="External tools")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")

    @field_validator("default_languages")
    @classmethod
    def validate_default_languages(cls, v: List[str]) -> List[str]:
        """Validate default language codes."""
        return _validate_language_codes(v)

    @field_validator("profiles")
    @classmethod
    def validate_profile_names(cls, v: Dict[str, Profile]) -> Dict[str, Profile]:
        """Reject empty profile names."""
        if any(not name for name in v):
            raise ValueError("Profile name cannot be empty")
        return v

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}

        # Substitute environment variables
        raw_config = cls._substitute_env_vars(raw_config)

        return cls(**raw_config)

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """Recursively substitute environment variables in configuration.

        Replaces ${VAR_NAME} with os.environ['VAR_NAME'].

        Args:
            obj: Configuration object (dict, list, str, etc.)

        Returns:
            Object with environment variables substituted
        """
        if isinstance(obj, dict):
            return {key: Config._substitute_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [Config._substitute_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            pattern = r"\$\{([^}]+)\}"

            def replace_var(match):
                var_name = match.group(1)
                value = os.environ.get(var_name)
                if value is None:
                    raise ValueError(
                        f"Environment variable '{var_name}' not found "
                        f"(referenced in configuration)"
                    )
                return value

            return re.sub(pattern, replace_var, obj)
        else:
            return obj

    @classmethod
    def from_defaults(cls) -> "Config":
        """Create configuration with default values."""
        return cls()

    def apply_defaults(self) -> AppliedConfig:
        """Return the top-level settings as an applied configuration."""
        return AppliedConfig(
            languages=list(self.default_languages),
            exclusions=list(self.exclusions),
            output_template=self.output_template,
            output_dir=self.output_dir,
        )

    def apply_profile(self, name: str) -> AppliedConfig:
        """Merge a named profile over the top-level settings.

        Args:
            name: Profile name

        Returns:
            AppliedConfig with profile values taking precedence

        Raises:
            ConfigError: If the profile doesn't exist
        """
        profile = self.profiles.get(name)
        if profile is None:
            raise ConfigError(f"Profile '{name}' not found in configuration")

        applied = self.apply_defaults()
        return AppliedConfig(
            languages=profile.languages or applied.languages,
            exclusions=profile.exclusions or applied.exclusions,
            output_template=profile.output_template or applied.output_template,
            output_dir=profile.output_dir or applied.output_dir,
        )


def load_config(path: Optional[str | Path] = None) -> Config:
    """Load configuration from file or use defaults.

    Args:
        path: Optional path to configuration file. If None, uses defaults.

    Returns:
        Config instance

    Raises:
        ConfigError: If the file is missing, malformed, or invalid
    """
    if path is None:
        return Config.from_defaults()

    try:
        return Config.from_yaml(path)
    except (OSError, yaml.YAMLError, ValidationError, ValueError) as e:
        raise ConfigError(f"Failed to load configuration from {path}", details=str(e)) from e
