"""
Configuration management for goreplace.

Settings are layered: dataclass defaults, then a config file, then
environment variables. Command line flags are applied last by the CLI.
"""

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml
from rich.console import Console

console = Console(stderr=True)


def default_gopath() -> str:
    """Return $GOPATH, or the Go toolchain default of ~/go when unset."""
    gopath = os.environ.get("GOPATH", "")
    # GOPATH may list several entries; the first one is where sources live
    first = gopath.split(os.pathsep)[0] if gopath else ""
    return first or str(Path.home() / "go")


@dataclass
class ResolverConfig:
    """Where local checkouts of modules are looked up."""

    gopath: str = field(default_factory=default_gopath)
    src_dir: str = "src"

    @property
    def source_root(self) -> Path:
        return Path(self.gopath) / self.src_dir


@dataclass
class SecurityConfig:
    """Input and file size limits."""

    max_input_length: int = 256
    max_file_size_mb: int = 10

    @property
    def max_file_size_bytes(self) -> int:
        """Convert MB to bytes for internal use."""
        return self.max_file_size_mb * 1024 * 1024


@dataclass
class ManifestConfig:
    """Location of the manifest being edited."""

    file_name: str = "go.mod"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    # Diagnostics are opt-in; the console already reports failures
    log_level: str = "CRITICAL"
    enable_json: bool = True


@dataclass
class ComprehensiveConfig:
    """Main configuration containing all subsections."""

    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    manifest: ManifestConfig = field(default_factory=ManifestConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Global configuration instance
_global_config: Optional[ComprehensiveConfig] = None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config_values(config: ComprehensiveConfig) -> List[str]:
    """
    Validate configuration values and return any errors.

    Args:
        config: Configuration to validate

    Returns:
        List[str]: List of validation errors (empty if valid)
    """
    errors = []

    if not config.resolver.gopath:
        errors.append("resolver.gopath must not be empty")
    if not config.resolver.src_dir:
        errors.append("resolver.src_dir must not be empty")

    for key in ("max_input_length", "max_file_size_mb"):
        value = getattr(config.security, key)
        if not _is_int(value) or value <= 0:
            errors.append(f"security.{key} must be positive")

    if not config.manifest.file_name:
        errors.append("manifest.file_name must not be empty")

    log_level = config.logging.log_level
    if not isinstance(log_level, str) or log_level.upper() not in (
        "DEBUG",
        "INFO",
        "WARNING",
        "ERROR",
        "CRITICAL",
    ):
        errors.append(f"logging.log_level is not a known level: {log_level}")

    return errors


def load_config_file(config_path: Path) -> Optional[Dict[str, Any]]:
    """Load config from a TOML or JSON file."""
    if not config_path.exists():
        return None

    try:
        with open(config_path, encoding="utf-8") as f:
            if config_path.suffix.lower() == ".toml":
                return toml.load(f)
            elif config_path.suffix.lower() == ".json":
                return json.load(f)
    except (OSError, ValueError, toml.TomlDecodeError) as e:
        console.print(
            f"⚠️  Error loading config from {config_path}: {e}", style="yellow"
        )

    return None


def find_config_file() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [
        Path.cwd() / ".goreplace.toml",
        Path.cwd() / ".goreplace.json",
        Path.home() / ".config" / "goreplace" / "config.toml",
        Path.home() / ".config" / "goreplace" / "config.json",
    ]

    for location in locations:
        if location.exists():
            return location

    return None


def load_environment_overrides(config: ComprehensiveConfig) -> None:
    """Load environment variable overrides."""

    def get_env_int(key: str, default: Optional[int] = None) -> Optional[int]:
        try:
            return int(os.environ[key]) if key in os.environ else default
        except ValueError:
            console.print(f"⚠️  Invalid integer value for {key}, using default", style="yellow")
            return default

    if gopath := os.environ.get("GOREPLACE_GOPATH"):
        config.resolver.gopath = gopath

    if max_input := get_env_int("GOREPLACE_MAX_INPUT_LENGTH"):
        config.security.max_input_length = max_input
    if max_file_size := get_env_int("GOREPLACE_MAX_FILE_SIZE_MB"):
        config.security.max_file_size_mb = max_file_size

    if manifest := os.environ.get("GOREPLACE_MANIFEST"):
        config.manifest.file_name = manifest

    if log_level := os.environ.get("GOREPLACE_LOG_LEVEL"):
        config.logging.log_level = log_level.upper()


def apply_config_section(
    config: Any, section_data: Dict[str, Any], section_name: str
) -> None:
    """Apply configuration from dictionary to config section."""
    field_types = {f.name: f.type for f in fields(config)}
    for key, value in section_data.items():
        expected = field_types.get(key)
        if expected is None:
            console.print(
                f"⚠️  Unknown config key in {section_name}: {key}", style="yellow"
            )
        elif _matches_type(value, expected):
            setattr(config, key, value)
        else:
            console.print(
                f"⚠️  Invalid type for {section_name}.{key}: expected "
                f"{expected.__name__}, got {type(value).__name__}; using default",
                style="yellow",
            )


def _matches_type(value: Any, expected: type) -> bool:
    if expected is int:
        return _is_int(value)
    return isinstance(value, expected)


def load_config() -> ComprehensiveConfig:
    """Load configuration from file and environment."""
    global _global_config

    if _global_config is not None:
        return _global_config

    config = ComprehensiveConfig()

    config_file = find_config_file()
    if config_file:
        file_config = load_config_file(config_file)
        if isinstance(file_config, dict):
            for section_name in ("resolver", "security", "manifest", "logging"):
                section_data = file_config.get(section_name)
                if isinstance(section_data, dict):
                    apply_config_section(
                        getattr(config, section_name),
                        section_data,
                        section_name,
                    )

    load_environment_overrides(config)

    validation_errors = validate_config_values(config)
    if validation_errors:
        console.print("⚠️  Configuration validation errors:", style="red")
        for error in validation_errors:
            console.print(f"  • {error}", style="red")
        console.print("Using default values for invalid settings.", style="yellow")
        config = _replace_invalid_sections(config, validation_errors)

    _global_config = config
    return config


def _replace_invalid_sections(
    config: ComprehensiveConfig, errors: List[str]
) -> ComprehensiveConfig:
    """Reset every section named in a validation error to its defaults."""
    defaults = ComprehensiveConfig()
    for section_name in {error.split(".", 1)[0] for error in errors}:
        if hasattr(config, section_name):
            setattr(config, section_name, getattr(defaults, section_name))
    return config


def get_config() -> ComprehensiveConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = load_config()
    return _global_config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _global_config
    _global_config = None
