"""Configuration management for hugo-protector.

Handles loading .hugo-protector.yaml files with directory traversal,
environment variable overrides, and default values.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .crypto import DEFAULT_ITERATIONS, InvalidInputError
from .markdown import CONTENT_FORMATS
from .snippet import MODES, OUTPUT_FORMATS

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".hugo-protector.yaml"
ENV_PASSWORD = "HUGO_PROTECTOR_PASSWORD"
ENV_ITERATIONS = "HUGO_PROTECTOR_ITERATIONS"


@dataclass
class TemplateConfig:
    """Unlock form text passed through shortcode parameters."""

    prompt: str = "Enter password"
    hint: str = ""
    button_text: str = "Unlock"


@dataclass
class ProtectorConfig:
    """Complete hugo-protector configuration."""

    password: str | None = None
    iterations: int = DEFAULT_ITERATIONS
    mode: str = "shortcode"  # "shortcode", "page"
    format: str = "helper"  # "helper", "raw"
    content_format: str = "html"  # "html", "markdown"
    template: TemplateConfig = field(default_factory=TemplateConfig)
    config_path: Path | None = None  # Path where config was loaded from

    def validate(self) -> None:
        """Validate configuration.

        Raises:
            InvalidInputError: If configuration is invalid.
        """
        if self.mode not in MODES:
            raise InvalidInputError(
                f"Invalid mode: {self.mode}. Must be one of: {', '.join(MODES)}"
            )
        if self.format not in OUTPUT_FORMATS:
            raise InvalidInputError(
                f"Invalid format: {self.format}. "
                f"Must be one of: {', '.join(OUTPUT_FORMATS)}"
            )
        if self.content_format not in CONTENT_FORMATS:
            raise InvalidInputError(
                f"Invalid content_format: {self.content_format}. "
                f"Must be one of: {', '.join(CONTENT_FORMATS)}"
            )
        if (
            isinstance(self.iterations, bool)
            or not isinstance(self.iterations, int)
            or self.iterations <= 0
        ):
            raise InvalidInputError("iterations must be a positive integer")


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find .hugo-protector.yaml by traversing up from start_path.

    Args:
        start_path: Directory to start searching from. Defaults to cwd.

    Returns:
        Path to config file if found, None otherwise.
    """
    if start_path is None:
        start_path = Path.cwd()
    else:
        start_path = Path(start_path).resolve()

    # If start_path is a file, use its parent directory
    if start_path.is_file():
        start_path = start_path.parent

    current = start_path
    while True:
        config_path = current / CONFIG_FILENAME
        if config_path.is_file():
            return config_path

        parent = current.parent
        if parent == current:
            return None
        current = parent


def _parse_iterations(value: Any, source: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Invalid iterations in {source}: {value!r}") from e


def load_config(
    config_path: Path | None = None,
    start_path: Path | None = None,
    password_override: str | None = None,
    iterations_override: int | None = None,
) -> ProtectorConfig:
    """Load configuration from file, environment, and overrides.

    Priority (highest to lowest):
    1. Function arguments (password_override, iterations_override)
    2. Environment variables (HUGO_PROTECTOR_PASSWORD, HUGO_PROTECTOR_ITERATIONS)
    3. Config file (.hugo-protector.yaml)
    4. Defaults

    Args:
        config_path: Explicit path to config file. If None, searches.
        start_path: Directory to start config file search from.
        password_override: Override password from CLI argument.
        iterations_override: Override iteration count from CLI argument.

    Returns:
        Loaded and validated configuration.
    """
    config = ProtectorConfig()

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.is_file():
            raise InvalidInputError(f"Config file not found: {config_path}")
    else:
        config_path = find_config_file(start_path)

    if config_path is not None:
        config = _load_config_file(config_path)
        logger.debug("Loaded config from %s", config_path)

    env_password = os.environ.get(ENV_PASSWORD)
    if env_password:
        config.password = env_password

    env_iterations = os.environ.get(ENV_ITERATIONS)
    if env_iterations:
        config.iterations = _parse_iterations(env_iterations, ENV_ITERATIONS)

    if password_override is not None:
        config.password = password_override
    if iterations_override is not None:
        config.iterations = iterations_override

    config.validate()
    return config


def _load_config_file(config_path: Path) -> ProtectorConfig:
    """Load configuration from a YAML file.

    Raises:
        InvalidInputError: If file cannot be read or parsed.
    """
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise InvalidInputError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise InvalidInputError(f"Cannot read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidInputError(f"Config file {config_path} must contain a mapping")

    config = ProtectorConfig(config_path=config_path)

    if data.get("password") is not None:
        config.password = str(data["password"])
    if "iterations" in data:
        config.iterations = _parse_iterations(data["iterations"], str(config_path))

    config.mode = str(data.get("mode", config.mode))
    config.format = str(data.get("format", config.format))
    config.content_format = str(data.get("content_format", config.content_format))

    if "template" in data and isinstance(data["template"], dict):
        template_data = data["template"]
        config.template = TemplateConfig(
            prompt=str(template_data.get("prompt", config.template.prompt)),
            hint=str(template_data.get("hint", config.template.hint) or ""),
            button_text=str(
                template_data.get("button_text", config.template.button_text)
            ),
        )

    return config


def create_default_config(path: Path | None = None) -> Path:
    """Create a default .hugo-protector.yaml config file.

    Args:
        path: Directory to create config in. Defaults to cwd.

    Returns:
        Path to created config file.

    Raises:
        InvalidInputError: If file already exists or cannot be written.
    """
    path = Path.cwd() if path is None else Path(path)
    config_path = path / CONFIG_FILENAME

    if config_path.exists():
        raise InvalidInputError(f"Config file already exists: {config_path}")

    config_content = f'''# hugo-protector configuration
# WARNING: Add this file to .gitignore - it contains your password!

# Password for encryption (or use {ENV_PASSWORD} env var)
password: "your-strong-passphrase"

# PBKDF2 iterations stored in every payload (or {ENV_ITERATIONS})
iterations: {DEFAULT_ITERATIONS}

# Output defaults for 'hugo-protector encrypt'
mode: "shortcode"        # "shortcode", "page"
format: "helper"         # "helper", "raw"
content_format: "html"   # "html", "markdown"

# Unlock form text (emitted as shortcode parameters)
template:
  prompt: "Enter password"
  hint: ""
  button_text: "Unlock"
'''

    try:
        config_path.write_text(config_content)
    except OSError as e:
        raise InvalidInputError(f"Cannot write config file: {e}") from e

    return config_path


def config_to_dict(config: ProtectorConfig) -> dict[str, Any]:
    """Convert config to dictionary for display.

    Note: The password is masked.
    """
    return {
        "password": "********" if config.password else None,
        "iterations": config.iterations,
        "mode": config.mode,
        "format": config.format,
        "content_format": config.content_format,
        "template": {
            "prompt": config.template.prompt,
            "hint": config.template.hint,
            "button_text": config.template.button_text,
        },
        "config_path": str(config.config_path) if config.config_path else None,
    }
