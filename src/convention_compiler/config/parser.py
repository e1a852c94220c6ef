"""
YAML configuration parser for the Convention Compiler.

This module loads config.yaml from the working directory. When the file is missing,
a default configuration is constructed, written to disk with explanatory comments,
and returned, so every run ends up with a file the user can edit.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import logging
from dataclasses import dataclass

from pydantic import ValidationError

from ..exceptions import ConfigurationError
from ..models.config import CompilerConfig


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")


@dataclass
class ConfigParseResult:
    """
    Result of a load-or-create operation.

    Attributes:
        config: The parsed and validated configuration
        warnings: List of non-fatal warnings
        config_path: Path to the configuration file used
        created: Whether the file was created with defaults during this call
    """
    config: CompilerConfig
    warnings: List[str]
    config_path: Path
    created: bool


class ConfigParser:
    """
    YAML configuration parser with validation and error handling.

    Loads config.yaml into a CompilerConfig, falling back to defaults for any
    missing keys, and persists the defaults when no file exists yet.
    """

    SECTION_COMMENTS = [
        ("search_root", "Base directory scanned for target project directories"),
        ("fuzzy_search", "Directory picker options (max_depth levels, max_children per subdirectory)"),
    ]

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_or_create(self, config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
        """
        Load configuration from file, creating the file with defaults if absent.

        Args:
            config_path: Path to the configuration file. Defaults to ./config.yaml.

        Returns:
            ConfigParseResult containing the configuration and metadata

        Raises:
            ConfigurationError: If the file is invalid or cannot be read or written
        """
        config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

        if config_path.exists():
            config_data = self._load_yaml_file(config_path)
            config = self._build_config(config_data, config_path)
            created = False
            self.logger.info(f"Configuration loaded from {config_path}")
        else:
            config = CompilerConfig()
            self.save_config(config, config_path)
            created = True
            self.logger.info(f"Created default configuration at {config_path}")

        return ConfigParseResult(
            config=config,
            warnings=config.validate_configuration(),
            config_path=config_path,
            created=created
        )

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load and parse YAML file.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed YAML data as dictionary

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()

            if not content.strip():
                self.logger.warning(f"Configuration file is empty: {file_path}")
                return {}

            data = yaml.safe_load(content)

            # Comment-only documents parse to None
            if data is None:
                return {}

            if not isinstance(data, dict):
                raise ConfigurationError(f"Configuration file must contain a YAML object, got {type(data).__name__}")

            return data

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

    def _build_config(self, config_data: Dict[str, Any], config_path: Path) -> CompilerConfig:
        """
        Validate raw configuration data, filling in defaults for missing keys.

        Raises:
            ConfigurationError: If a value fails validation
        """
        try:
            return CompilerConfig.from_dict(config_data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            )
            raise ConfigurationError(f"Invalid configuration in {config_path}: {problems}") from e

    def save_config(self, config: CompilerConfig, output_path: Union[str, Path]) -> None:
        """
        Save configuration to YAML file.

        Args:
            config: Configuration to save
            output_path: Path where to save the configuration

        Raises:
            ConfigurationError: If file cannot be written
        """
        try:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)

            yaml_content = self._generate_yaml_with_comments(config.to_dict())

            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(yaml_content)

            self.logger.info(f"Configuration saved to {output_path}")

        except OSError as e:
            raise ConfigurationError(f"Cannot write configuration file {output_path}: {e}") from e

    def _generate_yaml_with_comments(self, config_dict: Dict[str, Any]) -> str:
        """
        Generate YAML content with helpful comments.

        Args:
            config_dict: Configuration dictionary

        Returns:
            YAML content with comments
        """
        lines = [
            "# Convention Compiler Configuration",
            "# Controls where target project directories are searched for",
            "",
        ]

        for section_name, comment in self.SECTION_COMMENTS:
            if section_name in config_dict:
                lines.append(f"# {comment}")
                section_yaml = yaml.dump({section_name: config_dict[section_name]},
                                         default_flow_style=False,
                                         sort_keys=False)
                lines.append(section_yaml.rstrip())
                lines.append("")

        return "\n".join(lines)


def load_or_create_config(config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
    """
    Convenience function to load or initialize the configuration.

    Args:
        config_path: Path to configuration file (optional)

    Returns:
        ConfigParseResult containing parsed configuration

    Raises:
        ConfigurationError: If configuration is invalid
    """
    parser = ConfigParser()
    return parser.load_or_create(config_path)
