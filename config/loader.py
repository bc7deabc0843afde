"""Configuration file loader and settings store.

Reads the typed host sections of the INI file into ``Config`` and gives translation endpoints
get-or-create access to their own sections. Created and corrected settings are written back
to the same file.
"""

from __future__ import annotations

import ast
import configparser
from configparser import ConfigParser
from dataclasses import fields
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from models.config_models import Config
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable
    from dataclasses import Field as DataclassField

    from core.trans.context import SettingT

__all__: list[str] = [
    "Config",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigLoaderError",
    "ConfigTypeError",
    "ConfigValueError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

ALLOWED_TRANSLATION_ENGINES: Final[list[str]] = ["claude"]


class ConfigLoaderError(Exception):
    """An error occurred while processing the configuration file."""


class ConfigFileNotFoundError(ConfigLoaderError):
    """The specified configuration file does not exist."""


class ConfigFormatError(ConfigLoaderError):
    """The configuration file is not formatted correctly."""


class ConfigValueError(ConfigFormatError):
    """The configuration file contains an invalid value."""


class ConfigTypeError(ConfigFormatError):
    """The configuration file contains an invalid type."""


class ConfigLoader:
    """Handles loading, validation and persistence of configuration settings.

    Keys are case-sensitive: ``[GENERAL] DEBUG`` and ``[Claude] ApiKey`` must be written as shown.

    Args:
        config_filename (str): INI file name to load.
        script_name (str): Executing script name, used in error messaging.
        **args: Command-line overrides. ``debug=True`` forces GENERAL.DEBUG.

    Raises:
        ConfigFileNotFoundError: If the configuration file does not exist.
        ConfigFormatError: If the file cannot be parsed or contains invalid values/types.
    """

    def __init__(
        self,
        *,
        config_filename: str,
        script_name: str,
        **args,
    ) -> None:
        self.config_path = Path(config_filename)
        msg: str
        if not self.config_path.exists():
            msg = (
                f"Configuration file '{config_filename}' not found. "
                f"Please create '{config_filename}' in the same directory as '{script_name}'."
            )
            raise ConfigFileNotFoundError(msg)

        self.parser: ConfigParser = ConfigParser(interpolation=None)
        self.parser.optionxform = str  # type: ignore[assignment,method-assign]

        try:
            self.parser.read(self.config_path, encoding="utf-8")
        except configparser.Error as err:
            msg = f"Failed to parse configuration file '{config_filename}': {err}"
            raise ConfigFormatError(msg) from None

        self.config = Config()
        self._convert_settings()
        if args.get("debug", False):
            self.config.GENERAL.DEBUG = True
        self._validate_settings()

    def _convert_settings(self) -> None:
        """Convert every typed section of ``Config`` from the parsed INI data.

        Raises:
            ConfigFormatError: If a value cannot be parsed or coerced to the expected type.
        """
        formatter = _ConfigFormatter(self.config, self.parser)
        for section in fields(self.config):
            self._convert_section_field(formatter, section)

    def _convert_section_field(self, formatter: _ConfigFormatter, section: DataclassField[Any]) -> None:
        for key in fields(getattr(self.config, section.name)):
            if not self.parser.has_option(section.name, key.name):
                logger.debug("Skipping undefined setting: '%s.%s'", section.name, key.name)
                continue

            formatted_value = formatter.apply_format(section, key)
            setattr(getattr(self.config, section.name), key.name, formatted_value)

    def _validate_settings(self) -> None:
        """Validate the host settings.

        Raises:
            ConfigTypeError: If a setting has an unsupported type.
        """
        self._inspect_defined_item("TRANSLATION", "ENGINE", ALLOWED_TRANSLATION_ENGINES)
        for key_name in ("SOURCE_LANGUAGE", "DESTINATION_LANGUAGE"):
            value = getattr(self.config.TRANSLATION, key_name)
            if not isinstance(value, str) or not value:
                msg: str = f"'TRANSLATION.{key_name}' must be a non-empty string: {value!r}"
                raise ConfigTypeError(msg)

    def _inspect_defined_item(self, section_name: str, key_name: str, defined_list: list[str]) -> None:
        """Warn about values that are not among the allowed options.

        Raises:
            ConfigTypeError: If the configured value is not a string.
        """
        value: Any = getattr(getattr(self.config, section_name), key_name)
        field_name: str = f"{section_name}.{key_name}"

        if not isinstance(value, str):
            msg: str = f"Unsupported type used for '{field_name}': {type(value)}"
            raise ConfigTypeError(msg)
        if value not in defined_list:
            logger.warning("Unknown value '%s' is set for '%s'", value, field_name)

    def get_or_create_setting(self, section: str, key: str, default: SettingT) -> SettingT:
        """Return a setting converted to the type of ``default``.

        A missing setting is created with ``default`` and the file is saved.

        Raises:
            ConfigValueError: If the stored value cannot be converted.
        """
        if not self.parser.has_option(section, key):
            logger.info("Creating setting '%s.%s' with its default value", section, key)
            self.set_setting(section, key, default)
            return default

        raw: str = self.parser.get(section, key)
        try:
            if isinstance(default, bool):
                return self.parser.getboolean(section, key)  # type: ignore[return-value]
            if isinstance(default, int):
                return int(float(_strip_quotes(raw)))  # type: ignore[return-value]
            if isinstance(default, float):
                return float(_strip_quotes(raw))  # type: ignore[return-value]
        except ValueError as err:
            msg: str = f"Invalid value for {section}.{key}: {err}"
            raise ConfigValueError(msg) from err
        return _strip_quotes(raw)  # type: ignore[return-value]

    def set_setting(self, section: str, key: str, value: str | float | bool) -> None:
        """Store a setting and write the file back."""
        if not self.parser.has_section(section):
            self.parser.add_section(section)
        self.parser.set(section, key, str(value))
        self.save()

    def save(self) -> None:
        """Write the current settings to the configuration file.

        Comments in the original file are not preserved.
        """
        with self.config_path.open("w", encoding="utf-8") as fp:
            self.parser.write(fp)
        logger.debug("Configuration saved to '%s'", self.config_path)


def _strip_quotes(value: str) -> str:
    value = value.strip()
    for char in ("'", '"'):
        if len(value) >= 2 and value.startswith(char) and value.endswith(char):  # noqa: PLR2004
            return value[1:-1]
    return value


class _ConfigFormatter:
    """Converts INI string values to typed Python objects (bool, int, float, literals)."""

    def __init__(self, config: Config, parser: ConfigParser) -> None:
        self.config: Config = config
        self.parser: ConfigParser = parser

    def apply_format(self, section: DataclassField[Any], key: DataclassField[Any]) -> Any:
        """Convert an INI value to the type of the corresponding Config default.

        Raises:
            ConfigValueError: If a value cannot be coerced to the expected type.
            ConfigFormatError: If literal evaluation fails due to invalid syntax.
            ConfigTypeError: If an unexpected type is encountered during coercion.
        """
        formatters: dict[
            type[bool | int | float], Callable[[DataclassField[Any], DataclassField[Any]], bool | int | float]
        ] = {
            bool: self.parse_as_boolean,
            int: self.parse_as_integer,
            float: self.parse_as_float,
        }

        formatter: Callable[[DataclassField[Any], DataclassField[Any]], bool | int | float] | None = formatters.get(
            type(getattr(getattr(self.config, section.name), key.name))
        )
        if formatter:
            try:
                return formatter(section, key)
            except ValueError as err:
                msg = f"Invalid value for {section.name}.{key.name}: {err}"
                raise ConfigValueError(msg) from err
            except TypeError as err:
                msg = f"Invalid value for {section.name}.{key.name}: {err}"
                raise ConfigTypeError(msg) from err

        value_str: str = self.parser[section.name][key.name]
        try:
            return ast.literal_eval(value_str)
        except ValueError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {value_str}"
            raise ConfigValueError(msg) from err
        except SyntaxError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {value_str}"
            raise ConfigFormatError(msg) from err

    def parse_as_float(self, section: DataclassField[Any], key: DataclassField[Any]) -> float:
        return float(_strip_quotes(self.parser.get(section.name, key.name)))

    def parse_as_integer(self, section: DataclassField[Any], key: DataclassField[Any]) -> int:
        return int(float(_strip_quotes(self.parser.get(section.name, key.name))))

    def parse_as_boolean(self, section: DataclassField[Any], key: DataclassField[Any]) -> bool:
        return self.parser.getboolean(section.name, key.name)
