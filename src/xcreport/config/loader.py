"""Config resolution on top of pydantic-settings.

Sources, strongest first:
1. Keyword overrides passed to load_config (the CLI flags)
2. XCREPORT__<SECTION>__<KEY> environment variables
3. A YAML file: --config PATH, else .xcreport.yaml in the working directory
4. Model defaults
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from xcreport.config.constants import CONFIG_FILE_NAME, ENV_PREFIX
from xcreport.config.models import LoggingConfig, ReportConfig, ToolConfig, XcReportConfig
from xcreport.core.errors import ConfigError


def _load_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping; a missing file reads as empty."""
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


class _YamlSource(PydanticBaseSettingsSource):
    """Feeds an already-parsed YAML mapping into the settings sources."""

    def __init__(self, settings_cls: type[BaseSettings], data: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._data = data

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


def _settings_for(data: dict[str, Any]) -> type[BaseSettings]:
    """Settings class bound to one YAML mapping."""

    class XcReportSettings(BaseSettings):
        model_config = SettingsConfigDict(
            env_prefix=ENV_PREFIX,
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        tool: ToolConfig = ToolConfig()
        report: ReportConfig = ReportConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # dotenv and secret files are not consulted
            return init_settings, env_settings, _YamlSource(settings_cls, data)

    return XcReportSettings


def load_config(config_path: Path | None = None, **overrides: Any) -> XcReportConfig:
    """Resolve the effective configuration.

    Args:
        config_path: YAML file to read. When None, ``.xcreport.yaml`` in the
            working directory is used if it exists.
        **overrides: Section dicts that beat every other source, e.g.
            ``report={"show_passed_tests": False}``.

    Raises:
        ConfigError: An explicit file is missing, the YAML is malformed, or
            a value fails validation.
    """
    if config_path is None:
        data = _load_yaml(Path.cwd() / CONFIG_FILE_NAME)
    elif config_path.exists():
        data = _load_yaml(config_path)
    else:
        raise ConfigError.parse_error(str(config_path), "file not found")

    try:
        settings = _settings_for(data)(**overrides)
    except ValidationError as e:
        first = e.errors()[0]
        dotted = ".".join(str(part) for part in first["loc"])
        raise ConfigError.invalid_value(dotted, first.get("input"), first["msg"]) from e
    return XcReportConfig.model_validate(settings.model_dump())
