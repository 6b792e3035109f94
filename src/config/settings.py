"""Application settings with Pydantic Settings validation.

Secrets (sink credentials) are loaded from the environment or a .env file.
Non-sensitive configuration is loaded from config/main.yaml and any other
config/*.yaml files. All configs are merged and validated against JSON
schemas in config/schemas/ when present.
"""

import json
from pathlib import Path
from typing import Any, Final, Literal, cast

import pytz
import yaml
from jsonschema import ValidationError as JSONSchemaValidationError
from jsonschema import validate
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.config.logging_config import get_logger
from src.domain.extraction_constants import (
    DEFAULT_SYNC_BATCH_SIZE,
    EXPORT_PAGE_ID_WATERMARK,
    LOW_VOLUME_RESULT_THRESHOLD,
    LOW_VOLUME_SYNC_BATCH_SIZE,
)
from src.domain.models import CommitConfig

CONFIG_DIR: Final[Path] = Path("config")
SCHEMA_DIR: Final[Path] = CONFIG_DIR / "schemas"
MAIN_CONFIG_FILE: Final[str] = "main.yaml"

METRICS_PORT_DEFAULT: Final[int] = 9000

logger = cast(Any, get_logger(__name__))


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge into base (takes precedence)

    Returns:
        Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_schema(schema_name: str, schema_dir: Path = SCHEMA_DIR) -> dict[str, Any]:
    """Load JSON Schema from config/schemas/.

    Args:
        schema_name: Schema name without extension (e.g., "main")
        schema_dir: Directory holding ``<name>.schema.json`` files

    Returns:
        JSON Schema dictionary or empty dict if not found
    """
    schema_path = schema_dir / f"{schema_name}.schema.json"
    if not schema_path.exists():
        return {}

    try:
        with open(schema_path, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(
            "config_schema_load_failed",
            schema=schema_name,
            error=str(e),
        )
        return {}


def validate_config_section(
    config: dict[str, Any],
    schema_name: str,
    file_path: str = "",
    schema_dir: Path = SCHEMA_DIR,
) -> None:
    """Validate config section against JSON Schema.

    Raises:
        ValueError: If validation fails
    """
    schema = load_schema(schema_name, schema_dir)
    if not schema:
        return

    try:
        validate(instance=config, schema=schema)
        logger.debug("config_validation_succeeded", schema=schema_name)
    except JSONSchemaValidationError as e:
        error_msg = f"Config validation failed for {schema_name}"
        if file_path:
            error_msg += f" (file: {file_path})"
        error_msg += f": {e.message}"
        raise ValueError(error_msg) from e


def check_timezone(value: str) -> str:
    """Return the timezone name if pytz knows it.

    Raises:
        ValueError: If the name is not a known timezone
    """
    try:
        pytz.timezone(value)
    except pytz.UnknownTimeZoneError as exc:
        raise ValueError(f"Unknown timezone: {value}") from exc
    return value


def load_all_configs(config_dir: Path = CONFIG_DIR) -> dict[str, Any]:
    """Load and merge all YAML configs from the config directory.

    Loading order (later overrides earlier):
    1. config/main.yaml
    2. All other config/*.yaml files (sorted alphabetically)

    Returns:
        Merged configuration dictionary
    """
    if not config_dir.is_dir():
        return {}

    schema_dir = config_dir / "schemas"
    main_path = config_dir / MAIN_CONFIG_FILE
    yaml_files = sorted(f for f in config_dir.glob("*.yaml") if f.name != MAIN_CONFIG_FILE)
    if main_path.exists():
        yaml_files.insert(0, main_path)

    merged_config: dict[str, Any] = {}
    for yaml_file in yaml_files:
        schema_name = yaml_file.stem
        try:
            with open(yaml_file, encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError) as e:
            logger.warning(
                "config_file_load_failed",
                path=str(yaml_file),
                error=str(e),
            )
            continue

        try:
            validate_config_section(file_config, schema_name, str(yaml_file), schema_dir)
        except ValueError as e:
            logger.error(
                "config_validation_failed",
                path=str(yaml_file),
                schema=schema_name,
                error=str(e),
            )
            raise

        merged_config = deep_merge(merged_config, file_config)
        logger.debug("config_file_loaded", path=str(yaml_file), schema=schema_name)

    logger.debug("config_load_complete", file_count=len(yaml_files))
    return merged_config


class Settings(BaseSettings):
    """Application settings.

    Environment variables win over YAML values, YAML values win over the
    defaults declared here.
    """

    model_config = SettingsConfigDict(
        env_file=".env" if Path(".env").exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === SECRETS (from env / .env) ===

    sink_username: SecretStr | None = Field(
        default=None,
        description="Sink database user; results are only committed when set",
    )

    # === NON-SENSITIVE CONFIG (from config/*.yaml or defaults) ===

    def __init__(self, **data: Any):
        """Initialize settings with auto-loaded configs from all YAML files."""
        config = load_all_configs()

        super().__init__(**data)
        self._apply_yaml_defaults(config)

    def _apply_yaml_defaults(self, config: dict[str, Any]) -> None:
        """Apply YAML-sourced defaults without overriding env-provided values."""

        fields_from_env = set(self.model_fields_set)

        def _assign(field_name: str, value: Any) -> None:
            if value is None:
                return
            if field_name in fields_from_env:
                return

            object.__setattr__(self, field_name, value)
            self.model_fields_set.add(field_name)

        crawl_config = config.get("crawl") or {}
        _assign("instance_role", crawl_config.get("instance_role"))
        _assign("crawl_timezone", crawl_config.get("timezone"))
        _assign("seeds_dir", crawl_config.get("seeds_dir"))

        sink_config = config.get("sink") or {}
        _assign("sink_collection", sink_config.get("collection"))
        _assign("sync_batch_size", sink_config.get("sync_batch_size"))
        _assign("low_volume_sync_batch_size", sink_config.get("low_volume_sync_batch_size"))
        _assign(
            "low_volume_result_threshold",
            sink_config.get("low_volume_result_threshold"),
        )

        export_config = config.get("export") or {}
        _assign("export_dir", export_config.get("dir"))
        _assign("export_page_id_watermark", export_config.get("page_id_watermark"))

        logging_config = config.get("logging") or {}
        _assign("log_level", logging_config.get("level"))

        metrics_config = config.get("metrics") or {}
        _assign("metrics_port", metrics_config.get("port"))

        # YAML values bypass field validation
        check_timezone(self.crawl_timezone)

    # Crawl configuration
    instance_role: Literal["prod", "dev", "test"] = Field(
        default="prod", description="Deployment role of this crawler node"
    )
    crawl_timezone: str = Field(
        default="UTC", description="Timezone in which task windows are evaluated"
    )
    seeds_dir: str = Field(
        default="config/seeds", description="Directory holding seed url lists"
    )

    # Sink configuration
    sink_collection: str = Field(
        default="amazon_results", description="Sink collection receiving results"
    )
    sync_batch_size: int = Field(
        default=DEFAULT_SYNC_BATCH_SIZE,
        ge=1,
        description="Rows per commit once the result stream is busy",
    )
    low_volume_sync_batch_size: int = Field(
        default=LOW_VOLUME_SYNC_BATCH_SIZE,
        ge=1,
        description="Rows per commit while few results were observed",
    )
    low_volume_result_threshold: int = Field(
        default=LOW_VOLUME_RESULT_THRESHOLD,
        ge=0,
        description="Observed results above which the normal batch size applies",
    )

    # Export configuration
    export_dir: str = Field(
        default="data/export", description="Root directory for exported documents"
    )
    export_page_id_watermark: int = Field(
        default=EXPORT_PAGE_ID_WATERMARK,
        ge=0,
        description="Pages with a lower id are always exported",
    )

    # Observability
    log_level: str = Field(default="INFO", description="Logging level")
    metrics_port: int = Field(
        default=METRICS_PORT_DEFAULT, description="Prometheus exporter port"
    )

    @field_validator("crawl_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        return check_timezone(value)

    @property
    def is_dev_or_test(self) -> bool:
        return self.instance_role in {"dev", "test"}

    def timezone(self) -> pytz.BaseTzInfo:
        return pytz.timezone(self.crawl_timezone)

    def commit_config(self) -> CommitConfig:
        """Commit configuration derived from the sink settings."""
        username = self.sink_username.get_secret_value() if self.sink_username else ""
        return CommitConfig(sink_username=username, sync_batch_size=self.sync_batch_size)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
