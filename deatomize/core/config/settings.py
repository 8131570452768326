"""
Run configuration.

Settings are assembled once at startup from (lowest to highest precedence)
built-in defaults, an optional YAML file (--config or $DEATOMIZE_CONFIG),
environment variables and command-line overrides, then passed explicitly to
every component.

Expected YAML format:
```yaml
mgm_url: root://eoshome.cern.ch
user: root
group: root
repair: false
input_file: ./deatomize
inspect_unrepairable: false
eos_binary: eos
command_timeout: 60
namespaces:
  recycle: /proc/recycle
  version: sys.v
  atomic: sys.a
log_level: INFO
log_format: text
metrics_file: /var/lib/node_exporter/deatomize.prom
```
"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from deatomize.core.errors import ConfigurationError

DEFAULT_MGM_URL = "root://eoshome.cern.ch"
DEFAULT_INPUT_FILE = "./deatomize"

# Environment variable naming the YAML settings file
CONFIG_ENV_VAR = "DEATOMIZE_CONFIG"

# Environment variable -> settings field
ENV_VARS = {
    "DEATOMIZE_MGM_URL": "mgm_url",
    "DEATOMIZE_USER": "user",
    "DEATOMIZE_GROUP": "group",
    "DEATOMIZE_REPAIR": "repair",
    "DEATOMIZE_FILE": "input_file",
    "DEATOMIZE_EOS_BINARY": "eos_binary",
    "LOG_LEVEL": "log_level",
}


class NamespaceSettings(BaseModel):
    """
    Path segments identifying locations that are never reconciled.

    Attributes:
        recycle: Segment of the trash/recycle namespace
        version: Segment of version-artifact folders
        atomic: Segment of atomic-upload temporary files
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    recycle: str = Field("/proc/recycle", min_length=1)
    version: str = Field("sys.v", min_length=1)
    atomic: str = Field("sys.a", min_length=1)


class Settings(BaseModel):
    """
    Immutable configuration for one run.

    Attributes:
        mgm_url: Backing-store endpoint address
        user: User role used for backend authorization
        group: Group role used for backend authorization
        repair: Execute rollbacks (False = dry-run)
        input_file: Path of the record file
        inspect_unrepairable: List versions of not-chunked records for the report
        eos_binary: Command-line client used to talk to the backend
        command_timeout: Seconds before a backend command is abandoned
        namespaces: Excluded namespace segments
        log_level: Logging level name
        log_format: "text" or "json"
        metrics_file: Optional Prometheus textfile to write at the end
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mgm_url: str = Field(DEFAULT_MGM_URL, min_length=1)
    user: str = Field("root", min_length=1)
    group: str = Field("root", min_length=1)
    repair: bool = False
    input_file: Path = Path(DEFAULT_INPUT_FILE)
    inspect_unrepairable: bool = False
    eos_binary: str = Field("eos", min_length=1)
    command_timeout: float = Field(60.0, gt=0)
    namespaces: NamespaceSettings = Field(default_factory=NamespaceSettings)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["text", "json"] = "text"
    metrics_file: Path | None = None

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lower-case level names."""
        return v.upper() if isinstance(v, str) else v

    @property
    def dry_run(self) -> bool:
        return not self.repair


class SettingsLoader:
    """
    Builds Settings from a YAML file, the environment and explicit overrides.
    """

    def __init__(self, config_path: str | Path | None = None, environ: dict[str, str] | None = None):
        """
        Initialize the settings loader.

        Args:
            config_path: Optional YAML configuration file (falls back to $DEATOMIZE_CONFIG)
            environ: Environment mapping (defaults to os.environ)
        """
        self.environ = os.environ if environ is None else environ
        config_path = config_path or self.environ.get(CONFIG_ENV_VAR)
        self.config_path = Path(config_path) if config_path else None

        if self.config_path and not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

    def load(self, overrides: dict[str, Any] | None = None) -> Settings:
        """
        Merge every configuration source and validate the result.

        Args:
            overrides: Highest-precedence values (e.g. from the command line);
                       None values are ignored

        Returns:
            Validated Settings

        Raises:
            ConfigurationError: If the YAML file or any value is invalid
        """
        values: dict[str, Any] = {}
        values.update(self._load_file())
        values.update(self._load_env())
        values.update({k: v for k, v in (overrides or {}).items() if v is not None})

        try:
            return Settings(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def _load_file(self) -> dict[str, Any]:
        if self.config_path is None:
            return {}

        try:
            with open(self.config_path) as f:
                config = yaml.safe_load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {self.config_path}: {e.strerror or e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Configuration file {self.config_path} is not valid YAML: {e}") from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigurationError(f"Configuration file {self.config_path} must contain a mapping")
        return config

    def _load_env(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for var, field_name in ENV_VARS.items():
            raw = self.environ.get(var)
            if raw:
                values[field_name] = raw
        return values


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> Settings:
    """
    Load settings from every source.

    Args:
        config_path: Optional YAML configuration file
        overrides: Command-line values (None means "not given")
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated Settings
    """
    return SettingsLoader(config_path, environ=environ).load(overrides)
