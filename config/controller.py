"""Configuration controller for YAML or JSON uptimer settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from measurement.retry import RetryCondition


class ConfigError(ValueError):
    """Raised when the configuration file is missing, unreadable, or invalid."""


@dataclass(frozen=True)
class ConfigPaths:
    """Filesystem paths for configuration files."""

    config_file: Path
    override_file: Path


@dataclass(frozen=True)
class WhileCommand:
    """One step of the workload that bounds the observation window."""

    command: str
    command_args: tuple[str, ...] = ()


@dataclass(frozen=True)
class CfSettings:
    """Platform API target and admin credentials."""

    api: str
    app_domain: str
    admin_user: str
    admin_password: str
    tcp_domain: str = ""
    available_port: int = 0
    skip_ssl_validation: bool = True


@dataclass(frozen=True)
class AllowedFailures:
    """Per-probe tolerance of counted failures."""

    app_pushability: int = 0
    http_availability: int = 0
    recent_logs: int = 0
    streaming_logs: int = 0


@dataclass(frozen=True)
class ProbeIntervals:
    """Seconds between ticks for each probe."""

    app_pushability: float = 60.0
    http_availability: float = 1.0
    recent_logs: float = 10.0
    streaming_logs: float = 30.0


@dataclass(frozen=True)
class AppSettings:
    """Prebuilt sample app pushed by the workflows."""

    path: str = ""
    command: str = "./app"
    buildpack: str = "binary_buildpack"
    instances: int = 2


@dataclass(frozen=True)
class UptimerConfig:
    """Validated uptimer configuration."""

    while_commands: tuple[WhileCommand, ...]
    cf: CfSettings
    allowed_failures: AllowedFailures = field(default_factory=AllowedFailures)
    intervals: ProbeIntervals = field(default_factory=ProbeIntervals)
    app: AppSettings = field(default_factory=AppSettings)
    streaming_logs_deadline_s: float = 15.0
    http_timeout_s: float = 5.0
    retry_on: tuple[str, ...] = ("auth_expired",)
    log_file: str | None = None
    logging_level: str = "INFO"


class ConfigController:
    """Load a config file and its optional override into ``UptimerConfig``."""

    def __init__(self, config_file: str | Path) -> None:
        config_path = Path(config_file)
        self.paths = ConfigPaths(
            config_file=config_path,
            override_file=config_path.with_name(f"{config_path.stem}.override.yaml"),
        )
        self.raw: dict[str, Any] = {}
        self.config: UptimerConfig | None = None

    @classmethod
    def load(cls, config_file: str | Path) -> UptimerConfig:
        """Load and validate configuration from ``config_file``."""

        controller = cls(config_file)
        return controller.load_config()

    def load_config(self) -> UptimerConfig:
        """Load configuration from the config file and its override file."""

        config = self._read(self.paths.config_file)
        if self.paths.override_file.exists():
            override_config = self._read(self.paths.override_file)
            if override_config:
                config = self._deep_merge(config, override_config)

        self.raw = config
        self.config = self._build(config)
        return self.config

    def _read(self, path: Path) -> dict[str, Any]:
        try:
            with path.open("r", encoding="utf-8") as file:
                data = yaml.safe_load(file) or {}
        except OSError as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Cannot parse config file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge dictionaries, overriding base values with override values."""

        merged = dict(base)
        for key, value in override.items():
            if (
                key in merged
                and isinstance(merged[key], dict)
                and isinstance(value, dict)
            ):
                merged[key] = self._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _build(self, config: dict[str, Any]) -> UptimerConfig:
        while_cfg = config.get("while") or []
        if not isinstance(while_cfg, list) or not while_cfg:
            raise ConfigError("'while' must be a non-empty list of commands")
        while_commands = []
        for entry in while_cfg:
            if not isinstance(entry, dict) or not entry.get("command"):
                raise ConfigError(f"Invalid 'while' entry: {entry!r}")
            args = entry.get("command_args") or []
            if not isinstance(args, list):
                raise ConfigError(f"'command_args' must be a list, got {args!r}")
            while_commands.append(
                WhileCommand(command=str(entry["command"]), command_args=tuple(str(arg) for arg in args))
            )

        cf_cfg = config.get("cf")
        if not isinstance(cf_cfg, dict):
            raise ConfigError("'cf' section is required")
        missing = [key for key in ("api", "app_domain", "admin_user", "admin_password") if not cf_cfg.get(key)]
        if missing:
            raise ConfigError(f"'cf' section is missing: {', '.join(missing)}")
        cf = CfSettings(
            api=str(cf_cfg["api"]),
            app_domain=str(cf_cfg["app_domain"]),
            admin_user=str(cf_cfg["admin_user"]),
            admin_password=str(cf_cfg["admin_password"]),
            tcp_domain=str(cf_cfg.get("tcp_domain") or ""),
            available_port=self._integer(cf_cfg, "available_port", 0, "cf"),
            skip_ssl_validation=self._flag(cf_cfg, "skip_ssl_validation", True, "cf"),
        )

        failures_cfg = self._section(config, "allowed_failures")
        allowed = AllowedFailures(
            app_pushability=self._non_negative(failures_cfg, "app_pushability"),
            http_availability=self._non_negative(failures_cfg, "http_availability"),
            recent_logs=self._non_negative(failures_cfg, "recent_logs"),
            streaming_logs=self._non_negative(failures_cfg, "streaming_logs"),
        )

        defaults = ProbeIntervals()
        intervals_cfg = self._section(config, "intervals")
        intervals = ProbeIntervals(
            app_pushability=self._positive(intervals_cfg, "app_pushability", defaults.app_pushability),
            http_availability=self._positive(intervals_cfg, "http_availability", defaults.http_availability),
            recent_logs=self._positive(intervals_cfg, "recent_logs", defaults.recent_logs),
            streaming_logs=self._positive(intervals_cfg, "streaming_logs", defaults.streaming_logs),
        )

        app_cfg = self._section(config, "app")
        app = AppSettings(
            path=str(app_cfg.get("path") or ""),
            command=str(app_cfg.get("command") or AppSettings.command),
            buildpack=str(app_cfg.get("buildpack") or AppSettings.buildpack),
            instances=self._integer(app_cfg, "instances", AppSettings.instances, "app"),
        )
        if app.instances < 1:
            raise ConfigError(f"app.instances must be at least 1, got {app.instances}")

        retry_on = config.get("retry_on", ["auth_expired"]) or []
        if not isinstance(retry_on, list):
            raise ConfigError("'retry_on' must be a list of condition names")
        known = {condition.value for condition in RetryCondition}
        unknown = [str(name) for name in retry_on if str(name) not in known]
        if unknown:
            raise ConfigError(f"Unknown retry conditions: {', '.join(unknown)}")

        log_file = config.get("log_file")
        return UptimerConfig(
            while_commands=tuple(while_commands),
            cf=cf,
            allowed_failures=allowed,
            intervals=intervals,
            app=app,
            streaming_logs_deadline_s=self._positive(config, "streaming_logs_deadline_s", 15.0),
            http_timeout_s=self._positive(config, "http_timeout_s", 5.0),
            retry_on=tuple(str(name) for name in retry_on),
            log_file=str(log_file) if log_file else None,
            logging_level=str(config.get("logging_level", "INFO")),
        )

    def _section(self, config: dict[str, Any], key: str) -> dict[str, Any]:
        section = config.get(key) or {}
        if not isinstance(section, dict):
            raise ConfigError(f"'{key}' section must be a mapping, got {section!r}")
        return section

    def _integer(self, section: dict[str, Any], key: str, default: int, prefix: str) -> int:
        value = section.get(key)
        if value is None or value == "":
            return default
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"{prefix}.{key} must be an integer, got {value!r}") from exc

    def _flag(self, section: dict[str, Any], key: str, default: bool, prefix: str) -> bool:
        value = section.get(key, default)
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in ("true", "yes", "on", "1"):
            return True
        if text in ("false", "no", "off", "0"):
            return False
        raise ConfigError(f"{prefix}.{key} must be true or false, got {value!r}")

    def _non_negative(self, section: dict[str, Any], key: str) -> int:
        value = section.get(key, 0)
        try:
            number = int(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"allowed_failures.{key} must be an integer, got {value!r}") from exc
        if number < 0:
            raise ConfigError(f"allowed_failures.{key} must be non-negative, got {number}")
        return number

    def _positive(self, section: dict[str, Any], key: str, default: float) -> float:
        value = section.get(key, default)
        try:
            number = float(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"{key} must be a number, got {value!r}") from exc
        if number <= 0:
            raise ConfigError(f"{key} must be positive, got {number}")
        return number
