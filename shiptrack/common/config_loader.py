"""
Configuration loader supporting YAML files and environment variables.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class StorageConfig(BaseModel):
    """Shipment store configuration."""

    backend: str = Field(default="json", description="Store backend (json, memory)")
    path: str = Field(default="data/shipments.json", description="Path of the JSON collection file")


class RoutingConfig(BaseModel):
    """OpenRouteService configuration."""

    api_key: str | None = Field(default=None, description="OpenRouteService API key")
    geocode_url: str = Field(
        default="https://api.openrouteservice.org/geocode/search",
        description="Geocoding endpoint",
    )
    directions_url: str = Field(
        default="https://api.openrouteservice.org/v2/directions",
        description="Directions endpoint (profile is appended)",
    )
    default_profile: str = Field(default="driving-car", description="Routing profile when none is given")
    timeout_seconds: float = Field(default=10.0, gt=0, description="Upstream request timeout")


class AnalyticsConfig(BaseModel):
    """Analytics aggregation settings."""

    recent_window_days: int = Field(default=30, ge=0, description="Trailing window for recent shipments")
    max_delivery_hours: float = Field(default=720.0, gt=0, description="Upper bound for a valid delivery time")


class ApiConfig(BaseModel):
    """HTTP boundary settings."""

    prefix: str = Field(default="/api", description="Prefix for all shipment and analytics routes")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")


class Config(BaseSettings):
    """Main configuration class."""

    environment: str = Field(default="dev", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    storage: StorageConfig = Field(default_factory=StorageConfig)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    class Config:
        env_prefix = "SHIPTRACK_"
        env_nested_delimiter = "__"


class ConfigLoader:
    """Loads configuration from YAML files with environment overrides."""

    def __init__(self, config_dir: str | Path | None = None):
        if config_dir is None:
            config_dir = os.environ.get("SHIPTRACK_CONFIG_DIR") or Path(__file__).parent.parent.parent / "config"
        self.config_dir = Path(config_dir)
        self._config: Config | None = None

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def _load_yaml(self, filename: str) -> dict[str, Any]:
        filepath = self.config_dir / filename
        if not filepath.exists():
            return {}
        with open(filepath) as f:
            return yaml.safe_load(f) or {}

    def _substitute_env_vars(self, config: dict) -> dict:
        """Resolve ``${VAR}`` and ``${VAR:-default}`` references."""
        result = {}
        for key, value in config.items():
            if isinstance(value, dict):
                result[key] = self._substitute_env_vars(value)
            elif isinstance(value, str) and value.startswith("${") and value.endswith("}"):
                env_var = value[2:-1]
                default = None
                if ":-" in env_var:
                    env_var, default = env_var.split(":-", 1)
                result[key] = os.environ.get(env_var, default)
            else:
                result[key] = value
        return result

    def load(self, environment: str | None = None) -> Config:
        """Load configuration for the specified environment."""
        if environment is None:
            environment = os.environ.get("ENVIRONMENT", "dev")

        merged = self._deep_merge(
            self._load_yaml("base.yaml"),
            self._load_yaml(f"{environment}.yaml"),
        )
        merged = self._substitute_env_vars(merged)
        merged["environment"] = environment

        self._config = Config(**merged)
        return self._config

    @property
    def config(self) -> Config:
        """Get the loaded configuration."""
        if self._config is None:
            return self.load()
        return self._config


_config_loader: ConfigLoader | None = None


def get_config(environment: str | None = None, config_dir: str | Path | None = None) -> Config:
    """Get the global configuration instance."""
    global _config_loader
    if _config_loader is None or config_dir is not None:
        _config_loader = ConfigLoader(config_dir)
    return _config_loader.load(environment)
