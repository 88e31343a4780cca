#!/usr/bin/env python3
"""
Configuration settings using Pydantic for environment variable loading
"""

import os
from typing import Optional, Dict, Any

from pydantic import Field
from pydantic_settings import BaseSettings

# Load environment variables from .env file if it exists
from dotenv import load_dotenv
load_dotenv()


class StateSettings(BaseSettings):
    """Scaling state storage settings"""
    # Backend used when a cluster does not name one in stateDatabase
    default_backend: str = os.getenv("STATE_DEFAULT_BACKEND", "mongodb")
    mongodb_url: str = os.getenv("STATE_MONGODB_URL", "mongodb://localhost:27017")
    mongodb_database: str = os.getenv("STATE_MONGODB_DATABASE", "autoscaler")
    mongodb_timeout_ms: int = int(os.getenv("STATE_MONGODB_TIMEOUT_MS", "5000"))
    sql_url: str = os.getenv("STATE_SQL_URL", "sqlite:///autoscaler-state.db")
    collection_name: str = os.getenv("STATE_COLLECTION_NAME", "memorystoreClusterAutoscaler")

    class Config:
        extra = "ignore"


class ClusterApiSettings(BaseSettings):
    """Cluster control REST API settings"""
    redis_base_url: str = os.getenv("CLUSTER_API_REDIS_URL", "https://redis.googleapis.com/v1")
    valkey_base_url: str = os.getenv("CLUSTER_API_VALKEY_URL", "https://memorystore.googleapis.com/v1")
    access_token: Optional[str] = os.getenv("CLUSTER_API_ACCESS_TOKEN", None)
    timeout: int = int(os.getenv("CLUSTER_API_TIMEOUT", "30"))
    user_agent: str = os.getenv("CLUSTER_API_USER_AGENT", "memorystore-cluster-autoscaler-scaler")

    class Config:
        extra = "ignore"


class RedisSettings(BaseSettings):
    """Redis settings for the downstream event stream"""
    host: str = os.getenv("REDIS_HOST", "localhost")
    port: int = int(os.getenv("REDIS_PORT", "6379"))
    db: int = int(os.getenv("REDIS_DB", "0"))
    password: Optional[str] = os.getenv("REDIS_PASSWORD", None)
    connection_timeout: int = int(os.getenv("REDIS_CONNECTION_TIMEOUT", "5"))
    stream_maxlen: int = int(os.getenv("REDIS_STREAM_MAXLEN", "10000"))

    class Config:
        extra = "ignore"


class LoggingSettings(BaseSettings):
    """Logging configuration settings"""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    file: Optional[str] = os.getenv("LOG_FILE", None)
    enable_colors: bool = os.getenv("LOG_COLORS", "true").lower() == "true"

    class Config:
        extra = "ignore"


class PrometheusSettings(BaseSettings):
    """Prometheus export settings"""
    pushgateway_url: Optional[str] = os.getenv("PROMETHEUS_PUSHGATEWAY_URL", None)
    job_name: str = os.getenv("PROMETHEUS_JOB_NAME", "memorystore-cluster-autoscaler-scaler")

    class Config:
        extra = "ignore"


class ApiSettings(BaseSettings):
    """HTTP adapter settings"""
    host: str = os.getenv("SCALER_API_HOST", "0.0.0.0")
    port: int = int(os.getenv("SCALER_API_PORT", "8080"))

    class Config:
        extra = "ignore"


class Settings(BaseSettings):
    """Main settings class that includes all sub-settings"""
    # Environment
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    config_location: str = os.getenv(
        "AUTOSCALER_CONFIG", "/etc/autoscaler-config/autoscaler-config.yaml"
    )

    # Component settings
    state: StateSettings = Field(default_factory=StateSettings)
    cluster_api: ClusterApiSettings = Field(default_factory=ClusterApiSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    prometheus: PrometheusSettings = Field(default_factory=PrometheusSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields to avoid validation errors

    def get_config_dict(self) -> Dict[str, Any]:
        """Flatten settings into a plain dictionary (used for debug logging)"""
        return {
            "environment": self.environment,
            "state": {
                "default_backend": self.state.default_backend,
                "mongodb_database": self.state.mongodb_database,
                "collection_name": self.state.collection_name,
            },
            "cluster_api": {
                "redis_base_url": self.cluster_api.redis_base_url,
                "valkey_base_url": self.cluster_api.valkey_base_url,
                "timeout": self.cluster_api.timeout,
            },
            "redis": {
                "host": self.redis.host,
                "port": self.redis.port,
                "db": self.redis.db,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "prometheus": {
                "pushgateway_url": self.prometheus.pushgateway_url,
                "job_name": self.prometheus.job_name,
            },
        }

    @classmethod
    def load_from_yaml_with_env_override(cls, yaml_path: str) -> "Settings":
        """Load settings from YAML file and override with environment variables"""
        import yaml

        yaml_config = {}
        if os.path.exists(yaml_path):
            with open(yaml_path, 'r') as f:
                # Process environment variables in YAML
                yaml_content = f.read()
                for key, value in os.environ.items():
                    yaml_content = yaml_content.replace(f"${{{key}}}", value)
                    yaml_content = yaml_content.replace(f"${key}", value)
                yaml_config = yaml.safe_load(yaml_content) or {}

        return Settings(
            environment=yaml_config.get("environment", "development"),
            debug=yaml_config.get("debug", False),
            config_location=yaml_config.get(
                "config_location",
                os.getenv("AUTOSCALER_CONFIG", "/etc/autoscaler-config/autoscaler-config.yaml")
            ),
            state=StateSettings(**yaml_config.get("state", {})),
            cluster_api=ClusterApiSettings(**yaml_config.get("cluster_api", {})),
            redis=RedisSettings(**yaml_config.get("redis", {})),
            logging=LoggingSettings(**yaml_config.get("logging", {})),
            prometheus=PrometheusSettings(**yaml_config.get("prometheus", {})),
            api=ApiSettings(**yaml_config.get("api", {})),
        )


# Global settings instance
settings = Settings()
