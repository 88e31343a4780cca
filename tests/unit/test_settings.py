#!/usr/bin/env python3
"""
Tests for settings loading
"""

from memorystore_autoscaler.config import Settings


class TestSettings:
    """Settings defaults and YAML overrides"""

    def test_defaults(self):
        settings = Settings()
        assert settings.state.collection_name == "memorystoreClusterAutoscaler"
        assert settings.prometheus.job_name
        assert settings.api.port > 0

    def test_yaml_override(self, tmp_path):
        path = tmp_path / "scaler.yaml"
        path.write_text(
            "environment: production\n"
            "config_location: /srv/clusters.yaml\n"
            "state:\n"
            "  default_backend: sql\n"
            "  sql_url: sqlite://\n"
            "cluster_api:\n"
            "  timeout: 12\n"
            "prometheus:\n"
            "  pushgateway_url: pushgateway:9091\n"
        )

        settings = Settings.load_from_yaml_with_env_override(str(path))

        assert settings.environment == "production"
        assert settings.config_location == "/srv/clusters.yaml"
        assert settings.state.default_backend == "sql"
        assert settings.state.sql_url == "sqlite://"
        assert settings.cluster_api.timeout == 12
        assert settings.prometheus.pushgateway_url == "pushgateway:9091"

    def test_yaml_expands_environment_variables(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SCALER_TEST_MONGO_URL", "mongodb://state-db:27017")
        path = tmp_path / "scaler.yaml"
        path.write_text("state:\n  mongodb_url: ${SCALER_TEST_MONGO_URL}\n")

        settings = Settings.load_from_yaml_with_env_override(str(path))

        assert settings.state.mongodb_url == "mongodb://state-db:27017"

    def test_missing_yaml_uses_defaults(self, tmp_path):
        settings = Settings.load_from_yaml_with_env_override(str(tmp_path / "absent.yaml"))
        assert settings.environment == "development"

    def test_config_dict_omits_secrets(self):
        config = Settings().get_config_dict()
        assert "access_token" not in config["cluster_api"]
        assert "mongodb_url" not in config["state"]
