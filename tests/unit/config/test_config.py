"""Tests for configuration loading."""

from pathlib import Path

import pytest

from pds.config import Config, JobConfig, RepositoryConfig
from pds.domain.deposit.model.registry import RepositoryConfigRegistry
from pds.domain.deposit.model.value import DepositStatus


class TestRepositoryConfig:
    def test_default_mapping_is_dspace(self):
        config = RepositoryConfig(key="dspace")

        assert config.status_mapping["http://dspace.org/state/archived"] == DepositStatus.ACCEPTED
        assert config.status_mapping["http://dspace.org/state/withdrawn"] == DepositStatus.REJECTED
        assert config.status_mapping["http://dspace.org/state/inreview"] == DepositStatus.SUBMITTED

    def test_key_is_normalized(self):
        assert RepositoryConfig(key="  JScholarship ").key == "jscholarship"

    def test_registry_lookup_ignores_case(self):
        registry = RepositoryConfigRegistry.from_configs([RepositoryConfig(key="PMC")])

        assert registry.get("pmc") is not None
        assert registry.get("Pmc") is not None
        assert registry.get(None) is None
        assert "PMC" in registry


class TestJobsConfig:
    def test_initial_delays_are_staggered(self):
        jobs = Config().jobs

        assert (
            jobs.submission_status.initial_delay
            < jobs.deposit_status.initial_delay
            < jobs.failed_deposit_retry.initial_delay
        )

    def test_for_schedule_uses_schedule_names(self):
        jobs = Config().jobs

        assert jobs.for_schedule("deposit-status") is jobs.deposit_status
        assert jobs.for_schedule("failed-deposit-retry") is jobs.failed_deposit_retry

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("PDS_JOBS__DEPOSIT_STATUS__DELAY", "42")
        monkeypatch.setenv("PDS_JOBS__FAILED_DEPOSIT_RETRY__ENABLED", "false")

        jobs = Config().jobs

        assert jobs.deposit_status.delay == 42.0
        assert not jobs.failed_deposit_retry.enabled


class TestYamlConfig:
    def test_loads_repositories_from_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        config_file = tmp_path / "pds.yaml"
        config_file.write_text(
            """
store:
  backend: memory
jobs:
  deposit_status:
    delay: 120
repositories:
  - key: JScholarship
    timeout: 10
    auth:
      username: depositor
      password: s3cret
    statement_uri_prefix: http://dspace-prod:8080/swordv2
    statement_uri_replacement: https://jscholarship.library.jhu.edu/swordv2
  - key: custom
    status_mapping:
      http://example.org/state/published: accepted
      http://example.org/state/pending: submitted
"""
        )
        monkeypatch.setenv("PDS_CONFIG_FILE", str(config_file))

        config = Config()

        assert config.store.backend == "memory"
        assert config.jobs.deposit_status == JobConfig(delay=120, initial_delay=0.0)
        jscholarship, custom = config.repositories
        assert jscholarship.key == "jscholarship"
        assert jscholarship.auth is not None and jscholarship.auth.username == "depositor"
        assert custom.status_mapping == {
            "http://example.org/state/published": DepositStatus.ACCEPTED,
            "http://example.org/state/pending": DepositStatus.SUBMITTED,
        }

    def test_env_takes_precedence_over_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        config_file = tmp_path / "pds.yaml"
        config_file.write_text("store:\n  backend: memory\n")
        monkeypatch.setenv("PDS_CONFIG_FILE", str(config_file))
        monkeypatch.setenv("PDS_STORE__BACKEND", "sql")

        assert Config().store.backend == "sql"
