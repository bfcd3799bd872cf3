"""Tests for settings loading and startup validation."""

from __future__ import annotations

import pytest

from sitewatch.config import AlertMode, ConfigError, load_settings


class TestLoadSettings:
    def test_full_env(self, full_env) -> None:
        settings = load_settings(_env_file=None)
        assert settings.domain_list == ["https://ok.example", "https://down.example"]
        assert settings.smtp_port == 465
        assert settings.smtp_secure is True
        assert settings.alert_mode == AlertMode.PER_FAILURE
        assert settings.check_interval == 60
        assert settings.request_timeout == 10.0
        assert settings.log_file == "watch-sites.log"

    def test_grouped_flag(self, full_env) -> None:
        full_env.setenv("SEND_GROUPED_MAIL", "1")
        assert load_settings(_env_file=None).alert_mode == AlertMode.GROUPED

    def test_sender_override(self, full_env) -> None:
        full_env.setenv("EMAIL_FROM", "monitor@example.com")
        assert load_settings(_env_file=None).sender == "monitor@example.com"

    @pytest.mark.parametrize("name", ["DOMAINS", "SMTP_HOST", "EMAIL_TO", "SEND_GROUPED_MAIL", "SMTP_PORT"])
    def test_missing_setting_is_named(self, full_env, name: str) -> None:
        full_env.delenv(name)
        with pytest.raises(ConfigError, match=f"{name} is not defined"):
            load_settings(_env_file=None)

    def test_empty_string_counts_as_missing(self, full_env) -> None:
        full_env.setenv("EMAIL_PASSWORD", "")
        with pytest.raises(ConfigError, match="EMAIL_PASSWORD is not defined"):
            load_settings(_env_file=None)

    def test_domains_without_urls(self, full_env) -> None:
        full_env.setenv("DOMAINS", " , ,")
        with pytest.raises(ConfigError, match="DOMAINS is invalid"):
            load_settings(_env_file=None)

    def test_bad_port(self, full_env) -> None:
        full_env.setenv("SMTP_PORT", "smtp")
        with pytest.raises(ConfigError, match="SMTP_PORT is invalid"):
            load_settings(_env_file=None)

    def test_interval_must_be_positive(self, full_env) -> None:
        full_env.setenv("CHECK_INTERVAL", "0")
        with pytest.raises(ConfigError, match="CHECK_INTERVAL"):
            load_settings(_env_file=None)

    def test_reads_dotenv(self, clean_env, tmp_path) -> None:
        (tmp_path / ".env").write_text(
            "DOMAINS=https://a.example\nSMTP_HOST=h\nSMTP_PORT=25\nSMTP_SECURE=0\n"
            "EMAIL_USER=u\nEMAIL_PASSWORD=p\nEMAIL_TO=t\nSEND_GROUPED_MAIL=1\n"
        )
        settings = load_settings()
        assert settings.domain_list == ["https://a.example"]
        assert settings.smtp_secure is False
        assert settings.alert_mode == AlertMode.GROUPED

    def test_each_load_reads_current_environment(self, full_env) -> None:
        assert load_settings(_env_file=None).check_interval == 60
        full_env.setenv("CHECK_INTERVAL", "15")
        assert load_settings(_env_file=None).check_interval == 15
