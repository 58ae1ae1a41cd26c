"""Tests for ensure_update.config: models and YAML loader."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from ensure_update.config.loader import _expand_env_vars, load_config
from ensure_update.config.models import EnsureUpdateConfig, StoreConfig, VCSConfig
from ensure_update.errors import ConfigError


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("ENSURE_UPDATE_CONFIG", raising=False)
    monkeypatch.delenv("ENSURE_UPDATE_STATE_DIR", raising=False)


# ── Models ─────────────────────────────────────────────────────────


class TestDefaults:
    def test_interval_is_eight_hours(self):
        assert EnsureUpdateConfig().interval == timedelta(hours=8)

    def test_log_level(self):
        assert EnsureUpdateConfig().log_level == "warn"

    def test_vcs_defaults(self):
        cfg = VCSConfig()
        assert cfg.provider == "git"
        assert cfg.git_binary == "git"
        assert cfg.pull_args == []
        assert cfg.timeout == timedelta(minutes=10)

    def test_store_defaults(self):
        cfg = StoreConfig()
        assert cfg.state_dir == "~/.ensure-update/state"
        assert cfg.lock_timeout == 30.0


class TestValidation:
    def test_interval_accepts_duration_text(self):
        assert EnsureUpdateConfig(interval="2h30m").interval == timedelta(hours=2, minutes=30)

    def test_interval_bare_int_is_hours(self):
        assert EnsureUpdateConfig(interval=4).interval == timedelta(hours=4)

    def test_bad_interval_rejected(self):
        with pytest.raises(ValidationError):
            EnsureUpdateConfig(interval="soonish")

    def test_huge_interval_rejected(self):
        with pytest.raises(ValidationError, match="too large"):
            EnsureUpdateConfig(interval="99999999999999h")

    def test_huge_timeout_rejected(self):
        with pytest.raises(ValidationError):
            VCSConfig(timeout=99999999999999)

    def test_unknown_provider_rejected(self):
        with pytest.raises(ValidationError):
            VCSConfig(provider="svn")

    def test_negative_lock_timeout_rejected(self):
        with pytest.raises(ValidationError):
            StoreConfig(lock_timeout=-1)

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            EnsureUpdateConfig(log_level="verbose")


# ── Loader ─────────────────────────────────────────────────────────


class TestLoadConfig:
    def test_no_files_gives_defaults(self):
        assert load_config() == EnsureUpdateConfig()

    def test_cli_path(self, tmp_path):
        cfg_file = tmp_path / "custom.yaml"
        cfg_file.write_text('interval: "30m"\nvcs:\n  pull_args: ["--ff-only"]\n')
        cfg = load_config(str(cfg_file))
        assert cfg.interval == timedelta(minutes=30)
        assert cfg.vcs.pull_args == ["--ff-only"]

    def test_user_global_file(self, tmp_path):
        home_cfg = tmp_path / "home" / ".ensure-update" / "config.yaml"
        home_cfg.parent.mkdir(parents=True)
        home_cfg.write_text("log_level: debug\n")
        assert load_config().log_level == "debug"

    def test_env_var_path(self, tmp_path, monkeypatch):
        cfg_file = tmp_path / "env.yaml"
        cfg_file.write_text("interval: 1d\n")
        monkeypatch.setenv("ENSURE_UPDATE_CONFIG", str(cfg_file))
        assert load_config().interval == timedelta(days=1)

    def test_cli_path_beats_env_var(self, tmp_path, monkeypatch):
        env_file = tmp_path / "env.yaml"
        env_file.write_text("interval: 1d\n")
        cli_file = tmp_path / "cli.yaml"
        cli_file.write_text("interval: 2h\n")
        monkeypatch.setenv("ENSURE_UPDATE_CONFIG", str(env_file))
        assert load_config(str(cli_file)).interval == timedelta(hours=2)

    def test_empty_file_gives_defaults(self, tmp_path):
        cfg_file = tmp_path / "empty.yaml"
        cfg_file.write_text("")
        assert load_config(str(cfg_file)) == EnsureUpdateConfig()

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        cfg_file = tmp_path / "bad.yaml"
        cfg_file.write_text("interval: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(str(cfg_file))

    def test_invalid_values(self, tmp_path):
        cfg_file = tmp_path / "bad.yaml"
        cfg_file.write_text("interval: forever\n")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(str(cfg_file))

    def test_huge_interval_is_config_error(self, tmp_path):
        cfg_file = tmp_path / "huge.yaml"
        cfg_file.write_text("interval: 99999999999999h\n")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(str(cfg_file))

    def test_non_mapping_rejected(self, tmp_path):
        cfg_file = tmp_path / "list.yaml"
        cfg_file.write_text("- 8h\n")
        with pytest.raises(ConfigError):
            load_config(str(cfg_file))

    def test_env_expansion_in_values(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MY_GIT", "/opt/bin/git")
        cfg_file = tmp_path / "c.yaml"
        cfg_file.write_text('vcs:\n  git_binary: "${MY_GIT}"\n')
        assert load_config(str(cfg_file)).vcs.git_binary == "/opt/bin/git"

    def test_state_dir_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ENSURE_UPDATE_STATE_DIR", str(tmp_path / "st"))
        assert load_config().store.state_dir == str(tmp_path / "st")


class TestExpandEnvVars:
    def test_nested(self, monkeypatch):
        monkeypatch.setenv("A", "1")
        assert _expand_env_vars({"x": ["${A}", {"y": "${A}-${MISSING_VAR_XYZ}"}], "n": 3}) == {
            "x": ["1", {"y": "1-"}],
            "n": 3,
        }
