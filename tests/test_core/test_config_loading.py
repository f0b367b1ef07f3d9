"""Tests for TOML config file loading and AttachConfig construction."""

from __future__ import annotations

import signal

import pytest
from pydantic import ValidationError

from vmattach.core.types.config import (
    ActivationConfig,
    AttachConfig,
    ChannelConfig,
    SessionConfig,
    load_config,
)


class TestLoadConfig:
    def test_nonexistent_file_returns_defaults(self):
        config = load_config("/nonexistent/path/vmattach.toml")
        assert config.channel.tmp_dir == "/tmp"
        assert config.activation.max_attempts == 10

    def test_none_path_returns_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_config(None)
        assert isinstance(config, AttachConfig)

    def test_picks_up_cwd_file(self, tmp_path, monkeypatch):
        (tmp_path / "vmattach.toml").write_text("verbose = true\n")
        monkeypatch.chdir(tmp_path)
        assert load_config().verbose is True

    def test_load_full_toml(self, tmp_path):
        toml_file = tmp_path / "vmattach.toml"
        toml_file.write_text(
            'verbose = true\n'
            '\n'
            '[channel]\n'
            'tmp_dir = "/var/tmp"\n'
            'proc_root = "/host/proc"\n'
            '\n'
            '[activation]\n'
            'max_attempts = 20\n'
            'poll_interval = 0.5\n'
            'signal = "SIGUSR2"\n'
            '\n'
            '[session]\n'
            'read_timeout = 30.0\n'
            'chunk_size = 4096\n'
        )
        config = load_config(str(toml_file))
        assert config.verbose is True
        assert config.channel.tmp_dir == "/var/tmp"
        assert config.channel.proc_root == "/host/proc"
        assert config.activation.max_attempts == 20
        assert config.activation.poll_interval == 0.5
        assert config.activation.signum == signal.SIGUSR2
        assert config.session.read_timeout == 30.0
        assert config.session.chunk_size == 4096

    def test_load_partial_toml(self, tmp_path):
        """Only [activation] section — other sections should use defaults."""
        toml_file = tmp_path / "vmattach.toml"
        toml_file.write_text("[activation]\nmax_attempts = 3\n")
        config = load_config(str(toml_file))
        assert config.activation.max_attempts == 3
        assert config.activation.poll_interval == 1.0
        assert config.session.read_timeout is None
        assert config.channel.tmp_dir == "/tmp"

    def test_load_empty_toml(self, tmp_path):
        toml_file = tmp_path / "vmattach.toml"
        toml_file.write_text("")
        config = load_config(str(toml_file))
        assert config.activation.signal == "SIGQUIT"

    def test_invalid_value_rejected(self, tmp_path):
        toml_file = tmp_path / "vmattach.toml"
        toml_file.write_text("[activation]\nmax_attempts = 0\n")
        with pytest.raises(ValidationError):
            load_config(str(toml_file))


class TestAttachConfigConstruction:
    def test_defaults(self):
        config = AttachConfig()
        assert config.channel == ChannelConfig(tmp_dir="/tmp", proc_root="/proc")
        assert config.activation.max_attempts == 10
        assert config.activation.poll_interval == 1.0
        assert config.activation.signum == signal.SIGQUIT
        assert config.session.read_timeout is None
        assert config.session.chunk_size == 1024
        assert config.verbose is False

    @pytest.mark.parametrize("name", ["SIGQUIT", "QUIT", "sigquit", "quit"])
    def test_signal_names_normalized(self, name):
        assert ActivationConfig(signal=name).signal == "SIGQUIT"

    def test_unknown_signal(self):
        with pytest.raises(ValidationError, match="Unknown signal"):
            ActivationConfig(signal="SIGNOPE")

    def test_negative_interval(self):
        with pytest.raises(ValidationError):
            ActivationConfig(poll_interval=-1.0)

    def test_zero_timeout_rejected(self):
        with pytest.raises(ValidationError):
            SessionConfig(read_timeout=0)
