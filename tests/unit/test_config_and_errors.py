"""Unit tests for configuration loading, the error taxonomy and process execution."""
import os
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from hostcore.base.config import HostForgeConfig, get_config, set_config
from hostcore.errors import (
    CommandFailedError,
    ErrorCode,
    HostForgeError,
    ToolNotFoundError,
    handle_error,
)
from hostcore.toolkit.shell import format_command, powershell_command, ps_quote, run_command


class TestConfig:
    def test_defaults_simulate(self, monkeypatch):
        monkeypatch.delenv("HOSTFORGE_DRY_RUN", raising=False)
        cfg = HostForgeConfig.from_env()
        assert cfg.dry_run is True
        assert cfg.maintenance.low_disk_percent == 10.0
        assert cfg.maintenance.update_services == ("wuauserv", "cryptSvc", "bits", "msiserver")

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOSTFORGE_LOG_DIR", str(tmp_path))
        monkeypatch.setenv("HOSTFORGE_LOW_DISK_PERCENT", "15")
        monkeypatch.setenv("HOSTFORGE_MAX_EVENTS", "3")
        monkeypatch.setenv("HOSTFORGE_TEMP_DIRS", os.pathsep.join([str(tmp_path / "a"), str(tmp_path / "b")]))
        monkeypatch.setenv("HOSTFORGE_DRY_RUN", "false")

        cfg = HostForgeConfig.from_env()

        assert cfg.storage.log_dir == tmp_path
        assert cfg.maintenance.low_disk_percent == 15.0
        assert cfg.maintenance.max_events == 3
        assert cfg.maintenance.temp_dirs == (tmp_path / "a", tmp_path / "b")
        assert cfg.dry_run is False

    def test_invalid_number_is_config_error(self, monkeypatch):
        monkeypatch.setenv("HOSTFORGE_MAX_EVENTS", "many")
        with pytest.raises(HostForgeError) as info:
            HostForgeConfig.from_env()
        assert info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    @pytest.mark.parametrize("raw", ["y", "TRUE ", "enabled", "", "disable"])
    def test_unrecognised_dry_run_keeps_simulating(self, monkeypatch, raw):
        monkeypatch.setenv("HOSTFORGE_DRY_RUN", raw)
        assert HostForgeConfig.from_env().dry_run is True

    @pytest.mark.parametrize("raw", ["0", "false", " No ", "OFF"])
    def test_explicit_false_disables_dry_run(self, monkeypatch, raw):
        monkeypatch.setenv("HOSTFORGE_DRY_RUN", raw)
        assert HostForgeConfig.from_env().dry_run is False

    @pytest.mark.parametrize(
        "name, value",
        [
            ("HOSTFORGE_LOW_DISK_PERCENT", "150"),
            ("HOSTFORGE_MAX_EVENTS", "0"),
            ("HOSTFORGE_TEMP_MAX_AGE_HOURS", "-1"),
        ],
    )
    def test_out_of_range_value_is_invalid_config(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(HostForgeError) as info:
            HostForgeConfig.from_env()
        assert info.value.code == ErrorCode.CONFIG_INVALID

    def test_singleton(self):
        cfg = HostForgeConfig()
        set_config(cfg)
        assert get_config() is cfg


class TestErrors:
    def test_command_failed_message(self):
        err = CommandFailedError(["sfc", "/scannow"], 1, "line one\nWindows Resource Protection could not start\n")
        assert err.code == ErrorCode.TOOL_EXEC_FAILED
        assert str(err) == "[TOOL_002] 'sfc /scannow' exited with code 1: Windows Resource Protection could not start"

    def test_round_trip_dict(self):
        err = ToolNotFoundError("winget")
        restored = HostForgeError.from_dict(err.to_dict())
        assert restored.code == ErrorCode.TOOL_NOT_INSTALLED
        assert restored.details == {"binary": "winget"}

    @pytest.mark.parametrize(
        "exc, code",
        [
            (PermissionError("Access is denied"), ErrorCode.TOOL_PERMISSION_DENIED),
            (FileNotFoundError("sfc"), ErrorCode.TOOL_NOT_INSTALLED),
            (RuntimeError("boom"), ErrorCode.SYSTEM_INTERNAL_ERROR),
        ],
    )
    def test_handle_error_codes(self, exc, code):
        assert handle_error(exc).code == code

    def test_handle_error_passes_through(self):
        err = ToolNotFoundError("choco")
        assert handle_error(err) is err

    def test_handle_error_context(self):
        err = handle_error(RuntimeError("boom"), context="while renaming cache")
        assert err.message == "while renaming cache: boom"


class TestShell:
    def test_missing_binary(self):
        with patch("hostcore.toolkit.shell.subprocess.run", side_effect=FileNotFoundError("nope")):
            with pytest.raises(ToolNotFoundError):
                run_command(["winget", "upgrade"])

    def test_non_zero_exit_raises(self):
        proc = subprocess.CompletedProcess(["sfc"], 2, stdout="", stderr="failed")
        with patch("hostcore.toolkit.shell.subprocess.run", return_value=proc):
            with pytest.raises(CommandFailedError) as info:
                run_command(["sfc", "/scannow"])
        assert info.value.returncode == 2

    def test_non_zero_exit_tolerated_without_check(self):
        proc = subprocess.CompletedProcess(["sc.exe"], 1060, stdout="", stderr="")
        with patch("hostcore.toolkit.shell.subprocess.run", return_value=proc):
            assert run_command(["sc.exe", "query", "Fax"], check=False).returncode == 1060

    def test_runs_with_utf8_capture(self):
        run = MagicMock(return_value=subprocess.CompletedProcess(["x"], 0, stdout="ok", stderr=""))
        with patch("hostcore.toolkit.shell.subprocess.run", run):
            run_command(["x"])
        kwargs = run.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["encoding"] == "utf-8"

    def test_powershell_quoting(self):
        assert ps_quote("it's") == "'it''s'"
        cmd = powershell_command("Get-Service")
        assert cmd[0] == "powershell"
        assert cmd[-1].endswith("Get-Service")
        assert format_command(["a", "b"]) == "a b"
