"""Pytest configuration for HostForge."""
import pytest

from hostcore.base.config import MaintenanceConfig, set_config
from hostcore.base.context import RunContext
from hostcore.observer.journal import DecisionLog
from hostcore.observer.sinks import FileSink

from fakes import ListSink


@pytest.fixture(autouse=True)
def reset_config():
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def live_sink():
    return ListSink()


@pytest.fixture
def journal(tmp_path, live_sink):
    return DecisionLog(live=live_sink, durable=FileSink(tmp_path / "logs" / "run.log"))


@pytest.fixture
def targets(tmp_path):
    """Maintenance targets pointing at scratch paths instead of the real system."""
    return MaintenanceConfig(
        system_drive="C:\\",
        temp_dirs=(tmp_path / "temp_user", tmp_path / "temp_system"),
        update_cache_dirs=(tmp_path / "SoftwareDistribution", tmp_path / "catroot2"),
    )


@pytest.fixture
def make_ctx(journal, targets, tmp_path):
    def _make(**overrides):
        values = dict(
            log=journal,
            log_dir=tmp_path / "logs",
            simulate=False,
            elevated=True,
            targets=targets,
        )
        values.update(overrides)
        return RunContext(**values)

    return _make


def messages(sink, severity=None):
    return [e.message for e in sink.entries if severity is None or e.severity == severity]


@pytest.fixture
def read_messages(live_sink):
    def _read(severity=None):
        return messages(live_sink, severity)

    return _read
