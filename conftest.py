import pytest

from core.config import ENV_LOG_LEVEL, ENV_TIMEOUT

pytest_plugins = ["tests.fixtures.install"]


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep a developer's config.yml and PULLFINDER_* variables out of tests."""
    monkeypatch.delenv(ENV_LOG_LEVEL, raising=False)
    monkeypatch.delenv(ENV_TIMEOUT, raising=False)
    workdir = tmp_path / "workdir"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir
