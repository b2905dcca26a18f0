import pytest

from jsonconfig.options import reset_global_options


@pytest.fixture(autouse=True)
def fresh_global_options():
    """Every test starts from lazily created default global options."""
    reset_global_options()
    yield
    reset_global_options()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test inside a temporary directory so default paths land there."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
