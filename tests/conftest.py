import pytest
from flask import Flask


@pytest.fixture()
def app() -> Flask:
    return Flask(__name__)


@pytest.fixture()
def data_file(tmp_path):
    return str(tmp_path / "data" / "data.json")


@pytest.fixture()
def store(data_file):
    from functions.teller_sync.store import SyncStore

    return SyncStore(data_file)


@pytest.fixture(autouse=True)
def patch_store(monkeypatch, store):
    """
    Point the relay at a per-test store under tmp_path.

    Keeps tests away from /data and from records left by other tests.
    """
    import functions.teller_sync.main as teller_main
    import functions.teller_sync.store as store_module

    monkeypatch.setattr(teller_main, "get_store", lambda: store)
    monkeypatch.setattr(store_module, "_store", None)
    monkeypatch.delenv("ADMIN_USER", raising=False)
    monkeypatch.delenv("ADMIN_PASS", raising=False)
    monkeypatch.delenv("CORS_ALLOW_ORIGIN", raising=False)
    monkeypatch.delenv("TELLER_API_HOST", raising=False)
    monkeypatch.delenv("TELLER_TIMEOUT_SECONDS", raising=False)
