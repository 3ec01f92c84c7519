"""Tests for the service entry point and lifespan."""

import pytest

import app as app_module
from config import Config
from shortlink.database.memory import InMemoryURLStore
from shortlink.ratelimit import RedisRateLimiter
from shortlink.service import URLShortenerService


class TrackingStore(InMemoryURLStore):
    """In-memory store that remembers whether it was closed."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.closed = False

    async def close(self):
        self.closed = True
        await super().close()


@pytest.fixture
def tracking_store(monkeypatch):
    store = TrackingStore()
    monkeypatch.setattr(app_module, "create_store", lambda *args, **kwargs: store)
    return store


class TestLifespan:
    """Test startup and shutdown of shared resources."""

    @pytest.mark.asyncio
    async def test_attaches_and_releases_service(self, tracking_store):
        fastapi_app = app_module.build_app(Config(database_url="memory://"))

        async with app_module.lifespan(fastapi_app):
            assert isinstance(fastapi_app.state.service, URLShortenerService)
            assert fastapi_app.state.db is tracking_store
            assert not tracking_store.closed

        assert tracking_store.closed

    @pytest.mark.asyncio
    async def test_failed_startup_closes_store(self, tracking_store, monkeypatch):
        async def refuse(self):
            raise ConnectionError("redis unreachable")

        monkeypatch.setattr(RedisRateLimiter, "connect", refuse)
        fastapi_app = app_module.build_app(
            Config(database_url="memory://", redis_url="redis://localhost:1/0")
        )

        with pytest.raises(ConnectionError):
            async with app_module.lifespan(fastapi_app):
                pytest.fail("startup should not complete")

        assert tracking_store.closed
        assert fastapi_app.state.service is None


class TestMain:
    """Test how main() launches uvicorn."""

    def test_multiple_workers_use_app_factory(self, monkeypatch):
        calls = []
        monkeypatch.setattr(app_module, "load_config", lambda: Config(database_url="memory://", workers=3))
        monkeypatch.setattr(app_module.uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))

        app_module.main()

        assert len(calls) == 1
        args, kwargs = calls[0]
        assert args == ("app:build_app",)
        assert kwargs["factory"] is True
        assert kwargs["workers"] == 3

    def test_single_worker_runs_in_process(self, monkeypatch):
        served = []
        handled_signals = []
        monkeypatch.setattr(app_module, "load_config", lambda: Config(database_url="memory://", workers=1))
        monkeypatch.setattr(app_module.uvicorn, "run", lambda *args, **kwargs: pytest.fail("unexpected uvicorn.run"))
        monkeypatch.setattr(app_module.uvicorn.Server, "run", lambda self: served.append(self.config.app))
        monkeypatch.setattr(app_module.signal, "signal", lambda signum, handler: handled_signals.append(signum))

        app_module.main()

        assert len(served) == 1
        assert served[0].router.lifespan_context is app_module.lifespan
        assert set(handled_signals) == {app_module.signal.SIGINT, app_module.signal.SIGTERM}
