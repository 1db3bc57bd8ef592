"""
Integration tests against a fake ingest service.

Drives RemoteLogger end-to-end through httpx.ASGITransport into a FastAPI
app that implements the auth and log endpoints.
"""

import asyncio

import pytest

from remote_logger import RemoteLogger, SessionState
from tests.mocks import BASE_URL


def make_logger(client, **overrides) -> RemoteLogger:
    options = {
        "package_name": "com.demo.app",
        "ingest_url": BASE_URL,
        "buffer_size": 2,
        "flush_interval": 20,
        **overrides,
    }
    return RemoteLogger(client=client, **options)


class TestAuthenticatedRoundtrip:
    @pytest.mark.asyncio
    async def test_new_account_ships_batches(self, asgi_client, fake_state):
        remote = make_logger(asgi_client, password="secure-password-123", is_new_account=True)
        await remote.wait_idle()
        assert remote.state == SessionState.AUTHENTICATED

        remote.info("one")
        remote.warn("two", {"code": 123})
        remote.error("three")
        await asyncio.sleep(0.1)
        await remote.close()

        assert [[e["message"] for e in b["logs"]] for b in fake_state.batches] == [["one", "two"], ["three"]]
        assert all(b["token"] == "token-1" for b in fake_state.batches)
        assert fake_state.batches[0]["logs"][1]["meta"] == {"code": 123}

    @pytest.mark.asyncio
    async def test_unknown_account_disables(self, asgi_client, fake_state):
        remote = make_logger(asgi_client, password="pw")
        await remote.wait_idle()

        for i in range(10):
            remote.info(f"dropped {i}")
        await asyncio.sleep(0.05)
        await remote.close()

        assert remote.state == SessionState.DISABLED
        assert fake_state.batches == []

    @pytest.mark.asyncio
    async def test_revoked_token_loses_batch_then_recovers(self, asgi_client, fake_state):
        fake_state.accounts["com.demo.app"] = "pw"
        remote = make_logger(asgi_client, password="pw")
        await remote.wait_idle()

        fake_state.revoke_all()
        remote.info("lost-1")
        remote.info("lost-2")
        await remote.wait_idle()
        assert fake_state.issued == 2

        remote.info("kept-1")
        remote.info("kept-2")
        await remote.close()

        assert len(fake_state.batches) == 1
        assert fake_state.batches[0]["token"] == "token-2"
        assert [e["message"] for e in fake_state.batches[0]["logs"]] == ["kept-1", "kept-2"]
        assert remote.get_stats()["dropped_count"] == 2


class TestAnonymousRoundtrip:
    @pytest.mark.asyncio
    async def test_rejections_keep_session_usable(self, asgi_client, fake_state):
        remote = make_logger(asgi_client, buffer_size=1)

        fake_state.log_status = 503
        remote.info("lost")
        await remote.wait_idle()

        fake_state.log_status = 200
        remote.info("kept")
        await remote.close()

        assert [b["logs"][0]["message"] for b in fake_state.batches] == ["kept"]
        assert fake_state.batches[0]["token"] is None
        stats = remote.get_stats()
        assert stats["sent_count"] == 1
        assert stats["dropped_count"] == 1
        assert stats["session_state"] == "anonymous_active"
