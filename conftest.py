"""Shared fixtures: temporary database, in-process app client, fake remote server."""

from test_config import setup_test_environment, get_mock_posts, TEST_MOCK_DATA, REMOTE_ACTOR, REMOTE_INBOX

# Settings are read at import time
setup_test_environment()

import httpx
import pytest
import pytest_asyncio

from microblog.core import database
from microblog.core.activitypub.federation import FederationClient
from microblog.core.activitypub.keys import KeyManager
from microblog.core.config import account_config
from microblog.main import app
from microblog.api.deps import get_federation_client
from microblog.models.activitypub import Post


class RemoteServer:
    """Fake remote instance behind httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.actors = {REMOTE_ACTOR: TEST_MOCK_DATA["remote_actor"]}
        self.actor_status = 200
        self.inbox_status = 202
        self.refuse_connections = False
        self.http_client = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.refuse_connections:
            raise httpx.ConnectError("Connection refused", request=request)
        url = str(request.url)
        if request.method == "GET" and url in self.actors:
            if self.actor_status != 200:
                return httpx.Response(self.actor_status)
            return httpx.Response(200, json=self.actors[url],
                                  headers={"Content-Type": "application/activity+json"})
        if request.method == "POST" and url == REMOTE_INBOX:
            return httpx.Response(self.inbox_status)
        return httpx.Response(404)

    @property
    def deliveries(self):
        return [r for r in self.requests if r.method == "POST"]


@pytest_asyncio.fixture
async def db(tmp_path):
    database.configure_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await database.init_db()
    yield database.get_session_factory()
    await database.engine.dispose()


@pytest_asyncio.fixture
async def posts(db):
    async with db() as session:
        for row in get_mock_posts():
            session.add(Post(**row))
        await session.commit()
    return get_mock_posts()


@pytest.fixture
def key_manager(db):
    return KeyManager(db)


@pytest_asyncio.fixture
async def provisioned(key_manager):
    await key_manager.generate_and_store(account_config.account_id)
    return key_manager


@pytest_asyncio.fixture
async def remote():
    server = RemoteServer()
    async with httpx.AsyncClient(transport=httpx.MockTransport(server.handler)) as http_client:
        server.http_client = http_client
        yield server


@pytest_asyncio.fixture
async def client(db, remote):
    # Per-test injection; the process-wide shared client stays untouched
    app.dependency_overrides[get_federation_client] = lambda: FederationClient(remote.http_client)
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url=f"https://{account_config.primary_domain}") as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_federation_client, None)
