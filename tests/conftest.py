import asyncio
import json
import logging

import httpx
import pytest
import pytest_asyncio
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from shared.clients.chain.models.TreeAccount import TREE_HEADER_LAYOUT, tree_body_size
from shared.clients.chain.solana.ChainClientSolana import ChainClientSolana
from shared.clients.indexer.das.IndexerClientDas import IndexerClientDas
from shared.helper.HelperConfig import HelperConfig

INDEXER_URL = "https://indexer.test/rpc"
CHAIN_URL = "https://chain.test/rpc"


class RpcRecorder:
    """
    Fake JSON-RPC endpoint for httpx.MockTransport.

    ``responder`` receives the decoded request body and returns either an httpx.Response
    or a plain ``result`` value that gets wrapped into a JSON-RPC envelope.
    Every request body is kept in ``requests``.
    """

    def __init__(self, responder):
        self.responder = responder
        self.requests: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        answer = self.responder(body)
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": answer})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def rpc_env(monkeypatch):
    monkeypatch.setenv("INDEXER_DAS_BASE_URL", INDEXER_URL)
    monkeypatch.setenv("INDEXER_DAS_MAX_RETRIES", "3")
    monkeypatch.setenv("CHAIN_SOLANA_BASE_URL", CHAIN_URL)
    monkeypatch.delenv("INDEXER_DAS_API_KEY", raising=False)
    monkeypatch.delenv("INDEXER_DAS_PAGE_LIMIT", raising=False)


@pytest.fixture
def helper_config(rpc_env) -> HelperConfig:
    return HelperConfig(logger=logging.getLogger("vault.tests"))


@pytest.fixture(autouse=True)
def no_backoff_sleep(monkeypatch):
    """Retries must not slow the suite down."""
    sleeps: list[float] = []

    async def _fake_sleep(delay, *args, **kwargs):
        sleeps.append(delay)

    monkeypatch.setattr(asyncio, "sleep", _fake_sleep)
    return sleeps


@pytest_asyncio.fixture
async def make_indexer(helper_config):
    """Async factory booting an IndexerClientDas against a RpcRecorder. Clients are closed at teardown."""
    clients: list[IndexerClientDas] = []

    async def _make(responder) -> tuple[IndexerClientDas, RpcRecorder]:
        recorder = RpcRecorder(responder)
        client = IndexerClientDas(helper_config=helper_config)
        await client.boot(transport=recorder.transport())
        clients.append(client)
        return client, recorder

    yield _make
    for client in clients:
        await client.close()


@pytest_asyncio.fixture
async def make_chain(helper_config):
    clients: list[ChainClientSolana] = []

    async def _make(responder) -> tuple[ChainClientSolana, RpcRecorder]:
        recorder = RpcRecorder(responder)
        client = ChainClientSolana(helper_config=helper_config)
        await client.boot(transport=recorder.transport())
        clients.append(client)
        return client, recorder

    yield _make
    for client in clients:
        await client.close()


@pytest.fixture
def hash_bytes():
    """Deterministic 32 byte values, distinct per seed."""
    def _make(seed: int) -> bytes:
        return bytes((seed + i) % 256 for i in range(32))
    return _make


@pytest.fixture
def keypair() -> Keypair:
    return Keypair()


@pytest.fixture
def tree_account_data():
    """Builds raw concurrent merkle tree account data with the given canopy depth."""
    def _make(max_depth: int, max_buffer_size: int, canopy_depth: int, account_type: int = 1, authority: Pubkey | None = None) -> bytes:
        header = TREE_HEADER_LAYOUT.build({
            "account_type": account_type,
            "header_version": 0,
            "max_buffer_size": max_buffer_size,
            "max_depth": max_depth,
            "authority": list(bytes(authority or Pubkey.default())),
            "creation_slot": 123456,
            "is_batch_initialized": False,
            "padding": [0] * 5,
        })
        canopy_nodes = (2 ** (canopy_depth + 1) - 2) if canopy_depth else 0
        return header + bytes(tree_body_size(max_depth, max_buffer_size)) + bytes(32 * canopy_nodes)
    return _make
