"""
Tests for the DAS indexer client: request construction, result parsing,
retry policy and the failure contract of single calls.
"""

import httpx
import pytest

from shared.clients.indexer.models.Asset import AssetRecord, AssetPage
from shared.clients.indexer.models.AssetProof import AssetProof
from shared.clients.indexer.models.AssetSorting import AssetSorting
from shared.models.config import RetryPolicy
from shared.models.errors import RpcResponseError, RpcTransportError

ASSET_ID = "Fv2Xmzfv9xN5vFCEmwh2D9Yb8GiZx6dZJvmDSrB8mW6A"

ASSET_RESULT = {
    "interface": "V1_NFT",
    "id": ASSET_ID,
    "compression": {
        "eligible": False,
        "compressed": True,
        "data_hash": "5KAwXmC6qYqzmqsgdpQBgxbyz3FvUGDG8Xn8UhQ9LS9R",
        "creator_hash": "8C7hSVNCRrStx7BxazSLeu4c5gHvnHjfNGk8PfGUaaU5",
        "asset_hash": "6jjSgKmrT3pnPf26BdrkRcszcAawm5omtyfEJhzG48VT",
        "tree": "2kuTFCcjbV22wvUmtmgsFR7cas7eZUzAu96jzJUvUcb7",
        "seq": 12,
        "leaf_id": 7,
    },
    "ownership": {"owner": "3pMvTLUA9NzZQd4gi725p89mvND1wRNQM3C8XEv1hTdA", "delegated": False, "frozen": False, "ownership_model": "single"},
    "grouping": [{"group_key": "collection", "group_value": "BMvJBbQq7j2Qj9hhVgvJ9P6WP5b5n6sQvwGvPhKL3cK8"}],
    "burnt": False,
    "royalty": {"basis_points": 0},
}

PROOF_RESULT = {
    "root": "7Nw9sjN1Tb3F6UbVYn4cvoGBEqzMy8ArsRtuLnfoMMzk",
    "proof": ["EmJXiXEAhEN3FfNQtBa5hwR8LC5kHvdLsaGCoRqobfL", "9R3xS4E2LkUKy2Dy43vWiPt1pB7RFbCoUPmqfT8g6j4H"],
    "node_index": 16391,
    "leaf": "6YdZXw49M97mfFTwgQb6kxM2c6eqZkHSaW9XhhoZXtzv",
    "tree_id": "2kuTFCcjbV22wvUmtmgsFR7cas7eZUzAu96jzJUvUcb7",
}


def _page(items: list[dict], page: int = 1, limit: int = 1000) -> dict:
    return {"total": len(items), "limit": limit, "page": page, "items": items}


class TestPayloads:
    """Positional parameter orders must match the indexer exactly."""

    @pytest.mark.asyncio
    async def test_get_assets_by_creator_injects_flag_and_null_cursors(self, make_indexer):
        """Creator variant sends [creator, true, sortBy, limit, page, null, null]."""
        client, recorder = await make_indexer(lambda body: _page([]))
        sort = {"sortBy": "created", "sortDirection": "asc"}

        result = await client.get_assets_by_creator("X", sort, 10, 1, before="b", after="a")

        assert result.ok
        assert recorder.requests[0]["method"] == "getAssetsByCreator"
        assert recorder.requests[0]["params"] == ["X", True, sort, 10, 1, None, None]

    @pytest.mark.asyncio
    async def test_get_assets_by_owner_params(self, make_indexer):
        client, recorder = await make_indexer(lambda body: _page([]))

        await client.get_assets_by_owner("owner", AssetSorting(sort_by="updated", sort_direction="desc"), 50, 3, "b", "a")

        body = recorder.requests[0]
        assert body["jsonrpc"] == "2.0"
        assert body["id"] == "rpd-op-123"
        assert body["params"] == ["owner", {"sortBy": "updated", "sortDirection": "desc"}, 50, 3, "b", "a"]

    @pytest.mark.asyncio
    async def test_get_assets_by_authority_params(self, make_indexer):
        client, recorder = await make_indexer(lambda body: _page([]))

        await client.get_assets_by_authority("auth", None, 20, 2, None, None)

        assert recorder.requests[0]["method"] == "getAssetsByAuthority"
        assert recorder.requests[0]["id"] == "compression-example"
        assert recorder.requests[0]["params"] == ["auth", None, 20, 2, None, None]

    @pytest.mark.asyncio
    async def test_get_assets_by_group_params_and_default_limit(self, make_indexer):
        client, recorder = await make_indexer(lambda body: _page([]))

        await client.get_assets_by_group("collection", "mint")

        assert recorder.requests[0]["params"] == ["collection", "mint", None, 1000, 1, None, None]

    def test_single_asset_payloads(self, helper_config):
        from shared.clients.indexer.das.IndexerClientDas import IndexerClientDas
        client = IndexerClientDas(helper_config=helper_config)

        assert client.build_get_asset_payload(ASSET_ID) == {
            "jsonrpc": "2.0", "method": "getAsset", "id": "compression-example", "params": [ASSET_ID],
        }
        assert client.build_get_asset_proof_payload(ASSET_ID)["params"] == [ASSET_ID]


class TestResults:

    @pytest.mark.asyncio
    async def test_get_asset_parses_record(self, make_indexer):
        client, _ = await make_indexer(lambda body: ASSET_RESULT)

        result = await client.get_asset(ASSET_ID)

        assert result.ok
        asset = result.unwrap()
        assert isinstance(asset, AssetRecord)
        assert asset.compression.leaf_id == 7
        assert asset.get_group_value("collection") == "BMvJBbQq7j2Qj9hhVgvJ9P6WP5b5n6sQvwGvPhKL3cK8"
        assert asset.get_group_value("creator") is None

    @pytest.mark.asyncio
    async def test_get_asset_proof_parses_proof(self, make_indexer):
        client, _ = await make_indexer(lambda body: PROOF_RESULT)

        proof = (await client.get_asset_proof(ASSET_ID)).unwrap()

        assert isinstance(proof, AssetProof)
        assert proof.proof == PROOF_RESULT["proof"]
        assert proof.tree_id == PROOF_RESULT["tree_id"]

    @pytest.mark.asyncio
    async def test_owner_page_returns_envelope(self, make_indexer):
        client, _ = await make_indexer(lambda body: _page([ASSET_RESULT], page=2, limit=1))

        page = (await client.get_assets_by_owner("owner", None, 1, 2, None, None)).unwrap()

        assert isinstance(page, AssetPage)
        assert page.page == 2
        assert [a.id for a in page.items] == [ASSET_ID]

    @pytest.mark.asyncio
    async def test_group_page_returns_items_only(self, make_indexer):
        client, _ = await make_indexer(lambda body: _page([ASSET_RESULT]))

        items = (await client.get_assets_by_group("collection", "mint")).unwrap()

        assert isinstance(items, list)
        assert items[0].id == ASSET_ID

    @pytest.mark.asyncio
    async def test_empty_page_is_success_not_failure(self, make_indexer):
        client, _ = await make_indexer(lambda body: _page([]))

        result = await client.get_assets_by_group("collection", "mint")

        assert result.ok
        assert result.value == []


class TestFailures:

    @pytest.mark.asyncio
    async def test_rpc_error_is_returned_not_raised(self, make_indexer):
        def responder(body):
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32000, "message": "Asset Not Found"}})
        client, recorder = await make_indexer(responder)

        result = await client.get_asset(ASSET_ID)

        assert not result.ok
        assert isinstance(result.error, RpcResponseError)
        assert result.error.code == -32000
        assert len(recorder.requests) == 1  # indexer errors are not retried
        with pytest.raises(RpcResponseError):
            result.unwrap()

    @pytest.mark.asyncio
    async def test_server_errors_are_retried_then_fail(self, make_indexer, no_backoff_sleep):
        client, recorder = await make_indexer(lambda body: httpx.Response(503, text="unavailable"))

        result = await client.get_asset_proof(ASSET_ID)

        assert not result.ok
        assert isinstance(result.error, RpcTransportError)
        assert result.error.status_code == 503
        assert result.error.attempts == 3
        assert len(recorder.requests) == 3
        assert len(no_backoff_sleep) == 2

    @pytest.mark.asyncio
    async def test_transient_failure_recovers(self, make_indexer):
        calls = {"n": 0}

        def responder(body):
            calls["n"] += 1
            if calls["n"] == 1:
                raise httpx.ConnectError("connection refused")
            return ASSET_RESULT
        client, recorder = await make_indexer(responder)

        result = await client.get_asset(ASSET_ID)

        assert result.ok
        assert result.value.id == ASSET_ID
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self, make_indexer):
        client, recorder = await make_indexer(lambda body: httpx.Response(401, text="unauthorized"))

        result = await client.get_asset(ASSET_ID)

        assert not result.ok
        assert result.error.status_code == 401
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_null_result_is_a_failure(self, make_indexer):
        client, _ = await make_indexer(lambda body: None)

        result = await client.get_asset(ASSET_ID)

        assert not result.ok
        assert isinstance(result.error, RpcTransportError)

    @pytest.mark.asyncio
    async def test_malformed_result_is_a_failure(self, make_indexer):
        client, _ = await make_indexer(lambda body: {"proof": []})

        result = await client.get_asset_proof(ASSET_ID)

        assert not result.ok
        assert "unexpected result" in str(result.error)

    @pytest.mark.asyncio
    async def test_request_before_boot_fails(self, helper_config):
        from shared.clients.indexer.das.IndexerClientDas import IndexerClientDas
        client = IndexerClientDas(helper_config=helper_config)

        with pytest.raises(RuntimeError):
            await client.do_rpc_call(client.build_get_asset_payload(ASSET_ID))


class TestConfiguration:

    def test_missing_base_url_fails_validation(self, helper_config, monkeypatch):
        from shared.clients.indexer.das.IndexerClientDas import IndexerClientDas
        monkeypatch.delenv("INDEXER_DAS_BASE_URL")

        with pytest.raises(ValueError, match="INDEXER_DAS_BASE_URL"):
            IndexerClientDas(helper_config=helper_config)

    @pytest.mark.asyncio
    async def test_api_key_is_sent_as_bearer(self, helper_config, monkeypatch):
        from shared.clients.indexer.das.IndexerClientDas import IndexerClientDas
        monkeypatch.setenv("INDEXER_DAS_API_KEY", "secret")
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": "x", "result": ASSET_RESULT})
        client = IndexerClientDas(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(handler))

        await client.get_asset(ASSET_ID)

        assert seen["auth"] == "Bearer secret"
        await client.close()

    def test_retry_settings_come_from_env(self, helper_config, monkeypatch):
        from shared.clients.indexer.das.IndexerClientDas import IndexerClientDas
        monkeypatch.setenv("INDEXER_DAS_MAX_RETRIES", "0")
        monkeypatch.setenv("INDEXER_DAS_BACKOFF_BASE", "0.25")

        client = IndexerClientDas(helper_config=helper_config)

        assert client.retry_policy.max_attempts == 1
        assert client.retry_policy.backoff_base == 0.25


class TestRetryPolicy:

    @pytest.mark.parametrize("attempt,low,high", [(0, 1.0, 2.0), (1, 2.0, 3.0), (2, 4.0, 5.0), (5, 8.0, 9.0)])
    def test_delay_is_exponential_and_capped(self, attempt, low, high):
        policy = RetryPolicy(max_attempts=5, backoff_base=1.0)

        assert low <= policy.delay(attempt) <= high

    def test_at_least_one_attempt(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)
