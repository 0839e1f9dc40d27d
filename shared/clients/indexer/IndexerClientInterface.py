import asyncio
from abc import abstractmethod
from typing import Any

from shared.helper.HelperConfig import HelperConfig
from shared.clients.ClientInterface import ClientInterface
from shared.clients.indexer.models.Asset import AssetRecord, AssetPage
from shared.clients.indexer.models.AssetProof import AssetProof
from shared.clients.indexer.models.AssetSorting import AssetSorting
from shared.models.errors import AssetEnumerationError, RpcError, RpcTransportError
from shared.models.result import RpcResult

SortParam = AssetSorting | dict | None


class IndexerClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self.page_limit = int(self.get_config_val("PAGE_LIMIT", default=1000, val_type="number"))

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "indexer"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    @abstractmethod
    def _get_request_id(self, rpc_method: str) -> str:
        """
        Returns the JSON-RPC request id sent with the given method.
        """
        pass

    def _sort_param(self, sort_by: SortParam) -> dict | None:
        if isinstance(sort_by, AssetSorting):
            return sort_by.to_param()
        return sort_by

    def _build_payload(self, rpc_method: str, params: list) -> dict:
        return {
            "jsonrpc": "2.0",
            "method": rpc_method,
            "id": self._get_request_id(rpc_method),
            "params": params,
        }

    def build_get_asset_payload(self, asset_id: str) -> dict:
        return self._build_payload("getAsset", [asset_id])

    def build_get_asset_proof_payload(self, asset_id: str) -> dict:
        return self._build_payload("getAssetProof", [asset_id])

    def build_get_assets_by_owner_payload(self, owner_id: str, sort_by: SortParam, limit: int, page: int, before: str | None, after: str | None) -> dict:
        return self._build_payload("getAssetsByOwner", [owner_id, self._sort_param(sort_by), limit, page, before, after])

    def build_get_assets_by_creator_payload(self, creator_id: str, sort_by: SortParam, limit: int, page: int) -> dict:
        """
        Returns the getAssetsByCreator payload. Unlike the other enumerations the indexer
        expects the ``onlyVerified`` flag right after the creator and always gets null cursors.
        """
        return self._build_payload("getAssetsByCreator", [creator_id, True, self._sort_param(sort_by), limit, page, None, None])

    def build_get_assets_by_authority_payload(self, authority_id: str, sort_by: SortParam, limit: int, page: int, before: str | None, after: str | None) -> dict:
        return self._build_payload("getAssetsByAuthority", [authority_id, self._sort_param(sort_by), limit, page, before, after])

    def build_get_assets_by_group_payload(self, group_key: str, group_value: str, sort_by: SortParam, limit: int, page: int, before: str | None, after: str | None) -> dict:
        return self._build_payload("getAssetsByGroup", [group_key, group_value, self._sort_param(sort_by), limit, page, before, after])

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def _do_guarded_call(self, payload: dict, parser) -> RpcResult:
        """
        Runs one RPC call and parses its result. Every failure is logged and returned
        as a failed RpcResult instead of being raised.
        """
        try:
            raw = await self.do_rpc_call(payload)
            if raw is None:
                raise RpcTransportError(f"{payload['method']} returned an empty result", method=payload["method"])
            return RpcResult.success(parser(raw))
        except RpcError as e:
            self.logging.error("Indexer call %s with params %s failed: %s", payload["method"], payload["params"], e)
            return RpcResult.failure(e)
        except (ValueError, TypeError, KeyError) as e:
            # pydantic.ValidationError is a ValueError
            self.logging.error("Indexer call %s returned an unexpected result: %s", payload["method"], e)
            return RpcResult.failure(RpcTransportError(f"{payload['method']} returned an unexpected result: {e}", method=payload["method"]))

    async def get_asset(self, asset_id: str) -> RpcResult[AssetRecord]:
        """
        Fetches a single asset from the indexer.

        Args:
            asset_id (str): The asset id (base58).

        Returns:
            RpcResult[AssetRecord]: The asset, or the failure.
        """
        return await self._do_guarded_call(self.build_get_asset_payload(asset_id), AssetRecord.model_validate)

    async def get_asset_proof(self, asset_id: str) -> RpcResult[AssetProof]:
        """
        Fetches the current merkle proof of an asset.

        Args:
            asset_id (str): The asset id (base58).

        Returns:
            RpcResult[AssetProof]: The proof, or the failure.
        """
        return await self._do_guarded_call(self.build_get_asset_proof_payload(asset_id), AssetProof.model_validate)

    async def get_assets_by_owner(self, owner_id: str, sort_by: SortParam = None, limit: int | None = None, page: int = 1, before: str | None = None, after: str | None = None) -> RpcResult[AssetPage]:
        """
        Fetches one page of assets owned by a wallet.
        """
        payload = self.build_get_assets_by_owner_payload(owner_id, sort_by, self.page_limit if limit is None else limit, page, before, after)
        return await self._do_guarded_call(payload, AssetPage.model_validate)

    async def get_assets_by_creator(self, creator_id: str, sort_by: SortParam = None, limit: int | None = None, page: int = 1, before: str | None = None, after: str | None = None) -> RpcResult[AssetPage]:
        """
        Fetches one page of assets with a verified creator.

        ``before`` and ``after`` are accepted for signature parity with the other enumerations
        but the indexer request always carries null cursors for this method.
        """
        if before is not None or after is not None:
            self.logging.debug("getAssetsByCreator ignores before/after cursors (%s, %s)", before, after)
        payload = self.build_get_assets_by_creator_payload(creator_id, sort_by, self.page_limit if limit is None else limit, page)
        return await self._do_guarded_call(payload, AssetPage.model_validate)

    async def get_assets_by_authority(self, authority_id: str, sort_by: SortParam = None, limit: int | None = None, page: int = 1, before: str | None = None, after: str | None = None) -> RpcResult[AssetPage]:
        """
        Fetches one page of assets under an update/tree authority.
        """
        payload = self.build_get_assets_by_authority_payload(authority_id, sort_by, self.page_limit if limit is None else limit, page, before, after)
        return await self._do_guarded_call(payload, AssetPage.model_validate)

    async def get_assets_by_group(self, group_key: str, group_value: str, sort_by: SortParam = None, limit: int | None = None, page: int = 1, before: str | None = None, after: str | None = None) -> RpcResult[list[AssetRecord]]:
        """
        Fetches one page of a grouped enumeration and returns only its items.

        Args:
            group_key (str): The grouping key, e.g. "collection".
            group_value (str): The grouping value, e.g. the collection mint.

        Returns:
            RpcResult[list[AssetRecord]]: The page items, or the failure.
        """
        result = await self._get_group_page(group_key, group_value, sort_by, limit, page, before, after)
        if not result.ok:
            return RpcResult.failure(result.error)
        return RpcResult.success(result.value.items)

    async def _get_group_page(self, group_key: str, group_value: str, sort_by: SortParam, limit: int | None, page: int, before: str | None, after: str | None) -> RpcResult[AssetPage]:
        payload = self.build_get_assets_by_group_payload(group_key, group_value, sort_by, self.page_limit if limit is None else limit, page, before, after)
        return await self._do_guarded_call(payload, AssetPage.model_validate)

    async def get_all_assets_by_group(
        self,
        group_key: str,
        group_value: str,
        sort_by: SortParam = None,
        limit: int | None = None,
        page: int = 1,
        before: str | None = None,
        after: str | None = None,
        max_pages: int | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> RpcResult[list[AssetRecord]]:
        """Fetches every page of a grouped enumeration, one page at a time.

        Starts at ``page`` and stops after the first page that holds fewer than ``limit``
        items (an empty page included). When the indexer reports a smaller page limit
        than requested, that limit is the page size. A failed page ends the enumeration with an
        AssetEnumerationError; items collected before the failure are discarded.

        Args:
            group_key (str): The grouping key, e.g. "collection".
            group_value (str): The grouping value.
            limit (int | None): Page size, defaults to the configured page limit.
            page (int): First page to request.
            max_pages (int | None): Upper bound on the number of requests.
            cancel_event (asyncio.Event | None): Checked before every request; when set the
                enumeration stops with a cancelled AssetEnumerationError.

        Returns:
            RpcResult[list[AssetRecord]]: All items in indexer order, or the failure.
        """
        limit = self.page_limit if limit is None else limit
        if limit <= 0:
            raise ValueError(f"Page limit must be positive, got {limit}")
        items: list[AssetRecord] = []
        requested = 0

        def _fail(message: str, cause: Exception | None = None, cancelled: bool = False) -> RpcResult[list[AssetRecord]]:
            error = AssetEnumerationError(message, group_key=group_key, group_value=group_value, page=page, collected=len(items), cause=cause, cancelled=cancelled)
            self.logging.error("Enumeration of %s=%s stopped: %s", group_key, group_value, message)
            return RpcResult.failure(error)

        while True:
            if cancel_event is not None and cancel_event.is_set():
                return _fail(f"cancelled before page {page}", cancelled=True)
            if max_pages is not None and requested >= max_pages:
                return _fail(f"page budget of {max_pages} exhausted before the last page")

            result = await self._get_group_page(group_key, group_value, sort_by, limit, page, before, after)
            requested += 1
            if not result.ok:
                return _fail(f"page {page} failed: {result.error}", cause=result.error)

            page_items = result.value.items
            items.extend(page_items)
            self.logging.info("Requested page %d of %s=%s, total assets so far: %d", page, group_key, group_value, len(items))
            # the indexer may cap the page size below the requested limit
            page_size = min(limit, result.value.limit) if result.value.limit else limit
            if len(page_items) < page_size:
                break
            page += 1
        return RpcResult.success(items)

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def describe(self) -> dict[str, Any]:
        """Returns the effective client settings for log output."""
        return {
            "engine": self.get_engine_name(),
            "timeout": self.timeout,
            "max_retries": self.retry_policy.max_attempts,
            "page_limit": self.page_limit,
        }
