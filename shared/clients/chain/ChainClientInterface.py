import base64
from abc import abstractmethod
from typing import Any

from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction

from shared.helper.HelperConfig import HelperConfig
from shared.clients.ClientInterface import ClientInterface
from shared.clients.chain.models.TreeAccount import TreeAccount
from shared.models.errors import RpcResponseError, TreeAccountError


class ChainClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "chain"

    @abstractmethod
    def get_commitment(self) -> str:
        """
        Returns the commitment level used for reads and preflight (e.g. "confirmed").
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    def _payload(self, rpc_method: str, params: list) -> dict:
        return {"jsonrpc": "2.0", "id": 1, "method": rpc_method, "params": params}

    def _unexpected(self, rpc_method: str, result: Any, expected: str) -> RpcResponseError:
        return RpcResponseError(f"{rpc_method} returned an unexpected result, expected {expected}: {result!r:.200}", method=rpc_method)

    async def do_healthcheck(self) -> str:
        """Returns the node health ("ok") or raises when the node is unhealthy."""
        result = await self.do_rpc_call(self._payload("getHealth", []))
        if result != "ok":
            raise self._unexpected("getHealth", result, '"ok"')
        return result

    async def get_account_data(self, address: Pubkey) -> bytes | None:
        """
        Fetches the raw data of an account.

        Returns:
            bytes | None: The account data, or None if the account does not exist.

        Raises:
            RpcResponseError: If the node answers with a malformed result.
        """
        result = await self.do_rpc_call(self._payload(
            "getAccountInfo",
            [str(address), {"encoding": "base64", "commitment": self.get_commitment()}],
        ))
        if not isinstance(result, dict) or "value" not in result:
            raise self._unexpected("getAccountInfo", result, "an object with 'value'")
        value = result["value"]
        if value is None:
            return None
        data = value.get("data") if isinstance(value, dict) else None
        if not (isinstance(data, list) and len(data) == 2):
            raise self._unexpected("getAccountInfo", value, "account data as [data, encoding]")
        encoded, encoding = data
        if encoding != "base64":
            raise self._unexpected("getAccountInfo", encoding, "base64 encoding")
        try:
            return base64.b64decode(encoded, validate=True)
        except (TypeError, ValueError) as e:
            raise RpcResponseError(f"getAccountInfo returned undecodable account data for {address}: {e}", method="getAccountInfo") from e

    async def get_tree_account(self, merkle_tree: Pubkey) -> TreeAccount:
        """
        Fetches and parses a concurrent merkle tree account.

        Raises:
            TreeAccountError: If the account does not exist or does not parse.
        """
        data = await self.get_account_data(merkle_tree)
        if data is None:
            raise TreeAccountError(f"Merkle tree account {merkle_tree} does not exist")
        tree = TreeAccount.from_account_data(data)
        self.logging.debug("Tree %s: depth %d, buffer %d, canopy %d", merkle_tree, tree.max_depth, tree.max_buffer_size, tree.canopy_depth)
        return tree

    async def get_canopy_depth(self, merkle_tree: Pubkey) -> int:
        return (await self.get_tree_account(merkle_tree)).canopy_depth

    async def get_latest_blockhash(self) -> Hash:
        result = await self.do_rpc_call(self._payload("getLatestBlockhash", [{"commitment": self.get_commitment()}]))
        try:
            return Hash.from_string(result["value"]["blockhash"])
        except (TypeError, KeyError, ValueError):
            raise self._unexpected("getLatestBlockhash", result, "a base58 blockhash") from None

    async def send_transaction(self, transaction: VersionedTransaction, skip_preflight: bool = False) -> str:
        """
        Submits a signed transaction.

        Returns:
            str: The transaction signature.

        Raises:
            RpcResponseError: If the node rejects the transaction or returns no signature.
        """
        raw = base64.b64encode(bytes(transaction)).decode()
        result = await self.do_rpc_call(self._payload(
            "sendTransaction",
            [raw, {"encoding": "base64", "skipPreflight": skip_preflight, "preflightCommitment": self.get_commitment()}],
        ))
        if not isinstance(result, str) or not result:
            raise self._unexpected("sendTransaction", result, "a transaction signature")
        return result
