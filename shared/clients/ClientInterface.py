from abc import ABC, abstractmethod
import asyncio

import httpx
from typing import Any
from shared.models.config import EnvConfig, RetryPolicy
from shared.models.errors import RpcResponseError, RpcTransportError

from shared.helper.HelperConfig import HelperConfig


class ClientInterface(ABC):
    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=30.0)

        # client and config
        self._client: httpx.AsyncClient | None = None
        self.validate_full_configuration()

        # retry policy
        self.retry_policy = RetryPolicy(
            max_attempts=max(1, int(self.get_config_val("MAX_RETRIES", default=3, val_type="number"))),
            backoff_base=float(self.get_config_val("BACKOFF_BASE", default=0.5, val_type="number")),
        )

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Validates that all required configuration values for the client are set and valid.

        Raises:
            ValueError: If any required configuration value is missing or invalid.
        """
        req_config = self._get_required_config()
        for config in req_config:
            _ = self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    def _is_retryable_status(self, status_code: int) -> bool:
        return status_code == 429 or 500 <= status_code < 600

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_client_type(self) -> str:
        """
        Returns the type of the client in lowercase. E.g. "indexer"
        """
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "indexer"
        """
        pass

    def get_engine_name(self) -> str:
        """
        Returns the name of the engine used by the client. E.g. "das"
        """
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        """
        Returns the name of the engine used by the client. E.g. "das"
        """
        pass

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """
        Returns all required configurations for the client.

        Returns:
            list[EnvConfig]: A list containing the details of each required configuration key.
        """
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        """
        Returns:
            str: The full configuration key name for the client. E.g. "INDEXER_DAS_BASE_URL"
        """
        key_prefix = f"{self.get_client_type().upper()}_{self.get_engine_name().upper()}"
        return f"{key_prefix}_{raw_key.upper()}"

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """
        Retrieves the value of a configuration key for the client.

        Args:
            raw_key (str): The raw configuration key name
            default (Any): The default value to return if the configuration key is not set
            val_type (str): The type of the configuration value ("string", "number", "bool", "list")
        """
        key = self._get_config_key_name(raw_key)
        if val_type == "string":
            return self._helper_config.get_string_val(key, default=default)
        elif val_type == "number":
            return self._helper_config.get_number_val(key, default=default)
        elif val_type == "bool":
            return self._helper_config.get_bool_val(key, default=default)
        elif val_type == "list":
            return self._helper_config.get_list_val(key, default=default)
        else:
            raise ValueError(f"Unsupported config value type '{val_type}' for env key '{raw_key}' in {self.get_client_type().upper()} client '{self.get_engine_name()}'.")

    ################ AUTH ##################
    @abstractmethod
    def _get_auth_header(self) -> dict:
        """
        Returns the authentication header for the RPC endpoint, if an API key is set.

        Returns:
            dict: A dictionary containing the auth data
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_base_url(self) -> str:
        """
        Returns the URL of the RPC endpoint from env variables

        Returns:
            str: The endpoint URL (e.g. "https://devnet.helius-rpc.com/?api-key=...")
        """
        pass

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    async def boot(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Initialise the HTTP client.

        Args:
            transport: Optional transport, e.g. an ``httpx.MockTransport`` in tests.
        """
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def do_request(
        self,
        method: str = "POST",
        json: dict | list | None = None,
        additional_headers: dict | None = None,
    ) -> httpx.Response:
        """Send a single HTTP request to the RPC endpoint.

        Args:
            method: HTTP method.
            json: JSON-serialisable body (sets Content-Type automatically).
            additional_headers: Extra headers that override the defaults.

        Returns:
            The raw httpx.Response, whatever its status.

        Raises:
            RuntimeError: If the client is not initialised.
            httpx.HTTPError: If the request could not be completed.
        """
        if self._client is None:
            raise RuntimeError("HTTP client not initialised. Call boot() before making requests.")

        headers: dict = {}
        headers.update(self._get_auth_header())
        if additional_headers:
            headers.update(additional_headers)

        return await self._client.request(
            method,
            url=self._get_base_url(),
            headers=headers,
            timeout=self.timeout,
            json=json,
        )

    async def do_rpc_call(self, payload: dict) -> Any:
        """Send a JSON-RPC 2.0 request and return its ``result`` member.

        Transport errors and HTTP 429/5xx answers are retried up to ``retry_policy.max_attempts`` attempts
        with exponential backoff. A JSON-RPC ``error`` member is never retried.

        Args:
            payload (dict): The full JSON-RPC request body.

        Returns:
            Any: The ``result`` member of the response (may be None).

        Raises:
            RpcTransportError: If every attempt failed on the transport or HTTP level.
            RpcResponseError: If the endpoint answered with an ``error`` member.
        """
        rpc_method = payload.get("method")
        last_error: RpcTransportError | None = None
        for attempt in range(self.retry_policy.max_attempts):
            try:
                resp = await self.do_request(method="POST", json=payload)
            except httpx.HTTPError as e:
                last_error = RpcTransportError(f"{rpc_method} request failed: {e!r}", method=rpc_method, attempts=attempt + 1)
            else:
                if resp.status_code < 300:
                    return self._extract_rpc_result(rpc_method, resp)
                last_error = RpcTransportError(
                    f"{rpc_method} request failed with status {resp.status_code}: {resp.text[:200]}",
                    method=rpc_method,
                    status_code=resp.status_code,
                    attempts=attempt + 1,
                )
                if not self._is_retryable_status(resp.status_code):
                    break

            if attempt + 1 < self.retry_policy.max_attempts:
                delay = self.retry_policy.delay(attempt)
                self.logging.warning(
                    "%s via %s failed (attempt %d/%d): %s, retrying in %.1fs",
                    rpc_method, self.get_engine_name(), attempt + 1, self.retry_policy.max_attempts, last_error, delay,
                )
                await asyncio.sleep(delay)
        raise last_error

    def _extract_rpc_result(self, rpc_method: str, resp: httpx.Response) -> Any:
        try:
            body = resp.json()
        except ValueError as e:
            raise RpcTransportError(f"{rpc_method} returned a non-JSON body: {e}", method=rpc_method, status_code=resp.status_code)
        if not isinstance(body, dict):
            raise RpcTransportError(f"{rpc_method} returned an unexpected body type: {type(body).__name__}", method=rpc_method, status_code=resp.status_code)
        if body.get("error") is not None:
            error = body["error"]
            if isinstance(error, dict):
                raise RpcResponseError(
                    f"{rpc_method} failed: {error.get('message', error)}",
                    method=rpc_method,
                    code=error.get("code"),
                    data=error.get("data"),
                )
            raise RpcResponseError(f"{rpc_method} failed: {error}", method=rpc_method)
        return body.get("result")
