"""Typed failures raised or carried by the RPC clients and the vault flows."""


class RpcError(RuntimeError):
    """Base class for every failure talking to an RPC endpoint."""

    def __init__(self, message: str, method: str | None = None):
        super().__init__(message)
        self.method = method


class RpcTransportError(RpcError):
    """Network failure, timeout or non-2xx HTTP status after all retries."""

    def __init__(self, message: str, method: str | None = None, status_code: int | None = None, attempts: int = 1):
        super().__init__(message, method=method)
        self.status_code = status_code
        self.attempts = attempts


class RpcResponseError(RpcError):
    """The endpoint answered with a JSON-RPC ``error`` member."""

    def __init__(self, message: str, method: str | None = None, code: int | None = None, data=None):
        super().__init__(message, method=method)
        self.code = code
        self.data = data


class AssetEnumerationError(RpcError):
    """A paginated enumeration stopped before reaching its last page."""

    def __init__(self, message: str, group_key: str, group_value: str, page: int, collected: int, cause: Exception | None = None, cancelled: bool = False):
        super().__init__(message, method="getAssetsByGroup")
        self.group_key = group_key
        self.group_value = group_value
        self.page = page
        self.collected = collected
        self.cause = cause
        self.cancelled = cancelled


class HashDecodeError(ValueError):
    """A base58 string from the indexer could not be turned into 32 bytes."""

    def __init__(self, asset_id: str, field: str, value: str, reason: str):
        super().__init__(f"Cannot decode '{field}' of asset {asset_id}: {reason} (value: {value!r})")
        self.asset_id = asset_id
        self.field = field
        self.value = value


class TreeAccountError(ValueError):
    """The compression tree account is missing or does not parse."""
