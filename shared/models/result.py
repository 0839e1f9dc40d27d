from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from shared.models.errors import RpcError

T = TypeVar("T")


class RpcResult(BaseModel, Generic[T]):
    """
    Outcome of a single indexer call or of a whole enumeration.

    Exactly one of ``value`` and ``error`` is meaningful: ``ok`` is True when the call
    succeeded, in which case ``value`` holds the result (which may legitimately be
    empty or None). On failure ``error`` carries the typed exception.

    Attributes:
        ok (bool): Whether the call succeeded.
        value (T | None): The result on success.
        error (RpcError | None): The failure on error.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    ok: bool
    value: T | None = None
    error: RpcError | None = None

    @classmethod
    def success(cls, value: T) -> "RpcResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: RpcError) -> "RpcResult[T]":
        return cls(ok=False, error=error)

    def unwrap(self) -> T:
        """
        Returns the value, or raises the carried error.

        Raises:
            RpcError: If the call failed.
        """
        if not self.ok:
            raise self.error
        return self.value
