import random

from pydantic import BaseModel, Field


class EnvConfig(BaseModel):
    """
    Represents a single configuration parameter a client reads from the environment.

    Attributes:
        env_key (str): The raw key of the environment variable, without the client prefix (e.g. "BASE_URL").
        val_type (str): The expected type of the value. Supported types are "string", "number", "bool" and "list".
        default (str | int | float | bool | list | None): Default used when the variable is not set. None marks the variable as required.
    """

    env_key: str
    val_type: str
    default: str | int | float | bool | list | None = None


class RetryPolicy(BaseModel):
    """
    Bounded exponential backoff for RPC calls.

    Attributes:
        max_attempts (int): Total attempts including the first one, at least 1.
        backoff_base (float): Delay before the second attempt, in seconds.
        backoff_cap (float): Upper bound of the exponential part of any delay.
    """

    max_attempts: int = Field(default=3, ge=1)
    backoff_base: float = Field(default=0.5, ge=0)
    backoff_cap: float = 8.0

    def delay(self, attempt: int) -> float:
        """Delay after the zero-based ``attempt`` failed, with up to ``backoff_base`` of jitter."""
        return min(self.backoff_base * (2 ** attempt), self.backoff_cap) + random.random() * self.backoff_base
