"""Central configuration helper for the cNFT vault harness."""

import logging
import os

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey

_TRUE_VALUES = ("true", "1", "yes", "on")


class HelperConfig:
    """Central configuration helper. Reads all settings from environment variables.

    Keys are case-insensitive and an empty value counts as unset. Every getter takes a
    ``default``; without one a missing variable raises ``ValueError`` naming the key.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _read_raw(self, key: str, default) -> tuple[str, str | None]:
        key = key.upper()
        raw = os.getenv(key) or None
        if raw is None and default is None:
            raise ValueError(f"Environment variable '{key}' is not set.")
        return key, raw

    def get_string_val(self, key: str, default: str | None = None) -> str:
        """Read a string environment variable, stripped of surrounding whitespace."""
        _, raw = self._read_raw(key, default)
        return raw.strip() if raw is not None else default

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Read a numeric environment variable.

        Returns:
            float | int: An int unless the value contains a decimal point.

        Raises:
            ValueError: If the variable is missing without default, or is not a number.
        """
        key, raw = self._read_raw(key, default)
        if raw is None:
            return default
        try:
            return float(raw) if "." in raw else int(raw)
        except ValueError:
            raise ValueError(f"Environment variable '{key}' is not a valid number: '{raw}'.")

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        """Read a boolean environment variable. ``true``, ``1``, ``yes`` and ``on`` are truthy."""
        _, raw = self._read_raw(key, default)
        if raw is None:
            return default
        return raw.strip().lower() in _TRUE_VALUES

    def get_list_val(self, key: str, default: list[str] | None = None, separator: str = ",", element_type: type = str) -> list:
        """Read a list environment variable in the form "[elem1,elem2,...]".

        Args:
            key (str): Environment variable name (case-insensitive).
            default (list[str] | None): Fallback value if the variable is not set.
            separator (str): The delimiter between elements.
            element_type (type): The type each element is cast to.

        Raises:
            ValueError: If the variable is missing without default, the brackets are missing,
                or an element cannot be cast.
        """
        key, raw = self._read_raw(key, default)
        if raw is None:
            return default
        raw = raw.strip()
        if not (raw.startswith("[") and raw.endswith("]")):
            raise ValueError(f"Environment variable '{key}' must be in the format '[elem1{separator}elem2{separator}...]'. Got: '{raw}'")
        try:
            return [element_type(elem.strip()) for elem in raw[1:-1].split(separator) if elem.strip()]
        except ValueError as e:
            raise ValueError(f"Environment variable '{key}' contains invalid elements for {element_type.__name__}: {e}")

    def get_pubkey_val(self, key: str, default: Pubkey | None = None) -> Pubkey:
        """Read a base58 public key environment variable.

        Args:
            key (str): Environment variable name (case-insensitive).
            default (Pubkey | None): Fallback value if the variable is not set.

        Returns:
            Pubkey: The parsed public key.

        Raises:
            ValueError: If the variable is not set and no default is provided, or is not a valid address.
        """
        raw = self.get_string_val(key, default="")
        if not raw:
            if default is None:
                raise ValueError(f"Environment variable '{key.upper()}' is not set.")
            return default
        try:
            raw_bytes = base58.b58decode(raw)
        except ValueError:
            raw_bytes = b""
        if len(raw_bytes) != 32:
            raise ValueError(f"Environment variable '{key.upper()}' is not a valid base58 address: '{raw}'.")
        return Pubkey.from_bytes(raw_bytes)

    def get_keypair_val(self, key: str) -> Keypair:
        """Read a signer from a base58 secret key environment variable.

        The value may also be a JSON byte array as written by ``solana-keygen``.

        Raises:
            ValueError: If the variable is not set or cannot be parsed.
        """
        raw = self.get_string_val(key)
        try:
            if raw.startswith("["):
                secret = bytes(int(b) for b in raw[1:-1].split(","))
            else:
                secret = base58.b58decode(raw)
            if len(secret) != 64:
                raise ValueError("secret key must be 64 bytes")
            return Keypair.from_bytes(secret)
        except ValueError:
            # never echo secret material
            raise ValueError(f"Environment variable '{key.upper()}' is not a valid keypair.") from None

    def get_logger(self) -> logging.Logger:
        return self._logger
