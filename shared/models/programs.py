from pydantic import BaseModel, ConfigDict
from solders.pubkey import Pubkey

from shared.helper.HelperConfig import HelperConfig

CNFT_VAULT_PROGRAM_ID = "HcmjtyqZgSeNFdKvHCBCDNEJHSwrf9KveBrbXQKXPxqN"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
TOKEN_METADATA_PROGRAM_ID = "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s"
NOOP_PROGRAM_ID = "noopb9bkMVfRPU8AsbpTUg8AQkHtKwMYZiFUjNRtMmV"
ACCOUNT_COMPRESSION_PROGRAM_ID = "cmtDvXumGCrqC1Age74AVPhSRVXJMd8PJS91L8KbNCK"
BUBBLEGUM_PROGRAM_ID = "BGUMAp9Gq7iTEuizy4pqaxsTyUCBK68MDfK752saRPUY"
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
RENT_SYSVAR_ID = "SysvarRent111111111111111111111111111111111"


class ProgramIds(BaseModel):
    """
    Well-known program addresses the vault instructions reference.

    Defaults are the public mainnet/devnet deployments. Every entry can be overridden
    through a ``PROGRAM_<FIELD>`` environment variable, e.g. ``PROGRAM_BUBBLEGUM``.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    cnft_vault: Pubkey = Pubkey.from_string(CNFT_VAULT_PROGRAM_ID)
    token: Pubkey = Pubkey.from_string(TOKEN_PROGRAM_ID)
    associated_token: Pubkey = Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ID)
    token_metadata: Pubkey = Pubkey.from_string(TOKEN_METADATA_PROGRAM_ID)
    log_wrapper: Pubkey = Pubkey.from_string(NOOP_PROGRAM_ID)
    compression: Pubkey = Pubkey.from_string(ACCOUNT_COMPRESSION_PROGRAM_ID)
    bubblegum: Pubkey = Pubkey.from_string(BUBBLEGUM_PROGRAM_ID)
    system: Pubkey = Pubkey.from_string(SYSTEM_PROGRAM_ID)
    rent: Pubkey = Pubkey.from_string(RENT_SYSVAR_ID)

    @classmethod
    def from_config(cls, helper_config: HelperConfig) -> "ProgramIds":
        """
        Builds the program ids from the environment, falling back to the defaults.
        """
        defaults = cls()
        overrides = {
            name: helper_config.get_pubkey_val(f"PROGRAM_{name}", default=getattr(defaults, name))
            for name in cls.model_fields
        }
        return cls(**overrides)
