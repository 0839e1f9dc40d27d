from shared.helper.HelperConfig import HelperConfig
from shared.clients.chain.ChainClientInterface import ChainClientInterface
from shared.models.config import EnvConfig


class ChainClientSolana(ChainClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._commitment = self.get_config_val("COMMITMENT", default="confirmed", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Solana"

    def get_commitment(self) -> str:
        return self._commitment

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="COMMITMENT", val_type="string", default="confirmed"),
            EnvConfig(env_key="MAX_RETRIES", val_type="number", default=3),
            EnvConfig(env_key="BACKOFF_BASE", val_type="number", default=0.5),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url
