from shared.helper.HelperConfig import HelperConfig
from shared.clients.indexer.IndexerClientInterface import IndexerClientInterface
from shared.models.config import EnvConfig

# request ids the DAS examples use for each method
_REQUEST_IDS = {
    "getAssetsByOwner": "rpd-op-123",
    "getAssetsByGroup": "rpd-op-123",
}
_DEFAULT_REQUEST_ID = "compression-example"


class IndexerClientDas(IndexerClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Das"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="MAX_RETRIES", val_type="number", default=3),
            EnvConfig(env_key="BACKOFF_BASE", val_type="number", default=0.5),
            EnvConfig(env_key="PAGE_LIMIT", val_type="number", default=1000),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"Authorization": f"Bearer {self._api_key}"}
        else:
            return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def _get_request_id(self, rpc_method: str) -> str:
        return _REQUEST_IDS.get(rpc_method, _DEFAULT_REQUEST_ID)
