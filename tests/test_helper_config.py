import logging

import base58
import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from shared.helper.HelperConfig import HelperConfig


@pytest.fixture
def config() -> HelperConfig:
    return HelperConfig(logger=logging.getLogger("vault.tests"))


class TestHelperConfig:

    def test_string_required_and_default(self, config, monkeypatch):
        monkeypatch.delenv("VAULT_NFT_NAME", raising=False)

        assert config.get_string_val("vault_nft_name", default="Road") == "Road"
        with pytest.raises(ValueError, match="VAULT_NFT_NAME"):
            config.get_string_val("VAULT_NFT_NAME")

    def test_empty_string_counts_as_unset(self, config, monkeypatch):
        monkeypatch.setenv("VAULT_NFT_NAME", "")

        assert config.get_string_val("VAULT_NFT_NAME", default="x") == "x"

    def test_numbers(self, config, monkeypatch):
        monkeypatch.setenv("INDEXER_TIMEOUT", "2.5")
        monkeypatch.setenv("INDEXER_DAS_MAX_RETRIES", "4")
        monkeypatch.setenv("INDEXER_DAS_PAGE_LIMIT", "many")

        assert config.get_number_val("INDEXER_TIMEOUT") == 2.5
        assert config.get_number_val("INDEXER_DAS_MAX_RETRIES") == 4
        with pytest.raises(ValueError):
            config.get_number_val("INDEXER_DAS_PAGE_LIMIT")

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("YES", True), ("false", False), ("no", False)])
    def test_bools(self, config, monkeypatch, raw, expected):
        monkeypatch.setenv("VAULT_SKIP_PREFLIGHT", raw)

        assert config.get_bool_val("VAULT_SKIP_PREFLIGHT") is expected

    def test_lists(self, config, monkeypatch):
        monkeypatch.setenv("SOME_LIST", "[1, 2 ,3]")

        assert config.get_list_val("SOME_LIST", element_type=int) == [1, 2, 3]

        monkeypatch.setenv("SOME_LIST", "1,2")
        with pytest.raises(ValueError):
            config.get_list_val("SOME_LIST")

    def test_pubkey(self, config, monkeypatch):
        key = Pubkey.new_unique()
        monkeypatch.setenv("VAULT_MERKLE_TREE", str(key))

        assert config.get_pubkey_val("VAULT_MERKLE_TREE") == key

        monkeypatch.setenv("VAULT_MERKLE_TREE", "<merkle tree account>")
        with pytest.raises(ValueError, match="VAULT_MERKLE_TREE"):
            config.get_pubkey_val("VAULT_MERKLE_TREE")

    def test_pubkey_default(self, config, monkeypatch):
        monkeypatch.delenv("VAULT_COLLECTION_METADATA", raising=False)
        fallback = Pubkey.new_unique()

        assert config.get_pubkey_val("VAULT_COLLECTION_METADATA", default=fallback) == fallback

    def test_keypair_from_base58_and_json(self, config, monkeypatch):
        keypair = Keypair()
        monkeypatch.setenv("VAULT_AUTHORITY_SECRET", base58.b58encode(bytes(keypair)).decode())
        monkeypatch.setenv("VAULT_LEAF_OWNER_SECRET", "[" + ",".join(str(b) for b in bytes(keypair)) + "]")

        assert config.get_keypair_val("VAULT_AUTHORITY_SECRET").pubkey() == keypair.pubkey()
        assert config.get_keypair_val("VAULT_LEAF_OWNER_SECRET").pubkey() == keypair.pubkey()

    def test_invalid_keypair_does_not_echo_secret(self, config, monkeypatch):
        monkeypatch.setenv("VAULT_AUTHORITY_SECRET", "abcdef")

        with pytest.raises(ValueError) as excinfo:
            config.get_keypair_val("VAULT_AUTHORITY_SECRET")

        assert "abcdef" not in str(excinfo.value)
