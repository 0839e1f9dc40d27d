"""Indexer asset model as returned by the DAS ``getAsset`` family of methods."""

from pydantic import BaseModel, ConfigDict, Field


class AssetCompression(BaseModel):
    """
    Compression metadata of a cNFT leaf. ``data_hash`` and ``creator_hash`` are base58
    encoded 32 byte hashes, ``leaf_id`` is the leaf index inside the merkle tree.
    """
    model_config = ConfigDict(extra="allow")

    data_hash: str = ""
    creator_hash: str = ""
    asset_hash: str = ""
    tree: str = ""
    seq: int = 0
    leaf_id: int = 0
    compressed: bool = False
    eligible: bool = False


class AssetOwnership(BaseModel):
    model_config = ConfigDict(extra="allow")

    owner: str | None = None
    delegate: str | None = None
    delegated: bool = False
    frozen: bool = False
    ownership_model: str | None = None


class AssetGrouping(BaseModel):
    model_config = ConfigDict(extra="allow")

    group_key: str
    group_value: str | None = None


class AssetRecord(BaseModel):
    """
    Represents a single asset as returned by the indexer. Read-only to the client.
    Fields the indexer sends beyond the ones declared here are kept as extras.
    """
    model_config = ConfigDict(extra="allow")

    id: str
    interface: str | None = None
    compression: AssetCompression = Field(default_factory=AssetCompression)
    ownership: AssetOwnership = Field(default_factory=AssetOwnership)
    grouping: list[AssetGrouping] = []
    content: dict | None = None
    burnt: bool = False
    mutable: bool | None = None

    def get_group_value(self, group_key: str) -> str | None:
        """
        Returns the value of the first grouping entry with the given key (e.g. "collection").
        """
        for grouping in self.grouping:
            if grouping.group_key == group_key:
                return grouping.group_value
        return None


class AssetPage(BaseModel):
    """
    Represents one page of an owner/creator/authority/group enumeration.
    """
    model_config = ConfigDict(extra="allow")

    total: int = 0
    limit: int | None = None
    page: int | None = None
    before: str | None = None
    after: str | None = None
    items: list[AssetRecord] = []
