from pydantic import BaseModel, ConfigDict


class AssetProof(BaseModel):
    """
    Merkle proof of a cNFT leaf as returned by ``getAssetProof``.

    Attributes:
        proof (list[str]): Sibling hashes from the leaf level upwards, base58 encoded.
        root (str): Current tree root, base58 encoded.
        tree_id (str): Address of the merkle tree account.
        node_index (int | None): Index of the leaf node in the full tree.
        leaf (str | None): Leaf hash, base58 encoded.
    """
    model_config = ConfigDict(extra="allow")

    proof: list[str] = []
    root: str
    tree_id: str = ""
    node_index: int | None = None
    leaf: str | None = None
