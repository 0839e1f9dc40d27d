"""Turns indexer proof and asset data into the arguments of the ``burn_cnft`` instruction."""

from pydantic import BaseModel, ConfigDict
from solders.instruction import AccountMeta
from solders.pubkey import Pubkey

from shared.clients.indexer.models.Asset import AssetRecord
from shared.clients.indexer.models.AssetProof import AssetProof
from shared.helper.hash_helper import decode_hash
from shared.models.errors import HashDecodeError

U32_MAX = 2**32 - 1


class BurnArgs(BaseModel):
    """
    Arguments of one ``burn_cnft`` call.

    Attributes:
        root (list[int]): Current tree root, 32 bytes.
        data_hash (list[int]): Leaf data hash, 32 bytes.
        creator_hash (list[int]): Leaf creator hash, 32 bytes.
        nonce (int): Leaf nonce (u64), equal to the leaf id.
        index (int): Leaf index (u32), equal to the leaf id.
        proof_accounts (list[AccountMeta]): Proof nodes below the canopy, read-only and non-signing.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    root: list[int]
    data_hash: list[int]
    creator_hash: list[int]
    nonce: int
    index: int
    proof_accounts: list[AccountMeta]


def truncate_proof(proof: list[str], canopy_depth: int | None) -> list[str]:
    """Drops the proof nodes the on-chain canopy already holds (the last ``canopy_depth``)."""
    canopy_depth = canopy_depth or 0
    if canopy_depth < 0:
        raise ValueError(f"Canopy depth must not be negative, got {canopy_depth}")
    return proof[:max(len(proof) - canopy_depth, 0)]


def proof_to_accounts(proof: list[str], asset_id: str) -> list[AccountMeta]:
    """
    Maps proof nodes to read-only, non-signing account metas.

    Raises:
        HashDecodeError: If a node is not a 32 byte base58 string.
    """
    accounts = []
    for position, node in enumerate(proof):
        raw = decode_hash(node, asset_id, f"proof[{position}]")
        accounts.append(AccountMeta(pubkey=Pubkey.from_bytes(bytes(raw)), is_signer=False, is_writable=False))
    return accounts


def build_burn_args(asset_id: str, proof: AssetProof, asset: AssetRecord, canopy_depth: int | None) -> BurnArgs:
    """Assembles every burn argument or fails as a whole.

    Args:
        asset_id (str): The asset being burned, used in error messages.
        proof (AssetProof): Proof as returned by ``getAssetProof``.
        asset (AssetRecord): Asset as returned by ``getAsset``.
        canopy_depth (int | None): Canopy depth of the asset's tree.

    Returns:
        BurnArgs: The instruction arguments and proof accounts.

    Raises:
        HashDecodeError: If any hash or proof node is malformed, or the leaf id is out of range.
    """
    compression = asset.compression
    leaf_id = compression.leaf_id
    if not 0 <= leaf_id <= U32_MAX:
        raise HashDecodeError(asset_id, "compression.leaf_id", str(leaf_id), "leaf id does not fit in u32")

    return BurnArgs(
        root=decode_hash(proof.root, asset_id, "root"),
        data_hash=decode_hash(compression.data_hash, asset_id, "compression.data_hash"),
        creator_hash=decode_hash(compression.creator_hash, asset_id, "compression.creator_hash"),
        nonce=leaf_id,
        index=leaf_id,
        proof_accounts=proof_to_accounts(truncate_proof(proof.proof, canopy_depth), asset_id),
    )
