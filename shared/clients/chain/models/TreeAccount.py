"""Read-only view of an spl-account-compression concurrent merkle tree account.

Layout: a 56 byte header (account type, header version, V1 header data), the tree
itself (sequence number, active index, buffer size, ``max_buffer_size`` change logs,
the rightmost path) and, last, the canopy: the cached upper tree levels.
"""

import math

from borsh_construct import CStruct, U8, U32, U64, Bool
from pydantic import BaseModel
from solders.pubkey import Pubkey

from shared.models.errors import TreeAccountError

HASH_SIZE = 32

TREE_HEADER_LAYOUT = CStruct(
    "account_type" / U8,
    "header_version" / U8,
    "max_buffer_size" / U32,
    "max_depth" / U32,
    "authority" / U8[32],
    "creation_slot" / U64,
    "is_batch_initialized" / Bool,
    "padding" / U8[5],
)
TREE_HEADER_SIZE = 56

# CompressionAccountType::ConcurrentMerkleTree
ACCOUNT_TYPE_CONCURRENT_MERKLE_TREE = 1


def tree_body_size(max_depth: int, max_buffer_size: int) -> int:
    """Size of the tree section between the header and the canopy."""
    change_log = HASH_SIZE + HASH_SIZE * max_depth + 4 + 4
    rightmost_path = HASH_SIZE * max_depth + HASH_SIZE + 4 + 4
    return 8 + 8 + 8 + max_buffer_size * change_log + rightmost_path


def canopy_depth_from_bytes(canopy_byte_length: int) -> int:
    """Number of tree levels cached in a canopy of the given byte length."""
    if canopy_byte_length == 0:
        return 0
    if canopy_byte_length % HASH_SIZE:
        raise TreeAccountError(f"Canopy length {canopy_byte_length} is not a multiple of {HASH_SIZE}")
    depth = math.log2(canopy_byte_length // HASH_SIZE + 2) - 1
    if not depth.is_integer():
        raise TreeAccountError(f"Canopy of {canopy_byte_length} bytes does not hold whole tree levels")
    return int(depth)


class TreeAccount(BaseModel):
    """
    Parsed header of a concurrent merkle tree account.

    Attributes:
        max_depth (int): Depth of the tree.
        max_buffer_size (int): Number of change log entries kept on-chain.
        authority (str): Tree authority, base58.
        creation_slot (int): Slot the tree was created in.
        canopy_depth (int): Number of upper levels cached on-chain.
    """
    max_depth: int
    max_buffer_size: int
    authority: str
    creation_slot: int
    canopy_depth: int

    @classmethod
    def from_account_data(cls, data: bytes) -> "TreeAccount":
        """
        Parses the raw account data.

        Raises:
            TreeAccountError: If the data is not a V1 concurrent merkle tree account.
        """
        if len(data) < TREE_HEADER_SIZE:
            raise TreeAccountError(f"Account data of {len(data)} bytes is too short for a merkle tree header")
        header = TREE_HEADER_LAYOUT.parse(data[:TREE_HEADER_SIZE])
        if header.account_type != ACCOUNT_TYPE_CONCURRENT_MERKLE_TREE:
            raise TreeAccountError(f"Account type {header.account_type} is not a concurrent merkle tree")
        if header.header_version != 0:
            raise TreeAccountError(f"Unsupported merkle tree header version {header.header_version}")

        body_size = tree_body_size(header.max_depth, header.max_buffer_size)
        canopy_bytes = len(data) - TREE_HEADER_SIZE - body_size
        if canopy_bytes < 0:
            raise TreeAccountError(
                f"Account data of {len(data)} bytes is too short for depth {header.max_depth} and buffer {header.max_buffer_size}"
            )
        return cls(
            max_depth=header.max_depth,
            max_buffer_size=header.max_buffer_size,
            authority=str(Pubkey.from_bytes(bytes(header.authority))),
            creation_slot=header.creation_slot,
            canopy_depth=canopy_depth_from_bytes(canopy_bytes),
        )
