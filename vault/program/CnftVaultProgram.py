"""Instruction builders for the ``cnft_vault`` Anchor program.

Instruction data is the 8 byte Anchor discriminator ``sha256("global:<name>")[:8]``
followed by the borsh encoded arguments. Account metas follow the order of the
program's ``Accounts`` structs.
"""

import hashlib

from borsh_construct import CStruct, String, U8, U16, U32, U64
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from shared.models.programs import ProgramIds
from vault.program.burn_args import BurnArgs

INITIALIZE_ARGS = CStruct(
    "name" / String,
    "symbol" / String,
    "uri" / String,
)

MINT_CNFT_ARGS = CStruct(
    "name" / String,
    "symbol" / String,
    "uri" / String,
    "seller_fee_basis_points" / U16,
)

BURN_CNFT_ARGS = CStruct(
    "root" / U8[32],
    "data_hash" / U8[32],
    "creator_hash" / U8[32],
    "nonce" / U64,
    "index" / U32,
)


def anchor_sighash(ix_name_snake: str) -> bytes:
    return hashlib.sha256(f"global:{ix_name_snake}".encode()).digest()[:8]


def _meta(pubkey: Pubkey, is_signer: bool = False, is_writable: bool = False) -> AccountMeta:
    return AccountMeta(pubkey=pubkey, is_signer=is_signer, is_writable=is_writable)


class CnftVaultProgram:
    """
    Builds ``initialize``, ``mint_cnft`` and ``burn_cnft`` instructions and derives the
    program addresses they need. Program ids are injected, never hardcoded at call sites.
    """

    def __init__(self, program_ids: ProgramIds):
        self.ids = program_ids

    ##########################################
    ################# PDAS ###################
    ##########################################

    def find_central_authority(self) -> Pubkey:
        return Pubkey.find_program_address([b"central_authority"], self.ids.cnft_vault)[0]

    def find_bubblegum_signer(self) -> Pubkey:
        # `collection_cpi` is the prefix Bubblegum requires for its collection signer
        return Pubkey.find_program_address([b"collection_cpi"], self.ids.bubblegum)[0]

    def find_tree_config(self, merkle_tree: Pubkey) -> Pubkey:
        return Pubkey.find_program_address([bytes(merkle_tree)], self.ids.bubblegum)[0]

    def find_metadata(self, mint: Pubkey) -> Pubkey:
        return Pubkey.find_program_address(
            [b"metadata", bytes(self.ids.token_metadata), bytes(mint)],
            self.ids.token_metadata,
        )[0]

    def find_master_edition(self, mint: Pubkey) -> Pubkey:
        return Pubkey.find_program_address(
            [b"metadata", bytes(self.ids.token_metadata), bytes(mint), b"edition"],
            self.ids.token_metadata,
        )[0]

    def find_associated_token_account(self, owner: Pubkey, mint: Pubkey) -> Pubkey:
        return Pubkey.find_program_address(
            [bytes(owner), bytes(self.ids.token), bytes(mint)],
            self.ids.associated_token,
        )[0]

    ##########################################
    ############# INSTRUCTIONS ###############
    ##########################################

    def initialize(self, name: str, symbol: str, uri: str, signer: Pubkey, mint: Pubkey) -> Instruction:
        """Creates the vault collection: a new mint held by the central authority PDA.

        Args:
            name (str): Collection name.
            symbol (str): Collection symbol.
            uri (str): Collection metadata URI.
            signer (Pubkey): Payer and authority, must sign.
            mint (Pubkey): Fresh collection mint keypair address, must sign.
        """
        central_authority = self.find_central_authority()
        accounts = [
            _meta(signer, is_signer=True, is_writable=True),
            _meta(central_authority, is_writable=True),
            _meta(mint, is_signer=True, is_writable=True),
            _meta(self.find_associated_token_account(central_authority, mint), is_writable=True),
            _meta(self.find_metadata(mint), is_writable=True),
            _meta(self.find_master_edition(mint), is_writable=True),
            _meta(self.ids.token),
            _meta(self.ids.associated_token),
            _meta(self.ids.token_metadata),
            _meta(self.ids.system),
            _meta(self.ids.rent),
        ]
        data = anchor_sighash("initialize") + INITIALIZE_ARGS.build({"name": name, "symbol": symbol, "uri": uri})
        return Instruction(program_id=self.ids.cnft_vault, data=data, accounts=accounts)

    def mint_cnft(
        self,
        name: str,
        symbol: str,
        uri: str,
        seller_fee_basis_points: int,
        payer: Pubkey,
        leaf_owner: Pubkey,
        merkle_tree: Pubkey,
        tree_delegate: Pubkey,
        collection_authority: Pubkey,
        collection_mint: Pubkey,
        collection_metadata: Pubkey | None = None,
        collection_edition: Pubkey | None = None,
        leaf_delegate: Pubkey | None = None,
    ) -> Instruction:
        """Mints a cNFT into an existing tree and verified collection.

        Metadata and edition accounts are derived from the collection mint when not given.
        Without a collection authority record the Bubblegum program id stands in for it.
        """
        if not 0 <= seller_fee_basis_points <= 10_000:
            raise ValueError(f"seller_fee_basis_points must be within 0..10000, got {seller_fee_basis_points}")
        accounts = [
            _meta(payer, is_signer=True),
            _meta(self.find_tree_config(merkle_tree), is_writable=True),
            _meta(leaf_owner),
            _meta(leaf_delegate or leaf_owner),
            _meta(merkle_tree, is_writable=True),
            _meta(tree_delegate, is_signer=True),
            _meta(collection_authority, is_signer=True),
            _meta(self.ids.bubblegum),
            _meta(collection_mint),
            _meta(collection_metadata or self.find_metadata(collection_mint), is_writable=True),
            _meta(collection_edition or self.find_master_edition(collection_mint)),
            _meta(self.find_bubblegum_signer()),
            _meta(self.ids.log_wrapper),
            _meta(self.ids.compression),
            _meta(self.ids.token_metadata),
            _meta(self.ids.bubblegum),
            _meta(self.ids.system),
        ]
        data = anchor_sighash("mint_cnft") + MINT_CNFT_ARGS.build({
            "name": name,
            "symbol": symbol,
            "uri": uri,
            "seller_fee_basis_points": seller_fee_basis_points,
        })
        return Instruction(program_id=self.ids.cnft_vault, data=data, accounts=accounts)

    def burn_cnft(self, args: BurnArgs, leaf_owner: Pubkey, merkle_tree: Pubkey, leaf_delegate: Pubkey | None = None) -> Instruction:
        """Burns a cNFT. The truncated proof is appended as remaining accounts."""
        accounts = [
            _meta(leaf_owner, is_signer=True, is_writable=True),
            _meta(leaf_delegate or leaf_owner, is_signer=True, is_writable=True),
            _meta(merkle_tree, is_writable=True),
            _meta(self.find_tree_config(merkle_tree)),
            _meta(self.ids.log_wrapper),
            _meta(self.ids.compression),
            _meta(self.ids.bubblegum),
            _meta(self.ids.system),
            *args.proof_accounts,
        ]
        data = anchor_sighash("burn_cnft") + BURN_CNFT_ARGS.build({
            "root": args.root,
            "data_hash": args.data_hash,
            "creator_hash": args.creator_hash,
            "nonce": args.nonce,
            "index": args.index,
        })
        return Instruction(program_id=self.ids.cnft_vault, data=data, accounts=accounts)
