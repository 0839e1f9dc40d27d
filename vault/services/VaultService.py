"""Vault service.

Runs the cNFT vault flows end to end: creating the collection, minting a cNFT
into an existing tree, and burning a cNFT using the indexer's proof.
"""

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction

from shared.clients.chain.ChainClientInterface import ChainClientInterface
from shared.clients.indexer.IndexerClientInterface import IndexerClientInterface
from shared.clients.indexer.models.Asset import AssetRecord
from shared.helper.HelperConfig import HelperConfig
from vault.program.CnftVaultProgram import CnftVaultProgram
from vault.program.burn_args import build_burn_args


class VaultService:
    """Orchestrates vault transactions between the indexer, the chain and the program client."""

    def __init__(
        self,
        helper_config: HelperConfig,
        indexer_client: IndexerClientInterface,
        chain_client: ChainClientInterface,
        program: CnftVaultProgram,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._indexer = indexer_client
        self._chain = chain_client
        self._program = program
        self._skip_preflight = helper_config.get_bool_val("VAULT_SKIP_PREFLIGHT", default=True)

    ##########################################
    ################ FLOWS ###################
    ##########################################

    async def do_initialize(self, authority: Keypair, name: str, symbol: str, uri: str) -> tuple[str, Pubkey]:
        """Create the vault collection with a fresh mint.

        Returns:
            tuple[str, Pubkey]: The transaction signature and the new collection mint.
        """
        mint = Keypair()
        self.logging.info("Central authority: %s", self._program.find_central_authority())
        self.logging.info("Collection mint: %s", mint.pubkey())
        ix = self._program.initialize(name, symbol, uri, signer=authority.pubkey(), mint=mint.pubkey())
        signature = await self._send([ix], payer=authority, signers=[authority, mint])
        return signature, mint.pubkey()

    async def do_mint(
        self,
        authority: Keypair,
        leaf_owner: Pubkey,
        merkle_tree: Pubkey,
        collection_mint: Pubkey,
        name: str,
        symbol: str,
        uri: str,
        seller_fee_basis_points: int = 0,
        collection_metadata: Pubkey | None = None,
        collection_edition: Pubkey | None = None,
    ) -> str:
        """Mint a cNFT to ``leaf_owner``. The authority pays and signs as tree delegate and collection authority."""
        ix = self._program.mint_cnft(
            name,
            symbol,
            uri,
            seller_fee_basis_points,
            payer=authority.pubkey(),
            leaf_owner=leaf_owner,
            merkle_tree=merkle_tree,
            tree_delegate=authority.pubkey(),
            collection_authority=authority.pubkey(),
            collection_mint=collection_mint,
            collection_metadata=collection_metadata,
            collection_edition=collection_edition,
        )
        return await self._send([ix], payer=authority, signers=[authority])

    async def do_burn(self, leaf_owner: Keypair, asset_id: str, merkle_tree: Pubkey | None = None) -> str:
        """Burn a cNFT owned by ``leaf_owner``.

        The proof is fetched fresh, truncated by the tree's canopy depth and passed as
        remaining accounts. When ``merkle_tree`` is None the tree from the proof is used.

        Raises:
            RpcError: If the indexer or the chain cannot be reached.
            HashDecodeError: If the indexer data does not decode.
            TreeAccountError: If the tree account cannot be read.
        """
        proof = (await self._indexer.get_asset_proof(asset_id)).unwrap()
        asset = (await self._indexer.get_asset(asset_id)).unwrap()
        if merkle_tree is None:
            merkle_tree = Pubkey.from_string(proof.tree_id or asset.compression.tree)
        self._check_burnable(asset, leaf_owner.pubkey())

        canopy_depth = await self._chain.get_canopy_depth(merkle_tree)
        args = build_burn_args(asset_id, proof, asset, canopy_depth)
        self.logging.info(
            "Burning %s: leaf %d, proof %d of %d nodes (canopy depth %d), tree config %s",
            asset_id, args.index, len(args.proof_accounts), len(proof.proof), canopy_depth,
            self._program.find_tree_config(merkle_tree),
        )
        ix = self._program.burn_cnft(args, leaf_owner=leaf_owner.pubkey(), merkle_tree=merkle_tree)
        return await self._send([ix], payer=leaf_owner, signers=[leaf_owner])

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _check_burnable(self, asset: AssetRecord, owner: Pubkey) -> None:
        if asset.burnt:
            raise ValueError(f"Asset {asset.id} is already burnt")
        if not asset.compression.compressed:
            raise ValueError(f"Asset {asset.id} is not compressed")
        if asset.ownership.owner and asset.ownership.owner != str(owner):
            self.logging.warning("Asset %s is owned by %s, not by the signing leaf owner %s", asset.id, asset.ownership.owner, owner)

    async def _send(self, instructions: list[Instruction], payer: Keypair, signers: list[Keypair]) -> str:
        """Compile, sign and submit a v0 transaction.

        Returns:
            str: The transaction signature.
        """
        blockhash = await self._chain.get_latest_blockhash()
        message = MessageV0.try_compile(
            payer=payer.pubkey(),
            instructions=instructions,
            address_lookup_table_accounts=[],
            recent_blockhash=blockhash,
        )
        transaction = VersionedTransaction(message, signers)
        signature = await self._chain.send_transaction(transaction, skip_preflight=self._skip_preflight)
        self.logging.info("Transaction sent: %s", signature)
        return signature
