"""Vault runner entry point.

Drives the cnft_vault program and the DAS indexer from the command line.
Keys and accounts come from the VAULT_* environment variables.

Usage:
    python -m vault.vault_runner initialize
    python -m vault.vault_runner mint
    python -m vault.vault_runner burn [--asset-id ID]
    python -m vault.vault_runner asset ID
    python -m vault.vault_runner proof ID
    python -m vault.vault_runner group [--group-key collection] [--group-value MINT]
"""

import argparse
import asyncio
import sys

from shared.clients.chain.solana.ChainClientSolana import ChainClientSolana
from shared.clients.indexer.das.IndexerClientDas import IndexerClientDas
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.models.errors import RpcError, TreeAccountError
from shared.models.programs import ProgramIds
from vault.program.CnftVaultProgram import CnftVaultProgram
from vault.services.VaultService import VaultService

CHAIN_COMMANDS = ("initialize", "mint", "burn")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vault", description="cNFT vault harness")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("initialize", help="create the vault collection")
    sub.add_parser("mint", help="mint a cNFT into the configured tree and collection")

    burn = sub.add_parser("burn", help="burn a cNFT owned by the configured leaf owner")
    burn.add_argument("--asset-id", default=None, help="defaults to VAULT_ASSET_ID")

    asset = sub.add_parser("asset", help="print an asset as seen by the indexer")
    asset.add_argument("asset_id")

    proof = sub.add_parser("proof", help="print the merkle proof of an asset")
    proof.add_argument("asset_id")

    group = sub.add_parser("group", help="list every asset of a group")
    group.add_argument("--group-key", default="collection")
    group.add_argument("--group-value", default=None, help="defaults to VAULT_COLLECTION_MINT")
    group.add_argument("--limit", type=int, default=None)
    group.add_argument("--page", type=int, default=1)
    return parser


async def run(args: argparse.Namespace, config: HelperConfig) -> int:
    """Run one command. Returns the process exit code."""
    logger = config.get_logger()
    try:
        indexer_client = IndexerClientDas(helper_config=config)
        chain_client = ChainClientSolana(helper_config=config)
        program = CnftVaultProgram(ProgramIds.from_config(config))
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 2
    vault_service = VaultService(
        helper_config=config,
        indexer_client=indexer_client,
        chain_client=chain_client,
        program=program,
    )
    logger.debug("Indexer client settings: %s", indexer_client.describe())

    try:
        await indexer_client.boot()
        await chain_client.boot()
        if args.command in CHAIN_COMMANDS:
            await chain_client.do_healthcheck()

        if args.command == "initialize":
            signature, mint = await vault_service.do_initialize(
                authority=config.get_keypair_val("VAULT_AUTHORITY_SECRET"),
                name=config.get_string_val("VAULT_COLLECTION_NAME", default="Collection"),
                symbol=config.get_string_val("VAULT_COLLECTION_SYMBOL", default="COL"),
                uri=config.get_string_val("VAULT_COLLECTION_URI"),
            )
            logger.info("Collection %s created in %s", mint, signature, color="green")

        elif args.command == "mint":
            collection_mint = config.get_pubkey_val("VAULT_COLLECTION_MINT")
            signature = await vault_service.do_mint(
                authority=config.get_keypair_val("VAULT_AUTHORITY_SECRET"),
                leaf_owner=config.get_keypair_val("VAULT_LEAF_OWNER_SECRET").pubkey(),
                merkle_tree=config.get_pubkey_val("VAULT_MERKLE_TREE"),
                collection_mint=collection_mint,
                name=config.get_string_val("VAULT_NFT_NAME"),
                symbol=config.get_string_val("VAULT_NFT_SYMBOL"),
                uri=config.get_string_val("VAULT_NFT_URI"),
                seller_fee_basis_points=int(config.get_number_val("VAULT_SELLER_FEE_BASIS_POINTS", default=0)),
                collection_metadata=config.get_pubkey_val("VAULT_COLLECTION_METADATA", default=program.find_metadata(collection_mint)),
                collection_edition=config.get_pubkey_val("VAULT_COLLECTION_EDITION", default=program.find_master_edition(collection_mint)),
            )
            logger.info("Minted cNFT in %s", signature, color="green")

        elif args.command == "burn":
            asset_id = args.asset_id or config.get_string_val("VAULT_ASSET_ID")
            merkle_tree = config.get_string_val("VAULT_MERKLE_TREE", default="")
            signature = await vault_service.do_burn(
                leaf_owner=config.get_keypair_val("VAULT_LEAF_OWNER_SECRET"),
                asset_id=asset_id,
                merkle_tree=config.get_pubkey_val("VAULT_MERKLE_TREE") if merkle_tree else None,
            )
            logger.info("Burned %s in %s", asset_id, signature, color="green")

        elif args.command == "asset":
            asset = (await indexer_client.get_asset(args.asset_id)).unwrap()
            print(asset.model_dump_json(indent=2))

        elif args.command == "proof":
            proof = (await indexer_client.get_asset_proof(args.asset_id)).unwrap()
            print(proof.model_dump_json(indent=2))

        elif args.command == "group":
            group_value = args.group_value or config.get_string_val("VAULT_COLLECTION_MINT")
            assets = (await indexer_client.get_all_assets_by_group(
                args.group_key, group_value, limit=args.limit, page=args.page,
            )).unwrap()
            for asset in assets:
                print(asset.id)
            logger.info("%d assets in %s=%s", len(assets), args.group_key, group_value, color="cyan")
        return 0

    except (RpcError, TreeAccountError, ValueError) as e:
        # HashDecodeError is a ValueError
        logger.error("%s failed: %s", args.command, e)
        return 1
    finally:
        await indexer_client.close()
        await chain_client.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logging()
    config = HelperConfig(logger=logger)
    return asyncio.run(run(args, config))


if __name__ == "__main__":
    sys.exit(main())
