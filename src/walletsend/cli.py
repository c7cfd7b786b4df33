"""
Command-line interface for walletsend.

Provides commands to look up the wallet address and send a transfer.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

import structlog

from walletsend import __version__
from walletsend.config import Cluster, WalletSendConfig, set_config
from walletsend.core.session import WalletSession
from walletsend.errors import TransferError
from walletsend.node.rpc import SolanaRpcAdapter


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="walletsend",
        description="Send Solana transfers signed by an embedded wallet",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--cluster",
        choices=[c.value for c in Cluster],
        help="Solana cluster (default: devnet)",
    )
    common.add_argument(
        "--rpc-url",
        help="Custom JSON-RPC endpoint",
    )
    common.add_argument(
        "--keypair",
        help="Path to the development wallet keypair (solana-keygen JSON)",
    )
    common.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    common.add_argument(
        "--log-json",
        action="store_true",
        help="Output logs in JSON format",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("address", parents=[common], help="Show the wallet's Solana address")
    subparsers.add_parser("blockhash", parents=[common], help="Fetch the latest blockhash")

    send_parser = subparsers.add_parser("send", parents=[common], help="Sign and send a transfer")
    send_parser.add_argument(
        "--recipient",
        help="Recipient address (default: configured recipient)",
    )
    send_parser.add_argument(
        "--amount",
        type=int,
        help="Amount in lamports (default: 1000000)",
    )
    send_parser.add_argument(
        "--reason",
        help="Reason shown by the wallet when signing",
    )

    return parser


def build_config(args: argparse.Namespace) -> WalletSendConfig:
    """Overlay command-line options on environment configuration."""
    overrides = {}
    if args.cluster:
        overrides["cluster"] = Cluster(args.cluster)
    if args.rpc_url:
        overrides["rpc_url"] = args.rpc_url
    if args.keypair:
        overrides["wallet_keypair_path"] = args.keypair
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_json:
        overrides["log_json"] = True

    config = WalletSendConfig(**overrides)
    set_config(config)
    return config


async def show_address(config: WalletSendConfig) -> int:
    async with WalletSession(config) as session:
        address = await session.wallet_address()
    print(f"Solana Wallet Address: {address}")
    return 0


async def show_blockhash(config: WalletSendConfig) -> int:
    async with SolanaRpcAdapter(config) as node:
        reference = await node.fetch_block_reference()
    print(f"Blockhash: {reference.blockhash}")
    if reference.last_valid_block_height is not None:
        print(f"Last valid block height: {reference.last_valid_block_height}")
    return 0


async def send_transfer(config: WalletSendConfig, args: argparse.Namespace) -> int:
    """Run one transfer attempt and report its outcome."""
    async with WalletSession(config) as session:
        sender = await session.wallet_address()
        print(f"From:   {sender}")
        lamports = args.amount if args.amount is not None else config.default_lamports
        print(f"To:     {args.recipient or config.default_recipient}")
        print(f"Amount: {lamports} lamports")
        print()

        result = await session.send(
            recipient=args.recipient,
            lamports=args.amount,
            reason=args.reason,
        )

        if not result.succeeded:
            print(f"Error: {result.error_message}")
            return 1

        print("Transaction sent successfully!")
        print(f"Transaction Hash: {result.transaction_id}")
        print(f"Explorer: {session.explorer_url(result)}")
        return 0


def main(argv: Optional[list] = None) -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        config = build_config(args)
        setup_logging(config.log_level, config.log_json)

        if args.command == "address":
            code = asyncio.run(show_address(config))
        elif args.command == "blockhash":
            code = asyncio.run(show_blockhash(config))
        else:
            code = asyncio.run(send_transfer(config, args))
    except TransferError as e:
        print(f"Error: {e.reason}")
        code = 1
    except (FileNotFoundError, ValueError) as e:
        print(f"Configuration error: {e}")
        code = 2

    sys.exit(code)


if __name__ == "__main__":
    main()
