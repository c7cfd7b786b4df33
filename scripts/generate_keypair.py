#!/usr/bin/env python3
"""
Generate a Solana keypair for the development wallet.

This script writes a solana-keygen compatible JSON keypair and prints the
address to fund on devnet.
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from solders.keypair import Keypair

from walletsend.wallet.keypair import load_keypair, save_keypair


def main():
    parser = argparse.ArgumentParser(description="Generate a development wallet keypair")
    parser.add_argument(
        "--output", "-o",
        default="./keys/wallet.json",
        help="Output path for the keypair (default: ./keys/wallet.json)"
    )
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Overwrite an existing keypair"
    )

    args = parser.parse_args()
    output_path = Path(args.output)

    if output_path.exists() and not args.force:
        keypair = load_keypair(str(output_path))
        print(f"Keypair already exists at {output_path}")
        print("   Use --force to overwrite")
        print(f"\nAddress: {keypair.pubkey()}")
        return

    keypair = Keypair()
    save_keypair(keypair, str(output_path))

    print(f"Keypair saved to: {output_path} (KEEP SECRET!)")
    print(f"\nAddress: {keypair.pubkey()}")
    print("\nTo fund on devnet:")
    print(f"   solana airdrop 1 {keypair.pubkey()} --url devnet")
    print(f"\nThen: WALLETSEND_WALLET_KEYPAIR_PATH={output_path} walletsend send")


if __name__ == "__main__":
    main()
