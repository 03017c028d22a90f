#!/usr/bin/env python3
"""
Cardano test environment - indexer smoke test

Checks the Blockfrost connection: protocol parameters, chain tip and,
optionally, the UTxOs at one or more addresses.

Usage:
    python main.py
    python main.py --address addr_test1... --address addr_test1...
"""

import argparse
import asyncio
import logging
import sys

from config import settings
from cardano_env import BlockfrostClient, ChainState, HttpTransport, IndexerError, UtxoFetcher
from cardano_env.cardano import lovelace_to_ada

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def check_indexer(addresses: list) -> bool:
    print("=" * 60)
    print("Cardano Test Environment - Indexer Check")
    print("=" * 60)
    print()
    
    if not settings.blockfrost_api_key:
        print("❌ BLOCKFROST_API_KEY is not set (environment or .env)")
        return False
    
    print(f"Network: {settings.cardano_network}")
    print(f"Indexer: {settings.blockfrost_base_url}")
    print()
    
    client = BlockfrostClient(
        project_id=settings.blockfrost_api_key,
        base_url=settings.blockfrost_base_url,
        timeout=settings.blockfrost_timeout,
        transport=HttpTransport(verify_certificates=settings.blockfrost_verify_tls),
    )
    
    # Step 1: health
    print("[1/3] Checking indexer health...")
    health = await client.health_check()
    if health["status"] != "healthy":
        print(f"❌ FAILED: {health['error']}")
        return False
    print(f"✅ Indexer reachable, tip at slot {health['tip']['slot']:,}")
    
    # Step 2: snapshot
    print()
    print("[2/3] Refreshing chain snapshot...")
    state = ChainState(client)
    try:
        snapshot = await state.refresh()
    except IndexerError as e:
        print(f"❌ FAILED: {e}")
        return False
    print(f"✅ Epoch {snapshot.epoch}, slot {snapshot.current_slot:,}")
    print(f"   Tip: {snapshot.tip.block_hash[:16]}...")
    print(f"   Fee: {snapshot.min_fee_a} * size + {snapshot.min_fee_b}")
    print(f"   Coins per UTxO word: {snapshot.coins_per_utxo_word}")
    
    # Step 3: UTxOs
    print()
    if not addresses:
        print("[3/3] No --address given, skipping UTxO fetch")
        return True
    print(f"[3/3] Fetching UTxOs for {len(addresses)} address(es)...")
    utxos = await UtxoFetcher(client).fetch_for_addresses(addresses)
    total = sum(u.balance.lovelace for u in utxos)
    print(f"✅ {len(utxos)} UTxOs, {lovelace_to_ada(total)} ADA")
    for utxo in utxos[:10]:
        print(f"   {utxo}")
        for asset in utxo.balance.assets:
            print(f"      {asset}")
    return True


async def main():
    """Main entry point"""
    parser = argparse.ArgumentParser()
    parser.add_argument("-a", "--address", action="append", default=[], help="Address to list UTxOs for")
    args = parser.parse_args()
    
    try:
        success = await check_indexer(args.address)
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    asyncio.run(main())
