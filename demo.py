#!/usr/bin/env python3
"""
Complete demo of the Multi-Signature Wallet
"""

import logging

from multisig.config import WalletConfig
from multisig.identity import OwnerKey
from multisig.errors import MultiSigError


def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("🏦 MULTI-SIGNATURE WALLET - COMPLETE DEMO")
    print("=" * 60)
    print()

    # Step 1: Setup
    print("🔧 STEP 1: Generating owner keys")
    print("-" * 40)

    owners = []
    for name in ("Alice", "Bob", "Carol"):
        _, public_hex = OwnerKey.generate_key_pair()
        owners.append({'name': name, 'public_key': public_hex})
        print(f"✅ {name}: {public_hex[:16]}...")

    _, recipient = OwnerKey.generate_key_pair()
    print(f"✅ Recipient: {recipient[:16]}...")
    print()

    # Step 2: Deploy
    print("🏗️  STEP 2: Deploying wallet")
    print("-" * 40)

    config = WalletConfig(owners=[o['public_key'] for o in owners], threshold=2)
    wallet = config.build_wallet()
    alice, bob, carol = (o['public_key'] for o in owners)

    print(f"✅ Wallet ID: {wallet.wallet_id}")
    print(f"✅ Owners: {len(wallet.get_owners())}")
    print(f"✅ Confirmations required: {wallet.threshold}")
    print()

    # Step 3: Fund
    print("💰 STEP 3: Funding the wallet")
    print("-" * 40)

    balance = wallet.deposit(alice, 1_000)
    print(f"✅ Deposited 1,000 units, balance {balance:,}")
    print()

    # Step 4: Approve and execute
    print("🗳️  STEP 4: Submit, confirm, execute")
    print("-" * 40)

    index = wallet.submit(alice, recipient, 100, b"")
    print(f"✅ Alice submitted transaction {index}: 100 units")

    wallet.confirm(alice, index)
    print(f"   Alice confirms ({wallet.get_transaction(index).num_confirmations}/{wallet.threshold})")

    try:
        wallet.execute(alice, index)
        print("   ❌ UNEXPECTED: executed with one confirmation")
    except MultiSigError as e:
        print(f"   ✅ EXPECTED FAILURE: {e}")

    wallet.confirm(bob, index)
    print(f"   Bob confirms ({wallet.get_transaction(index).num_confirmations}/{wallet.threshold})")

    wallet.execute(carol, index)
    print(f"   ✅ Carol executed transaction {index}")
    print(f"   💰 Remaining balance: {wallet.get_balance():,}")
    print(f"   💸 Recipient received: {wallet.vault.balance_of(recipient):,}")

    try:
        wallet.execute(alice, index)
        print("   ❌ UNEXPECTED: executed twice")
    except MultiSigError as e:
        print(f"   ✅ EXPECTED FAILURE: {e}")

    print()

    # Step 5: Event log
    print("📜 STEP 5: Event log")
    print("-" * 40)
    for event in wallet.events():
        print(f"   {event.name}: {event.to_dict()}")

    print()
    print("🎯 Demo completed successfully!")


if __name__ == "__main__":
    main()
