#!/usr/bin/env python3
"""Probe every configured RPC candidate and the signer configuration."""

import asyncio
import sys

from ethconvert.chain.connection import ConnectionManager
from ethconvert.config import get_settings
from ethconvert.errors import TransferError
from ethconvert.withdrawal.eth import get_balance

# Colors for output
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
RESET = "\033[0m"
CHECK = "✓"
CROSS = "✗"
WARN = "⚠"


def print_status(name: str, success: bool, message: str = ""):
    """Print status with color."""
    mark = f"{GREEN}{CHECK}{RESET}" if success else f"{RED}{CROSS}{RESET}"
    print(f"  {mark} {name}" + (f" - {message}" if message else ""))


def check_config() -> bool:
    """Show the redacted configuration."""
    print("\n⚙️  Configuration...")
    settings = get_settings()
    safe = settings.get_safe_dict()

    print_status("Chain ID", True, str(safe["chain_id"]))
    print_status("Treasury", True, safe["treasury_address"])
    print_status("Gas reserve", True, f"{safe['amounts']['gas_reserve_eth']} ETH")

    if settings.has_signer_key:
        print_status("Signer key", True, "configured")
    else:
        print(f"  {YELLOW}{WARN}{RESET} Signer key - TREASURY_PRIVATE_KEY not set")
    return True


async def check_candidates() -> bool:
    """Probe each candidate independently, in priority order."""
    print("\n🌐 RPC candidates...")
    settings = get_settings()
    any_ok = False

    for rpc_url in settings.rpc_url_list:
        manager = ConnectionManager(
            rpc_urls=[rpc_url],
            chain_id=settings.chain_id,
            probe_timeout=settings.rpc_probe_timeout,
        )
        outcome = await manager.bootstrap()
        result = outcome.attempts[0]
        if result.ok:
            print_status(rpc_url, True, f"block {result.block_number}")
            any_ok = True
        else:
            print_status(rpc_url, False, (result.error or "")[:60])

    return any_ok


async def check_signer() -> bool:
    """Bind a connection and report the signer address and balance."""
    print("\n🔑 Signer...")
    settings = get_settings()
    if not settings.has_signer_key:
        print(f"  {YELLOW}{WARN}{RESET} Skipped - no signer key")
        return True

    manager = ConnectionManager.from_settings(settings)
    try:
        context = await manager.ensure_connection()
        balance = await get_balance(context, context.signer.address)
    except TransferError as e:
        print_status("Signer", False, e.message)
        return False

    print_status("Address", True, context.signer.address)
    print_status("Balance", True, f"{balance:.6f} ETH")
    return True


async def main():
    """Run all checks."""
    print("=" * 60)
    print("     ETHCONVERT RPC CHECK")
    print("=" * 60)

    results = {
        "config": check_config(),
        "rpc_candidates": await check_candidates(),
        "signer": await check_signer(),
    }

    print("\n" + "=" * 60)
    passed = sum(1 for v in results.values() if v)
    total = len(results)
    for name, success in results.items():
        print_status(name.replace("_", " ").title(), success)

    print()
    if passed == total:
        print(f"  {GREEN}All {total} checks passed!{RESET}")
        return 0
    print(f"  {YELLOW}{passed}/{total} checks passed{RESET}")
    return 1


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
