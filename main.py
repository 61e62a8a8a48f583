#!/usr/bin/env python3
"""
Cardano transaction toolkit - operator CLI

Checks provider readiness, looks up balances and builds unsigned
transactions from a JSON action file. Results are printed as JSON.

Usage:
    python main.py status
    python main.py balance addr_test1...
    python main.py utxos addr_test1...
    python main.py build --from addr_test1... --actions actions.json
    python main.py send --from addr_test1... --to addr_test1... --lovelace 2000000
    python main.py params
    python main.py tip
    python main.py version
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from typing import Any, Optional, Sequence, Tuple

from txkit import LedgerService, TxKitError
from txkit.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cardano transaction toolkit")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="probe providers and report readiness")

    balance = sub.add_parser("balance", help="total lovelace and assets at an address")
    balance.add_argument("address")

    utxos = sub.add_parser("utxos", help="normalised UTxOs at an address")
    utxos.add_argument("address")

    build = sub.add_parser("build", help="compile a JSON action file into an unsigned transaction")
    build.add_argument("--from", dest="from_address", required=True)
    build.add_argument("--actions", required=True, help="JSON file holding a list of actions ('-' for stdin)")

    send = sub.add_parser("send", help="build a single lovelace payment")
    send.add_argument("--from", dest="from_address", required=True)
    send.add_argument("--to", dest="to_address", required=True)
    send.add_argument("--lovelace", required=True)

    sub.add_parser("params", help="current protocol parameters")
    sub.add_parser("tip", help="chain tip from Ogmios")
    sub.add_parser("version", help="Dolos version document")
    return parser


def load_actions(path: str) -> Any:
    if path == "-":
        return json.load(sys.stdin)
    with open(path) as f:
        return json.load(f)


async def run(args: argparse.Namespace, service: LedgerService) -> Tuple[Any, bool]:
    """Execute one command. Returns (payload, success)."""
    if args.command == "status":
        verdict = await service.readiness()
        return verdict.to_dict(), verdict.ready
    if args.command == "balance":
        return (await service.address_balance(args.address)).to_dict(), True
    if args.command == "utxos":
        utxos = await service.address_utxos(args.address)
        return {"success": True, "utxos": [u.to_dict() for u in utxos]}, True
    if args.command == "build":
        tx = await service.build_from_dsl(args.from_address, load_actions(args.actions))
        return tx.to_dict(), True
    if args.command == "send":
        tx = await service.build_send_value(args.from_address, args.to_address, args.lovelace)
        return tx.to_dict(), True
    if args.command == "params":
        return {"success": True, "parameters": await service.protocol_parameters()}, True
    if args.command == "tip":
        return {"success": True, **asdict(await service.chain_tip())}, True
    if args.command == "version":
        return {"success": True, **(await service.fallback_version())}, True
    raise ValueError(f"Unknown command: {args.command}")


async def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    logger.debug(f"Network: {settings.network}, Ogmios: {settings.ogmios_url}, Dolos: {settings.dolos_rest_url}")
    try:
        payload, success = await run(args, LedgerService(settings))
    except TxKitError as e:
        payload, success = e.to_dict(), False
    except (OSError, json.JSONDecodeError) as e:
        payload, success = {"success": False, "error": f"Could not read actions: {e}"}, False

    print(json.dumps(payload, indent=2))
    return 0 if success else 1


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
