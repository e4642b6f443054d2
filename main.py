from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests

from assetid.config import load_config, with_defaults
from assetid.encoder import derive_asset_id
from assetid.errors import AssetIdError
from assetid.logger import get_logger
from assetid.padding import AggregationPolicy
from assetid.rpc import RPCClient, RPCError, TransactionSource
from assetid.transaction import ISSUANCE, IssuanceMetadata, parse_transaction


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Derive DigiAsset IDs from issuance transactions")
    parser.add_argument("--config", default="config.yaml", help="Path to config file")
    parser.add_argument("--local-config", default=None, help="Overrides (node credentials) merged over --config")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--tx-file", help="Verbose transaction JSON ('-' for stdin)")
    source.add_argument("--txid", action="append", help="Issuance txid to fetch over RPC (repeatable)")

    lock = parser.add_mutually_exclusive_group()
    lock.add_argument("--locked", dest="lock_status", action="store_const", const=True, help="Issuance is locked")
    lock.add_argument("--unlocked", dest="lock_status", action="store_const", const=False, help="Issuance is unlocked")
    parser.add_argument("--policy", choices=[p.value for p in AggregationPolicy], default=None)
    parser.add_argument("--divisibility", type=int, default=None)
    parser.add_argument("--no-prevout", action="store_true", help="Do not look up the spent output over RPC")
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> Dict[str, Any]:
    # a transaction file needs no node, so the config file is optional there
    if args.tx_file and not Path(args.config).exists():
        return with_defaults({})
    return load_config(args.config, args.local_config)


def metadata_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Metadata fields given on the command line; the rest come from dadata."""
    fields = {
        "lock_status": args.lock_status,
        "aggregation_policy": args.policy,
        "divisibility": args.divisibility,
    }
    return {name: value for name, value in fields.items() if value is not None}


def derive(raw: Dict[str, Any], overrides: Dict[str, Any]) -> str:
    tx = parse_transaction(raw)
    if overrides:
        base = tx.metadata or IssuanceMetadata(type=ISSUANCE, lock_status=None)
        tx = replace(tx, metadata=replace(base, **overrides))
    return derive_asset_id(tx)


def read_tx_file(path: str) -> Dict[str, Any]:
    if path == "-":
        return json.load(sys.stdin)
    with Path(path).open() as fp:
        return json.load(fp)


def load_transactions(args: argparse.Namespace, cfg: Dict[str, Any], logger) -> Iterable[Tuple[str, Any]]:
    if args.tx_file:
        raw = read_tx_file(args.tx_file)
        yield raw.get("txid", args.tx_file), raw
        return

    fetch_prevout = cfg["resolver"].get("fetch_previous_output", True) and not args.no_prevout
    source = TransactionSource(RPCClient.from_config(cfg, logger), logger, fetch_previous_output=fetch_prevout)
    for txid in args.txid:
        try:
            yield txid, source.fetch(txid)
        except (RPCError, requests.RequestException, ValueError, KeyError) as exc:
            logger.error("Could not fetch %s: %s", txid, exc)
            yield txid, exc


def run(args: argparse.Namespace) -> int:
    cfg = resolve_config(args)
    log_cfg = cfg.get("logging", {})
    logger = get_logger(level=log_cfg.get("level", "INFO"), log_file=log_cfg.get("file"))
    overrides = metadata_overrides(args)

    failures = 0
    for txid, raw in load_transactions(args, cfg, logger):
        if isinstance(raw, Exception):
            failures += 1
            continue
        try:
            asset_id = derive(raw, overrides)
        except AssetIdError as exc:
            logger.error("Derivation failed for %s: %s (%s)", txid, exc, type(exc).__name__)
            failures += 1
            continue
        logger.info("Derived asset ID for %s", txid)
        print(f"{txid} {asset_id}")
    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> int:
    return run(parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())
