"""
Compute the ByteScore of one wallet from the command line.

How to run:
    py -m backend_bytescore.tools.score_wallet <WALLET> [--json] [--rpc-url URL]

Env: SOLANA_RPC_URL / HELIUS_API_KEY / SOLANA_NETWORK, BYTEBONDS_PROGRAM_ID.
Logs go to stderr; the score goes to stdout.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys

from backend_bytescore.analytics.bytescore import compute_reputation_score
from backend_bytescore.analytics.models import ScoreResult
from backend_bytescore.analytics.trust_engine import score_to_risk_level
from backend_bytescore.config import get_settings
from backend_bytescore.config.env import masked_rpc_url

BREAKDOWN_LABELS = (
    ("walletAge", "Wallet age"),
    ("transactionFrequency", "Transaction frequency"),
    ("volume", "Volume"),
    ("diversity", "Token diversity"),
    ("contractUsage", "Contract usage"),
    ("repaymentHistory", "Repayment history"),
)


def format_result(wallet: str, result: ScoreResult) -> str:
    """Human-readable score card."""
    data = result.to_dict()
    lines = [
        f"ByteScore for {wallet}: {result.score}/100 ({score_to_risk_level(result.score)})",
        "",
        "Breakdown:",
    ]
    for key, label in BREAKDOWN_LABELS:
        lines.append(f"  {label:<22} +{data['breakdown'][key]}")
    lines.append(f"  {'Red flags':<22} -{data['breakdown']['redFlags']}")
    lines.append("")
    lines.append("Metrics:")
    for key, value in data["metrics"].items():
        if isinstance(value, float):
            value = round(value, 4)
        lines.append(f"  {key:<22} {value}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compute the ByteScore of a Solana wallet")
    parser.add_argument("wallet", help="Wallet address (base58)")
    parser.add_argument("--json", action="store_true", help="Print the JSON transport format")
    parser.add_argument("--rpc-url", default=None, help="Override SOLANA_RPC_URL")
    args = parser.parse_args(argv)

    settings = get_settings()
    if args.rpc_url:
        settings = dataclasses.replace(settings, solana_rpc_url=args.rpc_url)
    print(f"[bytescore] rpc={masked_rpc_url(settings.solana_rpc_url)}", file=sys.stderr)

    result = asyncio.run(compute_reputation_score(args.wallet, settings))
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_result(args.wallet, result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
