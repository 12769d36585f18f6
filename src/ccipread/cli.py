"""
Command line eth_call with CCIP-Read.

    ccipread --rpc-url https://... --to 0x... --data 0x...
    ccipread --to 0x... --data 0x... --max-attempts 5 --verbose
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from ccipread.core.config import Config
from ccipread.core.exceptions import CCIPReadError
from ccipread.core.logging import configure_logging
from ccipread.core.types import TransactionRequest
from ccipread.providers.rpc import JsonRpcRunner
from ccipread.runner import CCIPReadRunner


def _hex_bytes(value: str) -> bytes:
    raw = value[2:] if value.startswith("0x") else value
    try:
        return bytes.fromhex(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not hex: {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ccipread",
        description="eth_call a contract, following ERC-3668 offchain lookups.",
    )
    parser.add_argument("--rpc-url", help="JSON-RPC endpoint(s), comma separated (default: $CCIPREAD_RPC_URL)")
    parser.add_argument("--to", required=True, help="contract address")
    parser.add_argument("--data", type=_hex_bytes, default=b"", help="calldata as hex")
    parser.add_argument("--from", dest="from_address", help="caller address")
    parser.add_argument("--block", default="latest", help="block tag or number")
    parser.add_argument("--max-attempts", type=int, help="shared attempt budget (default: 20)")
    parser.add_argument("--no-ccip", action="store_true", help="plain eth_call, no offchain lookups")
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    return parser


async def _run(args: argparse.Namespace, config: Config) -> bytes:
    rpc = JsonRpcRunner(
        config.rpc_url,
        timeout=config.rpc_timeout,
        retry_attempts=config.rpc_retry_attempts,
    )
    try:
        async with CCIPReadRunner(rpc, config=config) as runner:
            return await runner.call(
                TransactionRequest(
                    to=args.to,
                    data=args.data,
                    from_address=args.from_address,
                    block=args.block,
                    enable_ccip_read=not args.no_ccip,
                )
            )
    finally:
        await rpc.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        overrides = {}
        if args.rpc_url:
            overrides["rpc_url"] = args.rpc_url
        if args.max_attempts is not None:
            overrides["max_attempts"] = args.max_attempts
        config = Config.from_env(**overrides)
        configure_logging(logging.DEBUG if args.verbose else config.log_level, stream=sys.stderr)
        result = asyncio.run(_run(args, config))
    except CCIPReadError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    print("0x" + result.hex())
    return 0


if __name__ == "__main__":
    sys.exit(main())
