from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from linkhop.infrastructure.config import AppConfig, load_config
from linkhop.infrastructure.logging.setup import configure_logging
from linkhop.interfaces.api.resolve.presenter import render_result
from linkhop.interfaces.app import create_app
from linkhop.interfaces.composition import build_http_client, build_resolve_use_case

log = structlog.get_logger(__name__)

DEFAULT_PORT = 7980


def _add_config_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default=None, help="Path to YAML config file.")
    parser.add_argument("--dotenv", default=None, help="Path to .env file.")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )
    parser.add_argument(
        "--max-hops",
        default=None,
        type=int,
        help="Override resolver.max_hops (page fetches per chain).",
    )
    parser.add_argument(
        "--hop-timeout",
        default=None,
        type=float,
        help="Override resolver.hop_timeout_seconds.",
    )


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="linkhop",
        description="Redirect resolution and link classification service.",
    )
    _add_config_flags(parser)
    commands = parser.add_subparsers(dest="command")

    serve = commands.add_parser("serve", help="Run the HTTP service (default).")
    serve.add_argument("--host", default=None, help="Bind host (overrides HOST).")
    serve.add_argument(
        "--port", default=None, type=int, help="Bind port (overrides PORT)."
    )

    resolve = commands.add_parser(
        "resolve", help="Resolve one token or URL and print the result as JSON."
    )
    resolve.add_argument("token", nargs="?", default=None, help="Routing token.")
    resolve.add_argument("--url", default=None, help="Start URL instead of a token.")
    resolve.add_argument("--quality", default=None, help="Quality filter.")
    resolve.add_argument("--action", default=None, choices=["stream", "download"])

    args = parser.parse_args(argv)
    if args.command == "resolve" and not (args.token or args.url):
        parser.error("resolve needs a token or --url")
    return args


def build_cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    elif args.command == "resolve":
        # stdout carries the JSON result
        overrides["log_level"] = "ERROR"
    if args.log_format:
        overrides["log_format"] = args.log_format
    if args.max_hops is not None:
        overrides["max_hops"] = args.max_hops
    if args.hop_timeout is not None:
        overrides["hop_timeout_seconds"] = args.hop_timeout
    return overrides


async def _resolve_once(config: AppConfig, args: argparse.Namespace) -> int:
    async with build_http_client(config) as client:
        use_case = build_resolve_use_case(config, client)
        result = await use_case.execute(
            args.token,
            quality=args.quality,
            action=args.action,
            legacy_params={"url": args.url} if args.url else None,
        )
    print(json.dumps(render_result(result), indent=2, ensure_ascii=False))
    return 0 if result.ok else 1


def _serve(config: AppConfig, args: argparse.Namespace, log_config: dict) -> int:
    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", str(DEFAULT_PORT)))
    log.info("server_starting", host=host, port=port, environment=config.environment)
    uvicorn.run(create_app(config), host=host, port=port, log_config=log_config)
    return 0


def start(argv: Iterable[str] | None = None) -> int:
    """Run `linkhop serve` (default) or `linkhop resolve`; returns the exit code."""
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    config = load_config(
        config_path=Path(args.config) if args.config else None,
        dotenv_path=Path(args.dotenv) if args.dotenv else None,
        cli_overrides=build_cli_overrides(args),
    )
    log_config = configure_logging(config)

    if args.command == "resolve":
        return asyncio.run(_resolve_once(config, args))
    return _serve(config, args, log_config)


if __name__ == "__main__":
    raise SystemExit(start())
