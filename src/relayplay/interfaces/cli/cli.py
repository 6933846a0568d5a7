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

from relayplay.domain.entities.errors import PlaybackError
from relayplay.infrastructure.composition import open_engine
from relayplay.infrastructure.config import AppConfig, load_config
from relayplay.infrastructure.logging.setup import configure_logging
from relayplay.interfaces.api.playback.router import (
    resolve_or_raise,
    resolve_payload,
)
from relayplay.interfaces.main import build_app

log = structlog.get_logger(__name__)


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
        "--proxy-url",
        default=None,
        help="Override the resolve/rewrite proxy base URL.",
    )


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="relayplay")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default=None, help="Bind host (overrides HOST env).")
    serve.add_argument(
        "--port", default=None, type=int, help="Bind port (overrides PORT env)."
    )
    _add_config_flags(serve)

    resolve = sub.add_parser("resolve", help="Resolve a locator and print it.")
    resolve.add_argument("input", help="URL, magnet link or .torrent link.")
    _add_config_flags(resolve)

    probe = sub.add_parser("probe-range", help="Check byte-range support of a URL.")
    probe.add_argument("url")
    _add_config_flags(probe)

    download = sub.add_parser("download-url", help="Print the download URL.")
    download.add_argument("input")
    _add_config_flags(download)

    return parser.parse_args(list(argv) if argv is not None else None)


def _load(args: argparse.Namespace) -> AppConfig:
    cli_overrides: dict[str, Any] = {}
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format
    if args.proxy_url is not None:
        cli_overrides["proxy_base_url"] = args.proxy_url

    return load_config(
        config_path=Path(args.config) if args.config else None,
        dotenv_path=Path(args.dotenv) if args.dotenv else None,
        cli_overrides=cli_overrides,
    )


async def _run_resolve(config: AppConfig, raw: str) -> dict[str, Any]:
    async with open_engine(config) as engine:
        return await resolve_payload(engine, raw)


async def _run_probe(config: AppConfig, url: str) -> dict[str, Any]:
    async with open_engine(config) as engine:
        support = await engine.range_probe.probe(url)
        return {"range_support": support.value}


async def _run_download_url(config: AppConfig, raw: str) -> dict[str, Any]:
    async with open_engine(config) as engine:
        media = await resolve_or_raise(engine, raw)
        return {"download_url": engine.resolver.download_url(media)}


def _serve(args: argparse.Namespace, config: AppConfig, log_config: dict) -> int:
    host = args.host or os.getenv("HOST", "0.0.0.0")
    port = int(args.port or os.getenv("PORT", "7980"))
    uvicorn.run(build_app(config), host=host, port=port, log_config=log_config)
    return 0


def start(argv: Iterable[str] | None = None) -> int:
    """Process entrypoint. Loads config exactly once."""
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)
    config = _load(args)
    log_config = configure_logging(config)

    if args.command == "serve":
        return _serve(args, config, log_config)

    if args.command == "resolve":
        job = _run_resolve(config, args.input)
    elif args.command == "probe-range":
        job = _run_probe(config, args.url)
    else:
        job = _run_download_url(config, args.input)

    try:
        result = asyncio.run(job)
    except PlaybackError as exc:
        print(exc.user_message, file=sys.stderr)
        return 2

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(start())
