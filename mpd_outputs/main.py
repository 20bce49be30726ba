# © Copyright 2025 Stuart Parmenter
# SPDX-License-Identifier: MIT

import argparse
import asyncio
import logging
import sys

from .api.server import start_server
from .client.connection import MpdConnection
from .client.exceptions import MpdError
from .config import Config
from .outputs import OutputEnumerator, find_output, outputs_to_json


def setup_logging(config, override_level=None):
    """Configure logging based on config settings."""
    log_level_str = override_level.lower() if override_level else config.get("log.level").lower()

    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "warn": logging.WARNING,  # alias
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }

    log_level = level_map.get(log_level_str, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="[%(levelname)s] [%(name)s] %(message)s",
        handlers=[logging.StreamHandler()],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mpd-outputs", description="List and switch MPD audio outputs")
    parser.add_argument("--config", default=None, help="Path to YAML/TOML/JSON config file")
    parser.add_argument("--host", default=None, help="MPD host or socket path (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="MPD port (overrides config)")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["debug", "info", "warning", "warn", "error", "critical"],
        type=str.lower,
        help="Set logging level (overrides config file)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List configured outputs")
    list_cmd.add_argument("--json", action="store_true", help="Print outputs as JSON")

    for action in ("enable", "disable", "toggle"):
        cmd = sub.add_parser(action, help=f"{action.capitalize()} one output")
        cmd.add_argument("output_id", type=int, help="Output id as shown by 'list'")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--bind", default=None, help="Address to bind to (overrides api.host)")
    serve.add_argument("--listen-port", type=int, default=None, help="Port to bind to (overrides api.port)")

    return parser


def cmd_list(conn: MpdConnection, as_json: bool, out=None) -> int:
    out = out or sys.stdout
    with OutputEnumerator.start(conn) as outputs:
        if as_json:
            print(outputs_to_json(outputs, release=True, indent=2), file=out)
            return 0
        for output in outputs:
            with output:
                state = "enabled" if output.enabled else "disabled"
                print(f"{output.id}\t{state}\t{output.name}", file=out)
    return 0


def cmd_action(conn: MpdConnection, action: str, output_id: int, out=None) -> int:
    out = out or sys.stdout
    output = find_output(conn, output_id)
    if output is None:
        logging.getLogger("main").error(f"no output with id {output_id}")
        return 1

    with output:
        if action == "toggle":
            output.toggle()
        else:
            output.set_enabled(action == "enable")
        print(f"{action}d output {output_id} ({output.name})", file=out)
    return 0


async def serve(config: Config, bind: str | None, port: int | None) -> None:
    runner = await start_server(
        bind or config.get("api.host"),
        port or int(config.get("api.port")),
    )
    try:
        await asyncio.Future()  # run forever
    finally:
        await runner.cleanup()


def main(argv=None) -> int:
    """Main entry point for the outputs CLI."""
    args = build_parser().parse_args(argv)

    config = Config()
    config.load(args.config)
    if args.host:
        config.set("mpd.host", args.host)
    if args.port:
        config.set("mpd.port", args.port)

    setup_logging(config, override_level=args.log_level)
    logger = logging.getLogger("main")
    logger.debug(f"loaded config: {config.get()}")

    if args.command == "serve":
        asyncio.run(serve(config, args.bind, args.listen_port))
        return 0

    try:
        with MpdConnection.connect(**config.connection_settings()) as conn:
            if args.command == "list":
                return cmd_list(conn, args.json)
            return cmd_action(conn, args.command, args.output_id)
    except MpdError as e:
        logger.error(str(e))
        return 1


def run():
    """Entry point for setuptools console scripts."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logging.getLogger("main").info("Shutting down...")


if __name__ == "__main__":
    run()
