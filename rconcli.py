#!/usr/bin/env python3
from __future__ import annotations
import argparse, asyncio, logging, sys
from dataclasses import replace
from pathlib import Path
from srcon.client import connect
from srcon.config import load_options, parse_address
from srcon.errors import RconError

# --- connection helpers ------------------------------------------------------

def open_client(args):
    address, options = load_options()
    if args.address:
        address = args.address
    if args.password is not None:
        options = replace(options, password=args.password)
    if args.timeout is not None:
        options = replace(options, connect_timeout=args.timeout)
    parse_address(address)  # fail on a bad address before dialing
    return address, connect(address, options)

def fail(e: Exception) -> int:
    phase = getattr(e, "phase", None)
    where = f" during {phase}" if phase else ""
    print(f"error{where}: {e}", file=sys.stderr, flush=True)
    return 1

# --- exec / console ----------------------------------------------------------

def do_exec(args):
    try:
        _, client = open_client(args)
        with client:
            out = client.execute(args.command)
    except (RconError, OSError, ValueError) as e:
        return fail(e)
    print(out)
    return 0

def do_console(args):
    """Opens the prompt_toolkit console; plain REPL if it can't run here."""
    try:
        address, client = open_client(args)
    except (RconError, OSError, ValueError) as e:
        return fail(e)

    with client:
        if not sys.stdin.isatty():
            return _fallback_console(client)
        try:
            from srcon.console import run_console
        except ImportError as e:
            print(f"prompt_toolkit UI not available ({e}); falling back to plain RCON.", flush=True)
            return _fallback_console(client)
        tail = Path(args.tail) if args.tail else None
        try:
            asyncio.run(run_console(client, address, tail))
        except KeyboardInterrupt:
            pass
    return 0

def _fallback_console(client):
    from srcon.console import plain_console
    plain_console(client)
    return 0

# --- argparse ----------------------------------------------------------------

def add_conn_args(p):
    p.add_argument("-a", "--address", help="host:port (env RCON_ADDRESS, default localhost:27015)")
    p.add_argument("-p", "--password", help="RCON password (env RCON_PASSWORD)")
    p.add_argument("--timeout", type=float, help="connect timeout in seconds (env RCON_TIMEOUT)")

def build_parser():
    p = argparse.ArgumentParser(prog="rconcli", description="Source RCON client.")
    p.add_argument("-v", "--verbose", action="store_true", help="Log protocol frames to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    pe = sub.add_parser("exec", help="Run one command and print its output")
    add_conn_args(pe)
    pe.add_argument("command")
    pe.set_defaults(func=do_exec)

    pc = sub.add_parser("console", help="Open interactive RCON console (prompt_toolkit)")
    add_conn_args(pc)
    pc.add_argument("--tail", help="Follow this server log file in the console")
    pc.set_defaults(func=do_console)

    return p

def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    return args.func(args)

if __name__ == "__main__":
    raise SystemExit(main())
