#!/usr/bin/env python3
"""
Command-line control of a DAEnetIP2 relay bank.

Usage:
    python tools/relayctl.py --host 192.168.1.201 --community private get
    python tools/relayctl.py --device relay_board_1 set 0xAA
    python tools/relayctl.py --device relay_board_1 set 10100000   # pins 1..8
    python tools/relayctl.py --host 192.168.1.201 pin 3 1
    python tools/relayctl.py --host 192.168.1.201 --json toggle 3

Boards named with --device are read from config/devices.yml.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.config_loader import ConfigLoader
from daenet.devices import RelayBankController, decode
from daenet.devices.register_codec import validate_pin, validate_pin_value
from daenet.errors import RelayBankError
from daenet.logging_system import configure_logging


def parse_state(text: str) -> list[int]:
    """Parse a bit string (pin 1 first) or a register integer (0xAA, 170)."""
    if len(text) == 8 and set(text) <= {"0", "1"}:
        return [int(c) for c in text]
    try:
        register = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected 8 bits or a register value 0..255, got {text!r}"
        ) from None
    if not 0 <= register <= 0xFF:
        raise argparse.ArgumentTypeError(f"register value out of range: {register}")
    return decode(register)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Read and switch the relays of a DAEnetIP2 board over SNMP v1",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python tools/relayctl.py --host 192.168.1.201 get
  python tools/relayctl.py --device relay_board_1 set 0xAA
  python tools/relayctl.py --host 192.168.1.201 pin 3 1
  python tools/relayctl.py --host 192.168.1.201 toggle 3
        """,
    )

    target = parser.add_mutually_exclusive_group()
    target.add_argument("--device", help="Board name from devices.yml")
    target.add_argument("--host", help="Board address (default localhost)")

    parser.add_argument("--community", help="SNMP v1 community (default public)")
    parser.add_argument("--alias", help="Label used in logs")
    parser.add_argument("--port", type=int, default=161)
    parser.add_argument("--timeout", type=float, default=2.0)
    parser.add_argument("--retries", type=int, default=1)
    parser.add_argument("--config-dir", default="config")
    parser.add_argument("--json", action="store_true", help="Print board state as JSON")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("get", help="Read all relays")

    set_cmd = commands.add_parser("set", help="Write all relays")
    set_cmd.add_argument("state", type=parse_state)

    pin_cmd = commands.add_parser("pin", help="Write one relay")
    pin_cmd.add_argument("pin", type=int, help="Relay 1..8")
    pin_cmd.add_argument("value", type=int, help="0 or 1")

    toggle_cmd = commands.add_parser("toggle", help="Flip one relay")
    toggle_cmd.add_argument("pin", type=int, help="Relay 1..8")

    return parser


def create_controller(args: argparse.Namespace) -> RelayBankController:
    if args.device:
        config = ConfigLoader(config_dir=args.config_dir)
        logging_cfg = config.load_all()["logging"]
        configure_logging(
            log_dir=logging_cfg["log_dir"] if logging_cfg.get("json") else None,
            level=logging_cfg["level"],
        )
        return RelayBankController.from_config(config.get_device(args.device))

    return RelayBankController(
        host=args.host,
        alias=args.alias,
        community=args.community,
        port=args.port,
        timeout=args.timeout,
        retries=args.retries,
    )


def format_state(controller: RelayBankController) -> str:
    state = controller.state
    if state is None:
        return f"{controller}"
    pins = " ".join(f"{pin}:{value}" for pin, value in enumerate(state, start=1))
    return f"{controller.alias}@{controller.host}  {pins}"


def check_arguments(args: argparse.Namespace) -> None:
    """Reject bad pins and values before any SNMP traffic."""
    if args.command in ("pin", "toggle"):
        validate_pin(args.pin)
    if args.command == "pin":
        validate_pin_value(args.value)


async def run(args: argparse.Namespace, controller: RelayBankController) -> int:
    try:
        check_arguments(args)
    except RelayBankError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        await controller.connect()

        if args.command == "set":
            await controller.set_state(args.state)
        elif args.command == "pin":
            await controller.set_pin(args.pin, args.value)
        elif args.command == "toggle":
            await controller.toggle_relay(args.pin)
    except RelayBankError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await controller.disconnect()

    print(controller.to_json() if args.json else format_state(controller))
    return 0


async def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        controller = create_controller(args)
    except (KeyError, ValueError, RelayBankError) as e:
        parser.error(str(e))

    return await run(args, controller)


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
