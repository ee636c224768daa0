#!/usr/bin/env python3
"""
Command-line entry point for dLive Command Core.

    python app.py mute channelType=input input=3 mute=true
    python app.py recall_scene scene=12 --dry-run
    python app.py parametric_eq --json '{"channelType": "input", "input": 0, "band": 1, ...}'

Exit codes: 0 sent (or resolved, with --dry-run), 2 rejected command,
1 console transport failure.
"""
import argparse
import json
import os
import signal
import sys
import threading
from typing import Any, Dict, List, Optional

# Add project root to Python path
project_root = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, project_root)

from config.mixer_config import DEFAULT_MIXER, get_supported_mixers
from config.settings import DEFAULT_DLIVE_PORT, DEFAULT_MIDI_CHANNEL, MIDI_CHANNEL_RANGE, validate_config
from controller.command_dispatcher import CommandDispatcher
from model.dlive_midi_service import DLiveMIDIService
from model.errors import AddressingError, CommandError, TransportError
from model.midi_protocol import build_messages, hex_dump
from model.parameters import supported_operations
from utils.logger import get_logger

EXIT_OK = 0
EXIT_TRANSPORT_FAILURE = 1
EXIT_REJECTED = 2


def parse_value(raw: str) -> Any:
    """JSON literal where possible (numbers, true/false, null), else the raw text."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def parse_fields(pairs: List[str], json_fields: Optional[str]) -> Dict[str, Any]:
    """Merge --json fields with key=value pairs; pairs win."""
    fields: Dict[str, Any] = {}
    if json_fields:
        loaded = json.loads(json_fields)
        if not isinstance(loaded, dict):
            raise ValueError("--json must be a JSON object")
        fields.update(loaded)
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"expected key=value, got {pair!r}")
        fields[key] = parse_value(value)
    return fields


def _midi_channel(raw: str) -> int:
    channel = int(raw)
    low, high = MIDI_CHANNEL_RANGE
    if not (low <= channel <= high):
        raise argparse.ArgumentTypeError(f"must be between {low} and {high}")
    return channel


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dlive-command",
        description="Resolve an operator request into a dLive console command and send it.",
    )
    parser.add_argument("operation", nargs="?", help="request operation, e.g. mute or recall_scene")
    parser.add_argument("fields", nargs="*", metavar="key=value", help="request fields")
    parser.add_argument("--json", dest="json_fields", help="request fields as a JSON object")
    parser.add_argument("--dry-run", action="store_true", help="resolve and print only, do not send")
    parser.add_argument("--list", action="store_true", help="list supported operations and exit")
    parser.add_argument("--mixer", default=DEFAULT_MIXER, choices=get_supported_mixers())
    parser.add_argument("--host", help="console IP address (TCP/IP MIDI)")
    parser.add_argument("--port", type=int, default=DEFAULT_DLIVE_PORT, help="console TCP port")
    parser.add_argument(
        "--midi-channel", type=_midi_channel, default=DEFAULT_MIDI_CHANNEL,
        help="console base MIDI channel N (1-12)",
    )
    parser.add_argument("--midi-port", help="send through this local MIDI output port instead of TCP")
    return parser


class DLiveCommandApp:
    """
    One-shot application: resolve a single request, print it, send it.
    """

    def __init__(self, args: argparse.Namespace):
        self.logger = get_logger(__name__)
        self.args = args
        self.service: Optional[DLiveMIDIService] = None
        self.shutdown_event = threading.Event()

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals gracefully."""
        self.logger.info(f"Signal received: {signum}, shutting down...")
        self.shutdown()
        sys.exit(EXIT_TRANSPORT_FAILURE)

    def _create_service(self) -> DLiveMIDIService:
        service = DLiveMIDIService(self.args.mixer)
        service.set_connection_params(
            ip=self.args.host or service.dlive_ip,
            port=self.args.port,
            channel=self.args.midi_channel,
            use_tcp=self.args.midi_port is None,
            midi_port_name=self.args.midi_port,
        )
        return service

    def run(self, fields: Dict[str, Any]) -> int:
        """Run the application."""
        dispatcher = CommandDispatcher()
        try:
            command = dispatcher.resolve(self.args.operation, fields)
        except AddressingError as e:
            for failure in e.failures:
                print(f"rejected: {failure.field}: {failure}", file=sys.stderr)
            return EXIT_REJECTED
        except CommandError as e:
            print(f"rejected: {e}", file=sys.stderr)
            return EXIT_REJECTED

        print(json.dumps(command.to_dict(), indent=2))
        print(f"MIDI: {hex_dump(build_messages(command, self.args.midi_channel))}")

        if self.args.dry_run:
            return EXIT_OK

        # Close the connection cleanly if interrupted while sending
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        self.service = self._create_service()
        dispatcher.transport = self.service
        try:
            if not self.service.connect():
                print("console connection failed", file=sys.stderr)
                return EXIT_TRANSPORT_FAILURE
            dispatcher.send(command)
        except TransportError as e:
            print(str(e), file=sys.stderr)
            return EXIT_TRANSPORT_FAILURE
        finally:
            self.shutdown()

        return EXIT_OK

    def shutdown(self):
        """Shutdown the application gracefully."""
        if self.shutdown_event.is_set():
            return
        self.shutdown_event.set()
        if self.service:
            self.service.shutdown()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list:
        for operation in supported_operations():
            print(operation)
        return EXIT_OK
    if not args.operation:
        parser.error("an operation is required")

    if not validate_config():
        print("invalid configuration, check LOG_LEVEL / DLIVE_* environment variables", file=sys.stderr)
        return EXIT_TRANSPORT_FAILURE

    try:
        fields = parse_fields(args.fields, args.json_fields)
    except ValueError as e:
        print(f"rejected: {e}", file=sys.stderr)
        return EXIT_REJECTED

    app = DLiveCommandApp(args)
    return app.run(fields)


if __name__ == "__main__":
    sys.exit(main())
