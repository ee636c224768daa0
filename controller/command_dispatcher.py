"""
Command dispatcher.
Runs one operator request through validation, address resolution and encoding,
and optionally hands the resulting command to a console transport.
"""
from typing import Any, Mapping, Optional

from model.addressing import resolve_request
from model.base_service import BaseConsoleService
from model.commands import Command, encode
from model.errors import CommandError, TransportError
from model.parameters import validate_request
from utils.logger import get_logger


class CommandDispatcher:
    """
    Stateless pipeline apart from its transport reference; safe to share
    between threads.
    """

    def __init__(self, transport: Optional[BaseConsoleService] = None):
        self.logger = get_logger(__name__)
        self.transport = transport

    def resolve(self, operation: str, fields: Mapping[str, Any]) -> Command:
        """Validate, resolve and encode one request. The first failure propagates."""
        try:
            params = validate_request(operation, fields)
            resolved = resolve_request(params)
            command = encode(params, resolved)
        except CommandError as e:
            self.logger.warning(f"⚠️ {operation} rejected: {e}")
            raise

        self.logger.info(f"🎛️ {operation} -> {command.operation} {dict(command.params)}")
        return command

    def dispatch(self, operation: str, fields: Mapping[str, Any]) -> Command:
        """
        Resolve a request and send it. A rejected request never reaches the
        transport.
        """
        return self.send(self.resolve(operation, fields))

    def send(self, command: Command) -> Command:
        """
        Hand an already resolved command to the transport. Raises
        TransportError if no transport is set, or if the transport reports a
        failed send.
        """
        if self.transport is None:
            raise TransportError("no console transport configured")
        if not self.transport.send_command(command):
            self.logger.error(f"❌ {command.operation} was not delivered")
            raise TransportError(f"{command.operation} was not delivered to the console")
        return command
