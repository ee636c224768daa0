"""
Base abstract class for console services.
"""
from abc import ABC, abstractmethod
import threading

from model.commands import Command


class BaseConsoleService(ABC):
    """
    Abstract base class for services that deliver resolved commands to a console.
    Writes are serialised so the messages of one command go out as one unit.
    """

    def __init__(self):
        self._shutdown_event = threading.Event()

    @abstractmethod
    def connect(self) -> bool:
        """Open the connection to the console."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        pass

    @abstractmethod
    def send_command(self, command: Command) -> bool:
        """Send one command; False if it could not be delivered."""
        pass

    def shutdown(self) -> None:
        """Safely shutdown the service."""
        if self._shutdown_event.is_set():
            return
        self.disconnect()
        self._shutdown_event.set()

    def is_shutdown(self) -> bool:
        """Check if service is shutdown."""
        return self._shutdown_event.is_set()
