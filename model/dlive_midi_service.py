"""
dLive MIDI communication service.
Delivers resolved commands to a dLive MixRack or Surface via TCP/IP MIDI or a
local (USB) MIDI output port.
"""
import socket
import threading
import time
from typing import List, Optional

import mido

from config.mixer_config import DEFAULT_MIXER, get_mixer_config
from config.settings import (
    CONNECT_TIMEOUT_SEC,
    DEFAULT_DLIVE_IP,
    DEFAULT_DLIVE_PORT,
    DEFAULT_MIDI_CHANNEL,
    MESSAGE_GAP_SEC,
    MIDI_CHANNEL_RANGE,
    SEND_TIMEOUT_SEC,
)
from model.base_service import BaseConsoleService
from model.commands import Command
from model.midi_protocol import build_messages
from utils.logger import get_logger


class DLiveMIDIService(BaseConsoleService):
    """
    Handles MIDI communication with a dLive console.
    Supports both TCP/IP MIDI and USB MIDI connections.
    """

    def __init__(self, mixer_name: str = DEFAULT_MIXER):
        super().__init__()
        self.logger = get_logger(__name__)
        self.mixer_name = mixer_name
        mixer_config = get_mixer_config(mixer_name)

        # Connection parameters
        self.dlive_ip: str = mixer_config.get("default_ip", DEFAULT_DLIVE_IP)
        self.dlive_port: int = mixer_config.get("tcp_port", DEFAULT_DLIVE_PORT)
        self.midi_channel: int = DEFAULT_MIDI_CHANNEL
        self.midi_port_name: Optional[str] = None

        # Connection type
        self.use_tcp_midi = True

        self.dlive_socket: Optional[socket.socket] = None
        self.midi_output = None  # mido output port when using USB MIDI
        self.dlive_connected = False
        self._connection_lock = threading.RLock()

    def set_connection_params(
        self,
        ip: str,
        port: int,
        channel: int,
        use_tcp: bool = True,
        midi_port_name: Optional[str] = None,
    ) -> None:
        """Set dLive connection parameters."""
        low, high = MIDI_CHANNEL_RANGE
        if not (low <= channel <= high):
            raise ValueError(f"MIDI channel must be between {low} and {high}, got {channel}")
        self.dlive_ip = ip
        self.dlive_port = port
        self.midi_channel = channel
        self.use_tcp_midi = use_tcp
        self.midi_port_name = midi_port_name
        self.logger.info(
            f"dLive connection settings: {ip}:{port}, channel:{channel}, TCP/IP:{use_tcp}, port:{midi_port_name}"
        )

    def connect(self) -> bool:
        """Connect to the dLive console."""
        with self._connection_lock:
            if self.dlive_connected:
                self.logger.info("dLive is already connected")
                return True

            try:
                if self.use_tcp_midi:
                    return self._connect_tcp_midi()
                return self._connect_usb_midi()
            except (OSError, ValueError) as e:
                self.logger.error(f"❌ dLive connection failed: {e}")
                return False

    def _connect_tcp_midi(self) -> bool:
        """Connect via TCP/IP MIDI."""
        self.logger.info(f"🔍 dLive TCP/IP MIDI connecting: {self.dlive_ip}:{self.dlive_port}")
        try:
            self.dlive_socket = socket.create_connection(
                (self.dlive_ip, self.dlive_port), timeout=CONNECT_TIMEOUT_SEC,
            )
            self.dlive_socket.settimeout(SEND_TIMEOUT_SEC)
        except OSError:
            self._close_socket()
            self.dlive_connected = False
            raise

        self.dlive_connected = True
        self.logger.info(f"🎉 dLive TCP/IP MIDI connected: {self.dlive_ip}:{self.dlive_port}")
        return True

    def _connect_usb_midi(self) -> bool:
        """Connect via a local MIDI output port (python-rtmidi backend)."""
        port_name = self.midi_port_name or self._find_output_port()
        if port_name is None:
            raise ValueError(f"no MIDI output port found for {self.mixer_name}")

        self.logger.info(f"🔍 dLive USB MIDI connecting: {port_name}")
        self.midi_output = mido.open_output(port_name)
        self.dlive_connected = True
        self.logger.info(f"🎉 dLive USB MIDI connected: {port_name}")
        return True

    def _find_output_port(self) -> Optional[str]:
        hint = get_mixer_config(self.mixer_name).get("usb_port_hint", "dlive")
        for name in self.get_output_ports():
            if hint.lower() in name.lower():
                return name
        return None

    @staticmethod
    def get_output_ports() -> List[str]:
        """Available MIDI output ports."""
        return list(mido.get_output_names())

    def _close_socket(self) -> None:
        if self.dlive_socket:
            try:
                self.dlive_socket.close()
            except OSError as e:
                self.logger.debug(f"socket close failed: {e}")
            self.dlive_socket = None

    def disconnect(self) -> None:
        """Disconnect from the console."""
        with self._connection_lock:
            self._close_socket()
            if self.midi_output is not None:
                self.midi_output.close()
                self.midi_output = None

            if self.dlive_connected:
                self.logger.info("dLive disconnected")
            self.dlive_connected = False

    def is_connected(self) -> bool:
        return self.dlive_connected

    def send_midi_message(self, message: mido.Message) -> bool:
        """Send a single MIDI message."""
        with self._connection_lock:
            if not self.dlive_connected:
                self.logger.warning("⚠️ dLive is not connected")
                return False

            midi_bytes = bytes(message.bytes())
            hex_dump = ' '.join(f"{b:02X}" for b in midi_bytes)
            try:
                if self.use_tcp_midi and self.dlive_socket:
                    self.dlive_socket.sendall(midi_bytes)
                    transport = "TCP"
                elif self.midi_output is not None:
                    self.midi_output.send(message)
                    transport = "USB"
                else:
                    self.logger.error("❌ dLive has no open output")
                    self.dlive_connected = False
                    return False
            except OSError as e:
                self.logger.error(f"❌ dLive MIDI send failed: {e}")
                # Mark as disconnected on send failure
                self.dlive_connected = False
                return False

            self.logger.info(
                f"➡️ [TX][{transport}] type={message.type} ch={getattr(message, 'channel', 'n/a')} data=[{hex_dump}]"
            )
            return True

    def send_command(self, command: Command) -> bool:
        """Send every message of one command, in order, as one unit."""
        messages = build_messages(command, self.midi_channel)
        with self._connection_lock:
            if not self.dlive_connected:
                self.logger.warning(f"⚠️ dLive is not connected, dropping {command.operation}")
                return False

            for i, message in enumerate(messages):
                if i and MESSAGE_GAP_SEC:
                    # Small delay between messages for proper sequencing
                    time.sleep(MESSAGE_GAP_SEC)
                if not self.send_midi_message(message):
                    self.logger.error(f"{command.operation}: message {i + 1}/{len(messages)} failed")
                    return False

        self.logger.info(f"🎛️ dLive {command.operation} sent ({len(messages)} messages)")
        return True

    def update_mixer_config(self, mixer_name: str) -> None:
        """Switch console target; takes effect on the next connect."""
        mixer_config = get_mixer_config(mixer_name)
        self.mixer_name = mixer_name
        self.dlive_ip = mixer_config.get("default_ip", self.dlive_ip)
        self.dlive_port = mixer_config.get("tcp_port", self.dlive_port)
        self.logger.info(f"dLive console updated: {mixer_name}")

    def shutdown(self) -> None:
        super().shutdown()
        self.logger.info("dLive MIDI service shut down")
