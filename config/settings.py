"""
Application configuration settings.
"""
import os
from typing import Tuple, Dict, Any, Optional

# MIDI Settings
# The console listens on N..N+4, so the base channel must leave room for four more.
DEFAULT_MIDI_CHANNEL: int = int(os.getenv("DLIVE_MIDI_CHANNEL", "1"))
MIDI_CHANNEL_RANGE: Tuple[int, int] = (1, 12)

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE: Optional[str] = os.getenv("LOG_FILE") or None

# Network Settings
DEFAULT_DLIVE_IP: str = os.getenv("DLIVE_IP", "192.168.1.70")
DEFAULT_DLIVE_PORT: int = int(os.getenv("DLIVE_PORT", "51328"))
CONNECT_TIMEOUT_SEC: float = float(os.getenv("CONNECT_TIMEOUT_SEC", "5.0"))
SEND_TIMEOUT_SEC: float = float(os.getenv("SEND_TIMEOUT_SEC", "2.0"))
MESSAGE_GAP_SEC: float = float(os.getenv("MESSAGE_GAP_SEC", "0.01"))

# MIDI Message Types
NOTE_ON_TYPE: str = "note_on"
CONTROL_CHANGE_TYPE: str = "control_change"
PROGRAM_CHANGE_TYPE: str = "program_change"
SYSEX_TYPE: str = "sysex"

# Validation Settings
VALID_LOG_LEVELS: Tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_config() -> Dict[str, Any]:
    """Get all configuration settings as a dictionary."""
    return {
        "midi": {
            "default_channel": DEFAULT_MIDI_CHANNEL,
            "channel_range": MIDI_CHANNEL_RANGE,
        },
        "logging": {
            "level": LOG_LEVEL,
            "format": LOG_FORMAT,
            "file": LOG_FILE,
        },
        "network": {
            "dlive_ip": DEFAULT_DLIVE_IP,
            "dlive_port": DEFAULT_DLIVE_PORT,
            "connect_timeout": CONNECT_TIMEOUT_SEC,
            "send_timeout": SEND_TIMEOUT_SEC,
            "message_gap": MESSAGE_GAP_SEC,
        },
    }


def validate_config() -> bool:
    """Validate configuration settings."""
    if LOG_LEVEL.upper() not in VALID_LOG_LEVELS:
        return False

    min_channel, max_channel = MIDI_CHANNEL_RANGE
    if not (1 <= min_channel <= max_channel <= 16):
        return False

    if not (min_channel <= DEFAULT_MIDI_CHANNEL <= max_channel):
        return False

    if not (1 <= DEFAULT_DLIVE_PORT <= 65535):
        return False

    if CONNECT_TIMEOUT_SEC <= 0 or SEND_TIMEOUT_SEC <= 0 or MESSAGE_GAP_SEC < 0:
        return False

    return True
