"""
Console targets the command core can talk to.
"""
from typing import Dict, Any, List


# Both ends of a dLive system accept the same MIDI protocol over TCP.
MIXER_CONFIGS: Dict[str, Dict[str, Any]] = {
    "dLive MixRack": {
        "default_ip": "192.168.1.70",
        "tcp_port": 51328,
        "usb_port_hint": "mixrack",
    },
    "dLive Surface": {
        "default_ip": "192.168.1.71",
        "tcp_port": 51328,
        "usb_port_hint": "surface",
    },
}

DEFAULT_MIXER: str = "dLive MixRack"


def get_mixer_config(mixer_name: str) -> Dict[str, Any]:
    """Get configuration for a specific console target."""
    return MIXER_CONFIGS.get(mixer_name, {})


def get_supported_mixers() -> List[str]:
    """Get list of supported console target names."""
    return list(MIXER_CONFIGS.keys())


def is_mixer_supported(mixer_name: str) -> bool:
    """Check if console target is supported."""
    return mixer_name in MIXER_CONFIGS
