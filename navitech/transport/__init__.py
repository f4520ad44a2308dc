"""Transport layer for hub communication."""

from .base import Transport
from .ble import BleTransport
from .finder import HubInfo, find_hubs, find_single_hub, is_matching_hub

__all__ = [
    "Transport",
    "BleTransport",
    "HubInfo",
    "find_hubs",
    "find_single_hub",
    "is_matching_hub",
]
