from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from bleak import BleakScanner
from bleak.exc import BleakError

from ..config import DEFAULT_SCAN_TIMEOUT, HUB_NAME_FILTER
from ..errors import DeviceNotFoundError, MultipleHubsError, TransportUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HubInfo:
    """
    Representation of one advertising hub as seen by bleak.

    Attributes:
        address: Platform address to connect to (MAC, or UUID on macOS).
        name: Advertised local name, if any.
        rssi: Signal strength of the advertisement, if reported.
        service_uuids: Service UUIDs listed in the advertisement.
        device: The underlying bleak BLEDevice (for BleakClient).
    """
    address: str
    name: Optional[str]
    rssi: Optional[int]
    service_uuids: tuple
    device: Any = None


def _device_to_info(device, adv) -> HubInfo:
    """Convert bleak's (BLEDevice, AdvertisementData) to HubInfo."""
    name = getattr(adv, "local_name", None) or device.name
    return HubInfo(
        address=device.address,
        name=name,
        rssi=getattr(adv, "rssi", None),
        service_uuids=tuple(u.lower() for u in (getattr(adv, "service_uuids", None) or ())),
        device=device,
    )


def is_matching_hub(
    info: HubInfo,
    *,
    name: Optional[str] = HUB_NAME_FILTER,
    service_uuid: Optional[str] = None,
) -> bool:
    """
    Decide whether a given HubInfo describes our hub.

    All checks are AND-combined; if a criterion is None, it is ignored.

    Args:
        name: Exact advertised name to match, or None.
        service_uuid: Service UUID that must be advertised, or None.

    Returns:
        True if the device matches all specified criteria.
    """
    if name is not None and info.name != name:
        return False

    if service_uuid is not None and service_uuid.lower() not in info.service_uuids:
        return False

    return True


async def find_hubs(
    *,
    matcher: Optional[Callable[[HubInfo], bool]] = None,
    name: Optional[str] = HUB_NAME_FILTER,
    service_uuid: Optional[str] = None,
    timeout: float = DEFAULT_SCAN_TIMEOUT,
) -> List[HubInfo]:
    """
    Scan and return all advertising hubs.

    You can either pass a custom `matcher(info) -> bool` or use the
    built-in criteria (name / service_uuid).

    Raises:
        TransportUnavailableError: If scanning is impossible (no adapter,
            Bluetooth off, no backend).
    """
    logger.info(f"Scanning for hubs (name={name!r}, timeout={timeout:.1f}s)")
    try:
        discovered = await BleakScanner.discover(timeout=timeout, return_adv=True)
    except (BleakError, OSError) as e:
        raise TransportUnavailableError(f"Bluetooth scanning unavailable: {e}") from e

    results: List[HubInfo] = []
    for device, adv in discovered.values():
        info = _device_to_info(device, adv)
        if matcher is not None:
            if matcher(info):
                results.append(info)
        elif is_matching_hub(info, name=name, service_uuid=service_uuid):
            results.append(info)

    logger.debug(f"Scan found {len(discovered)} devices, {len(results)} matching")
    return results


async def find_single_hub(
    *,
    matcher: Optional[Callable[[HubInfo], bool]] = None,
    name: Optional[str] = HUB_NAME_FILTER,
    service_uuid: Optional[str] = None,
    timeout: float = DEFAULT_SCAN_TIMEOUT,
) -> HubInfo:
    """
    Find exactly one hub.

    Behaviour:
        - 0 matches  -> DeviceNotFoundError
        - 1 match    -> return it
        - >1 matches -> log error and raise MultipleHubsError

    This is the function you typically call before opening a BleakClient.
    """
    matches = await find_hubs(
        matcher=matcher,
        name=name,
        service_uuid=service_uuid,
        timeout=timeout,
    )

    if not matches:
        raise DeviceNotFoundError(f"No hub named {name!r} found")

    if len(matches) > 1:
        logger.error(
            "Multiple matching hubs found; refusing to choose automatically. "
            "Devices: %s",
            [m.address for m in matches],
        )
        raise MultipleHubsError(
            f"Multiple matching hubs found ({len(matches)} devices)",
            devices=matches,
        )

    return matches[0]
