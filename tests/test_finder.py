"""Unit tests for hub discovery."""

import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

from bleak.exc import BleakError

from navitech.config import COMMAND_EVENT_SERVICE_UUID
from navitech.errors import DeviceNotFoundError, MultipleHubsError, TransportUnavailableError
from navitech.transport import HubInfo, find_hubs, find_single_hub, is_matching_hub


def advert(address, name, rssi=-50, service_uuids=()):
    device = SimpleNamespace(address=address, name=name)
    adv = SimpleNamespace(local_name=name, rssi=rssi, service_uuids=list(service_uuids))
    return address, (device, adv)


def scan_result(*adverts):
    return dict(adverts)


class TestIsMatchingHub(unittest.TestCase):

    def test_name(self):
        info = HubInfo(address="A", name="NaViTech", rssi=None, service_uuids=())
        self.assertTrue(is_matching_hub(info))
        self.assertFalse(is_matching_hub(info, name="Other"))

    def test_name_is_exact(self):
        info = HubInfo(address="A", name="NaViTech 2", rssi=None, service_uuids=())
        self.assertFalse(is_matching_hub(info))

    def test_service_uuid(self):
        info = HubInfo(address="A", name="NaViTech", rssi=None,
                       service_uuids=(COMMAND_EVENT_SERVICE_UUID,))
        self.assertTrue(is_matching_hub(info, service_uuid=COMMAND_EVENT_SERVICE_UUID.upper()))
        self.assertFalse(is_matching_hub(info, service_uuid="0000180f-0000-1000-8000-00805f9b34fb"))

    def test_no_criteria(self):
        info = HubInfo(address="A", name=None, rssi=None, service_uuids=())
        self.assertTrue(is_matching_hub(info, name=None))


class TestFindHubs(unittest.IsolatedAsyncioTestCase):

    def patch_discover(self, **kwargs):
        patcher = patch("navitech.transport.finder.BleakScanner.discover", new=AsyncMock(**kwargs))
        mock = patcher.start()
        self.addCleanup(patcher.stop)
        return mock

    async def test_filters_by_name(self):
        discover = self.patch_discover(return_value=scan_result(
            advert("AA", "NaViTech", service_uuids=[COMMAND_EVENT_SERVICE_UUID.upper()]),
            advert("BB", "Headphones"),
            advert("CC", None),
        ))
        hubs = await find_hubs(timeout=1.0)

        discover.assert_awaited_once_with(timeout=1.0, return_adv=True)
        self.assertEqual([h.address for h in hubs], ["AA"])
        self.assertEqual(hubs[0].rssi, -50)
        self.assertEqual(hubs[0].service_uuids, (COMMAND_EVENT_SERVICE_UUID,))

    async def test_custom_matcher(self):
        self.patch_discover(return_value=scan_result(
            advert("AA", "NaViTech", rssi=-90),
            advert("BB", "NaViTech", rssi=-40),
        ))
        hubs = await find_hubs(matcher=lambda info: info.rssi > -60)
        self.assertEqual([h.address for h in hubs], ["BB"])

    async def test_scanner_unavailable(self):
        self.patch_discover(side_effect=BleakError("Bluetooth device is turned off"))
        with self.assertRaises(TransportUnavailableError):
            await find_hubs()

    async def test_single_hub(self):
        self.patch_discover(return_value=scan_result(advert("AA", "NaViTech")))
        hub = await find_single_hub()
        self.assertEqual(hub.address, "AA")
        self.assertEqual(hub.name, "NaViTech")

    async def test_no_hub(self):
        self.patch_discover(return_value=scan_result(advert("BB", "Headphones")))
        with self.assertRaises(DeviceNotFoundError):
            await find_single_hub()

    async def test_multiple_hubs(self):
        self.patch_discover(return_value=scan_result(
            advert("AA", "NaViTech"),
            advert("BB", "NaViTech"),
        ))
        with self.assertRaises(MultipleHubsError) as ctx:
            await find_single_hub()
        self.assertEqual(len(ctx.exception.devices), 2)


if __name__ == '__main__':
    unittest.main()
