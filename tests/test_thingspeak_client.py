import unittest
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp

from pems.adapters.cloud.thingspeak import ThingSpeakClient, ThingSpeakHTTPError


def make_response(status=200, payload=None, body=""):
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload)
    response.text = AsyncMock(return_value=body)
    return response


class TestThingSpeakClient(unittest.IsolatedAsyncioTestCase):
    """Test cases for the ThingSpeak REST client."""

    def setUp(self):
        self.session = MagicMock()
        self.client = ThingSpeakClient(base_url="https://ts.example/", max_tries=1, session=self.session)

    def respond_with(self, response):
        self.session.get.return_value.__aenter__.return_value = response

    async def test_field_feed_returns_payload(self):
        payload = {"channel": {"id": 1}, "feeds": [{"created_at": "2024-05-01T00:00:00Z", "field3": "4.2"}]}
        self.respond_with(make_response(payload=payload))

        result = await self.client.fetch_field_feed("123", 3, "KEY", days=1, results=8000, average=None)

        self.assertEqual(result, payload)
        url = self.session.get.call_args.args[0]
        params = self.session.get.call_args.kwargs["params"]
        self.assertEqual(url, "https://ts.example/channels/123/fields/3.json")
        self.assertEqual(params, {"days": "1", "results": "8000", "api_key": "KEY"})

    async def test_public_channel_has_no_api_key(self):
        self.respond_with(make_response(payload={"feeds": []}))
        await self.client.fetch_last_entry("123")
        self.assertNotIn("api_key", self.session.get.call_args.kwargs["params"])

    async def test_empty_range_returns_none(self):
        self.respond_with(make_response(status=400, body="0"))
        self.assertIsNone(await self.client.fetch_channel_feeds("123"))

    async def test_server_error_returns_none(self):
        self.respond_with(make_response(status=500, body="boom"))
        self.assertIsNone(await self.client.fetch_channel_feeds("123"))

    async def test_non_object_payload_returns_none(self):
        self.respond_with(make_response(payload=-1))
        self.assertIsNone(await self.client.fetch_last_entry("123", "WRONG"))

    async def test_connection_error_returns_none(self):
        self.session.get.side_effect = aiohttp.ClientConnectionError("down")
        self.assertIsNone(await self.client.fetch_last_entry("123"))
        self.assertEqual(self.session.get.call_count, 1)

    async def test_connection_error_is_retried(self):
        client = ThingSpeakClient(max_tries=3, session=self.session)
        response = make_response(payload={"feeds": []})
        good = MagicMock()
        good.__aenter__.return_value = response
        self.session.get.side_effect = [aiohttp.ClientConnectionError("down"), good]

        with patch("asyncio.sleep", new=AsyncMock()):
            result = await client.fetch_channel_feeds("123")

        self.assertEqual(result, {"feeds": []})
        self.assertEqual(self.session.get.call_count, 2)

    async def test_close_keeps_injected_session(self):
        self.session.close = AsyncMock()
        await self.client.close()
        self.session.close.assert_not_called()


class TestThingSpeakHTTPError(unittest.TestCase):

    def test_empty_range_detection(self):
        self.assertTrue(ThingSpeakHTTPError(400, " 0\n", "u").is_empty_range)
        self.assertFalse(ThingSpeakHTTPError(400, "-1", "u").is_empty_range)
        self.assertFalse(ThingSpeakHTTPError(404, "0", "u").is_empty_range)


if __name__ == '__main__':
    unittest.main()
