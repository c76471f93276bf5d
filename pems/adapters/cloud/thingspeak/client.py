"""
Client bất đồng bộ (aiohttp) đọc dữ liệu channel qua REST API của ThingSpeak.

Lỗi mạng tạm thời được thử lại theo backoff lũy thừa.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp
import backoff

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (aiohttp.ClientConnectionError, asyncio.TimeoutError)


class ThingSpeakHTTPError(Exception):
    """Exception khi ThingSpeak trả về mã HTTP ngoài khoảng 2xx."""

    def __init__(self, status: int, body: str, url: str):
        self.status = status
        self.body = body
        self.url = url
        super().__init__(f"HTTP {status} from {url}: {body[:200]}")

    @property
    def is_empty_range(self) -> bool:
        # ThingSpeak trả 400 kèm nội dung "0" khi khoảng thời gian không có dữ liệu
        return self.status == 400 and self.body.strip() == "0"


class ThingSpeakClient:
    """
    Client chỉ đọc cho REST API channel của ThingSpeak.

    Mọi phương thức public trả về JSON đã giải mã, hoặc None khi request lỗi.
    Lỗi được ghi log tại đây và không raise ra ngoài; nơi gọi tự quyết định ý
    nghĩa của kết quả rỗng.
    """

    DEFAULT_BASE_URL = "https://api.thingspeak.com"

    def __init__(self, base_url: Optional[str] = None, timeout: float = 15,
                 max_tries: int = 3, session: Optional[aiohttp.ClientSession] = None):
        """
        Khởi tạo client.

        Args:
            base_url: Địa chỉ API (mặc định https://api.thingspeak.com)
            timeout: Thời gian chờ tối đa cho mỗi request (giây)
            max_tries: Số lần thử tối đa khi gặp lỗi kết nối
            session: ClientSession dùng chung (client không tự đóng session này)
        """
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.max_tries = max_tries
        self.session = session
        self._owns_session = session is None
        logger.info(f"ThingSpeak client initialized for {self.base_url}")

    async def initialize(self):
        """Tạo ClientSession nếu chưa có."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True

    async def close(self):
        """Đóng session do client tự tạo."""
        if self.session is not None and self._owns_session:
            await self.session.close()
        self.session = None

    async def fetch_field_feed(self, channel_id: str, field_number: int,
                               api_key: Optional[str] = None, **params) -> Optional[Dict[str, Any]]:
        """
        Lấy feed của một field: GET /channels/{id}/fields/{n}.json

        Args:
            channel_id: ID channel ThingSpeak
            field_number: Số thứ tự field (1-8)
            api_key: Read API key (channel riêng tư)
            **params: Tham số truy vấn (days, results, average, start, end...)

        Returns:
            JSON của feed hoặc None nếu lỗi
        """
        path = f"/channels/{channel_id}/fields/{field_number}.json"
        return await self._request(path, api_key, params)

    async def fetch_channel_feeds(self, channel_id: str, api_key: Optional[str] = None,
                                  **params) -> Optional[Dict[str, Any]]:
        """Lấy feed của tất cả field: GET /channels/{id}/feeds.json"""
        path = f"/channels/{channel_id}/feeds.json"
        return await self._request(path, api_key, params)

    async def fetch_last_entry(self, channel_id: str,
                               api_key: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Lấy bản ghi mới nhất: GET /channels/{id}/feeds/last.json

        Returns:
            Bản ghi mới nhất hoặc None nếu lỗi
        """
        path = f"/channels/{channel_id}/feeds/last.json"
        return await self._request(path, api_key, {})

    async def _request(self, path: str, api_key: Optional[str],
                       params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        await self.initialize()

        query = {k: str(v) for k, v in params.items() if v is not None}
        if api_key:
            query["api_key"] = api_key
        url = f"{self.base_url}{path}"

        try:
            get_json = backoff.on_exception(
                backoff.expo,
                RETRYABLE_ERRORS,
                max_tries=self.max_tries
            )(self._get_json)
            data = await get_json(url, query)
        except ThingSpeakHTTPError as e:
            if e.is_empty_range:
                logger.info(f"No ThingSpeak data in requested range for {path}")
            else:
                logger.error(f"ThingSpeak request failed for {path}: HTTP {e.status}")
            return None
        except Exception as e:
            logger.error(f"Error fetching ThingSpeak data from {path}: {str(e)}")
            return None

        if not isinstance(data, dict):
            # Channel riêng tư trả "-1" khi read key sai
            logger.warning(f"Unexpected ThingSpeak payload for {path}: {data!r}")
            return None
        return data

    async def _get_json(self, url: str, query: Dict[str, str]) -> Any:
        async with self.session.get(url, params=query) as response:
            if response.status < 200 or response.status >= 300:
                body = await response.text()
                raise ThingSpeakHTTPError(response.status, body, url)
            return await response.json(content_type=None)
