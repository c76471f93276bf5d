"""
Vòng lặp làm mới định kỳ cho chuồng đang được chọn.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from pems.core.monitoring.state import DashboardSnapshot, DashboardState, SelectionToken

logger = logging.getLogger(__name__)

RefreshFn = Callable[[SelectionToken], Awaitable[DashboardSnapshot]]


class DashboardPoller:
    """
    Chạy lại pipeline lấy dữ liệu theo chu kỳ cố định.

    Mỗi lần làm mới sẽ hủy lần làm mới trước đó nếu nó chưa xong, vì vậy các
    truy vấn không bao giờ chồng lên nhau.
    """

    def __init__(self, state: DashboardState, refresh: RefreshFn, interval: float = 30):
        """
        Args:
            state: Trạng thái dashboard
            refresh: Hàm async dựng snapshot cho một token
            interval: Chu kỳ làm mới (giây)
        """
        self.state = state
        self.refresh = refresh
        self.interval = interval
        self._loop_task: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def start(self) -> None:
        if self.running:
            logger.info("Dashboard poller is already running")
            return
        self._loop_task = asyncio.create_task(self._run())
        logger.info(f"Dashboard poller started (interval: {self.interval}s)")

    async def stop(self) -> None:
        self._cancel_inflight()
        if self._loop_task is not None:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None
        logger.info("Dashboard poller stopped")

    async def select(self, branch: str, firestore_id: str) -> Optional[DashboardSnapshot]:
        """Đổi lựa chọn và làm mới ngay."""
        self.state.select(branch, firestore_id)
        await self.refresh_now()
        return self.state.snapshot

    def _cancel_inflight(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
            logger.debug("Cancelled in-flight dashboard refresh")
        self._inflight = None

    async def refresh_now(self) -> bool:
        """
        Làm mới dữ liệu của lựa chọn hiện tại.

        Returns:
            True nếu kết quả đã được ghi vào trạng thái
        """
        token = self.state.selection
        if token is None:
            return False

        self._cancel_inflight()
        task = asyncio.create_task(self._refresh(token))
        self._inflight = task

        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task.cancelled():
            logger.debug(f"Dashboard refresh of generation {token.generation} was superseded")
            return False
        if task.exception() is not None:
            logger.error(f"Dashboard refresh failed: {str(task.exception())}")
            return False
        return task.result()

    async def _refresh(self, token: SelectionToken) -> bool:
        snapshot = await self.refresh(token)
        return self.state.commit(token, snapshot)

    async def _run(self) -> None:
        while True:
            await self.refresh_now()
            await asyncio.sleep(self.interval)
