from .state import DashboardState, DashboardSnapshot, SelectionToken
from .poller import DashboardPoller
from .dashboard import DashboardService

__all__ = [
    "DashboardState",
    "DashboardSnapshot",
    "SelectionToken",
    "DashboardPoller",
    "DashboardService"
]
