from __future__ import annotations

from threading import Lock
from typing import Optional

from fastapi import APIRouter, Depends

from ..auth import require_basic_auth
from ..schemas import SyncStatusOut
from ..settings import get_settings
from ..sync_status import StaticAccountStatusProvider, SyncStatusMonitor

router = APIRouter(
    prefix="/api/v1/sync",
    tags=["sync"],
    dependencies=[Depends(require_basic_auth)],
)


_monitor: Optional[SyncStatusMonitor] = None
_monitor_lock = Lock()


# PUBLIC_INTERFACE
def get_sync_monitor() -> SyncStatusMonitor:
    """
    Return the process-wide monitor, backed by the provider configured via SYNC_ACCOUNT_STATUS.
    """
    global _monitor
    with _monitor_lock:
        if _monitor is None:
            provider = StaticAccountStatusProvider(get_settings().sync_account_status)
            _monitor = SyncStatusMonitor(provider)
        return _monitor


# PUBLIC_INTERFACE
def reset_sync_monitor() -> None:
    """Drop the shared monitor; the next get_sync_monitor() call rereads SYNC_ACCOUNT_STATUS."""
    global _monitor
    with _monitor_lock:
        _monitor = None


# PUBLIC_INTERFACE
@router.get("/status", response_model=SyncStatusOut, summary="Current Sync Status")
async def get_status(monitor: SyncStatusMonitor = Depends(get_sync_monitor)) -> SyncStatusOut:
    return SyncStatusOut.from_status(monitor.status)


# PUBLIC_INTERFACE
@router.post(
    "/check",
    response_model=SyncStatusOut,
    summary="Check Sync Status",
    description="Ask the account service for sync availability once and return the resulting status.",
)
async def check_status(monitor: SyncStatusMonitor = Depends(get_sync_monitor)) -> SyncStatusOut:
    return SyncStatusOut.from_status(await monitor.check())
