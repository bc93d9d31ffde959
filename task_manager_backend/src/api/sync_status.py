"""
Cloud sync availability tracking.

SyncStatusMonitor asks an account-status provider whether cloud sync can be
used and maps the single reply onto one of five display states. Failures
never propagate: they are logged and shown as ``unavailable``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Union

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class SyncStatus(str, Enum):
    """Display state of cloud sync."""

    CHECKING = "checking"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    RESTRICTED = "restricted"
    TEMPORARILY_UNAVAILABLE = "temporarily_unavailable"


# PUBLIC_INTERFACE
class AccountStatus(str, Enum):
    """Result reported by the account/cloud status service."""

    AVAILABLE = "available"
    NO_ACCOUNT = "no_account"
    RESTRICTED = "restricted"
    COULD_NOT_DETERMINE = "could_not_determine"
    TEMPORARILY_UNAVAILABLE = "temporarily_unavailable"


@dataclass(frozen=True)
class StatusDisplay:
    icon: str
    color: str
    description: str


STATUS_DISPLAY: Dict[SyncStatus, StatusDisplay] = {
    SyncStatus.AVAILABLE: StatusDisplay("icloud", "blue", "iCloud Sync Enabled"),
    SyncStatus.UNAVAILABLE: StatusDisplay("icloud.slash", "orange", "iCloud Not Available"),
    SyncStatus.CHECKING: StatusDisplay("icloud.and.arrow.down", "gray", "Checking iCloud Status..."),
    SyncStatus.RESTRICTED: StatusDisplay("exclamationmark.icloud", "red", "iCloud Restricted"),
    SyncStatus.TEMPORARILY_UNAVAILABLE: StatusDisplay(
        "icloud.slash", "orange", "iCloud Temporarily Unavailable"
    ),
}

_TRANSITIONS: Dict[AccountStatus, SyncStatus] = {
    AccountStatus.AVAILABLE: SyncStatus.AVAILABLE,
    AccountStatus.NO_ACCOUNT: SyncStatus.UNAVAILABLE,
    AccountStatus.RESTRICTED: SyncStatus.RESTRICTED,
    AccountStatus.COULD_NOT_DETERMINE: SyncStatus.UNAVAILABLE,
    AccountStatus.TEMPORARILY_UNAVAILABLE: SyncStatus.TEMPORARILY_UNAVAILABLE,
}


# PUBLIC_INTERFACE
def display_for(status: SyncStatus) -> StatusDisplay:
    """Return the icon/color/description triple for a status."""
    return STATUS_DISPLAY[status]


# PUBLIC_INTERFACE
def show_banner(status: SyncStatus) -> bool:
    """A status banner is shown for every state except AVAILABLE."""
    return status is not SyncStatus.AVAILABLE


# PUBLIC_INTERFACE
def offers_settings_link(status: SyncStatus) -> bool:
    """Whether the banner should point the user at their account settings."""
    return status in (SyncStatus.UNAVAILABLE, SyncStatus.TEMPORARILY_UNAVAILABLE)


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class AccountStatusReply:
    """
    One reply from the account-status service.

    status may be a raw value this service does not know about yet; such values
    are treated as unavailable.
    """

    status: Union[AccountStatus, str]
    error: Optional[BaseException] = None


class AccountStatusProvider(Protocol):
    async def account_status(self) -> AccountStatusReply:
        ...


# PUBLIC_INTERFACE
class StaticAccountStatusProvider:
    """Provider that always answers with a configured status."""

    def __init__(self, status: Union[AccountStatus, str], error: Optional[BaseException] = None) -> None:
        self._reply = AccountStatusReply(status=status, error=error)

    async def account_status(self) -> AccountStatusReply:
        return self._reply


# PUBLIC_INTERFACE
def map_account_status(reply: AccountStatusReply) -> SyncStatus:
    """
    Map a provider reply to a terminal display state, logging the reason for
    anything other than AVAILABLE.
    """
    try:
        account = AccountStatus(reply.status)
    except ValueError:
        logger.warning("Unknown account status %r; treating sync as unavailable", reply.status)
        return SyncStatus.UNAVAILABLE

    new_status = _TRANSITIONS[account]
    if account is AccountStatus.AVAILABLE:
        logger.info("Cloud sync is available and configured")
    elif account is AccountStatus.NO_ACCOUNT:
        logger.warning("No cloud account is configured; sign in to enable sync")
    elif account is AccountStatus.RESTRICTED:
        logger.warning("Cloud account access is restricted")
    elif account is AccountStatus.COULD_NOT_DETERMINE:
        logger.warning(
            "Could not determine cloud account status: %s",
            reply.error if reply.error is not None else "Unknown error",
        )
    else:
        logger.warning("Cloud sync is temporarily unavailable")
    return new_status


Listener = Callable[[SyncStatus], None]


# PUBLIC_INTERFACE
class SyncStatusMonitor:
    """
    Tracks cloud sync availability for display.

    The status field is only read and written from the event loop running
    check(); callers on other threads must hop onto that loop first.

    Overlapping checks are sequenced: every check takes a new request number,
    and a reply that arrives after a newer check has started is discarded.
    """

    def __init__(self, provider: AccountStatusProvider) -> None:
        self._provider = provider
        self._status = SyncStatus.CHECKING
        self._request_seq = 0
        self._listeners: List[Listener] = []

    @property
    def status(self) -> SyncStatus:
        return self._status

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a status-change listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set_status(self, status: SyncStatus) -> None:
        if status is self._status:
            return
        self._status = status
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception:
                logger.exception("Sync status listener %r failed", listener)

    async def check(self) -> SyncStatus:
        """
        Query the provider once and return the resulting status.

        Never raises for provider failures; they end up as UNAVAILABLE.
        """
        self._request_seq += 1
        seq = self._request_seq
        self._set_status(SyncStatus.CHECKING)

        try:
            reply = await self._provider.account_status()
        except Exception as exc:
            logger.error("Account status check failed: %s", exc, exc_info=True)
            reply = AccountStatusReply(status=AccountStatus.COULD_NOT_DETERMINE, error=exc)

        if seq != self._request_seq:
            logger.debug(
                "Discarding stale account status reply (request %d, latest %d)", seq, self._request_seq
            )
            return self._status

        self._set_status(map_account_status(reply))
        return self._status
