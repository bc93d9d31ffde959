import asyncio
import logging

import pytest

from src.api.sync_status import (
    STATUS_DISPLAY,
    AccountStatus,
    AccountStatusReply,
    StaticAccountStatusProvider,
    SyncStatus,
    SyncStatusMonitor,
    offers_settings_link,
    show_banner,
)


class RecordingListener:
    def __init__(self) -> None:
        self.seen = []

    def __call__(self, status: SyncStatus) -> None:
        self.seen.append(status)


class GatedProvider:
    """Provider whose replies are released manually, in any order."""

    def __init__(self) -> None:
        self.pending: list = []

    async def account_status(self) -> AccountStatusReply:
        fut = asyncio.get_running_loop().create_future()
        self.pending.append(fut)
        return await fut


class SwitchableProvider:
    """Answers with whatever reply is current; a None reply waits forever."""

    def __init__(self, status=AccountStatus.AVAILABLE) -> None:
        self.status = status

    async def account_status(self) -> AccountStatusReply:
        if self.status is None:
            await asyncio.get_running_loop().create_future()
        return AccountStatusReply(self.status)


class RaisingProvider:
    async def account_status(self) -> AccountStatusReply:
        raise ConnectionError("container unreachable")


class TestTransitions:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "account, expected",
        [
            (AccountStatus.AVAILABLE, SyncStatus.AVAILABLE),
            (AccountStatus.NO_ACCOUNT, SyncStatus.UNAVAILABLE),
            (AccountStatus.RESTRICTED, SyncStatus.RESTRICTED),
            (AccountStatus.COULD_NOT_DETERMINE, SyncStatus.UNAVAILABLE),
            (AccountStatus.TEMPORARILY_UNAVAILABLE, SyncStatus.TEMPORARILY_UNAVAILABLE),
            ("some_future_value", SyncStatus.UNAVAILABLE),
        ],
    )
    async def test_reply_maps_to_display_state(self, account, expected):
        monitor = SyncStatusMonitor(StaticAccountStatusProvider(account))
        assert monitor.status is SyncStatus.CHECKING
        assert await monitor.check() is expected
        assert monitor.status is expected

    @pytest.mark.asyncio
    async def test_passes_through_checking(self):
        provider = SwitchableProvider()
        monitor = SyncStatusMonitor(provider)
        await monitor.check()
        listener = RecordingListener()
        monitor.subscribe(listener)

        provider.status = AccountStatus.NO_ACCOUNT
        await monitor.check()
        assert listener.seen == [SyncStatus.CHECKING, SyncStatus.UNAVAILABLE]

        provider.status = AccountStatus.RESTRICTED
        await monitor.check()
        assert listener.seen[-2:] == [SyncStatus.CHECKING, SyncStatus.RESTRICTED]

    @pytest.mark.asyncio
    async def test_undetermined_error_is_logged_not_raised(self, caplog):
        err = RuntimeError("network down")
        monitor = SyncStatusMonitor(StaticAccountStatusProvider(AccountStatus.COULD_NOT_DETERMINE, err))
        with caplog.at_level(logging.WARNING, logger="src.api.sync_status"):
            assert await monitor.check() is SyncStatus.UNAVAILABLE
        assert "network down" in caplog.text

    @pytest.mark.asyncio
    async def test_provider_exception_becomes_unavailable(self, caplog):
        monitor = SyncStatusMonitor(RaisingProvider())
        with caplog.at_level(logging.ERROR, logger="src.api.sync_status"):
            assert await monitor.check() is SyncStatus.UNAVAILABLE
        assert "container unreachable" in caplog.text


class TestOverlappingChecks:
    @pytest.mark.asyncio
    async def test_stale_reply_does_not_overwrite_newer_result(self):
        provider = GatedProvider()
        monitor = SyncStatusMonitor(provider)

        first = asyncio.create_task(monitor.check())
        await asyncio.sleep(0)
        second = asyncio.create_task(monitor.check())
        await asyncio.sleep(0)
        assert len(provider.pending) == 2

        provider.pending[1].set_result(AccountStatusReply(AccountStatus.AVAILABLE))
        assert await second is SyncStatus.AVAILABLE

        provider.pending[0].set_result(AccountStatusReply(AccountStatus.NO_ACCOUNT))
        assert await first is SyncStatus.AVAILABLE
        assert monitor.status is SyncStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_unanswered_check_stays_checking(self):
        provider = SwitchableProvider()
        monitor = SyncStatusMonitor(provider)
        await monitor.check()

        provider.status = None
        pending = asyncio.create_task(monitor.check())
        await asyncio.sleep(0)
        assert monitor.status is SyncStatus.CHECKING
        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending


class TestListeners:
    @pytest.mark.asyncio
    async def test_unsubscribe_and_failing_listener(self, caplog):
        provider = SwitchableProvider()
        monitor = SyncStatusMonitor(provider)
        good = RecordingListener()

        def broken(status):
            raise ValueError("boom")

        monitor.subscribe(broken)
        unsubscribe = monitor.subscribe(good)
        with caplog.at_level(logging.ERROR, logger="src.api.sync_status"):
            await monitor.check()
        assert good.seen == [SyncStatus.AVAILABLE]
        assert "listener" in caplog.text

        unsubscribe()
        unsubscribe()
        provider.status = AccountStatus.RESTRICTED
        await monitor.check()
        assert good.seen == [SyncStatus.AVAILABLE]


class TestDisplay:
    def test_every_status_has_display_attributes(self):
        assert set(STATUS_DISPLAY) == set(SyncStatus)
        assert STATUS_DISPLAY[SyncStatus.AVAILABLE].icon == "icloud"
        assert STATUS_DISPLAY[SyncStatus.RESTRICTED].color == "red"
        assert STATUS_DISPLAY[SyncStatus.CHECKING].description == "Checking iCloud Status..."

    def test_banner_and_settings_link(self):
        assert not show_banner(SyncStatus.AVAILABLE)
        assert all(show_banner(s) for s in SyncStatus if s is not SyncStatus.AVAILABLE)
        assert {s for s in SyncStatus if offers_settings_link(s)} == {
            SyncStatus.UNAVAILABLE,
            SyncStatus.TEMPORARILY_UNAVAILABLE,
        }
