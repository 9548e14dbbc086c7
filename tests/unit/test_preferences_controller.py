import asyncio

from clients.rental_api_sdk.errors import ApiError
from clients.rental_api_sdk.models import PreferencesRecord

from rental_console.app.notifications import NotificationKind, NotificationQueue
from rental_console.app.preferences_controller import PreferencesController, PreferencesMode


def _answer(value: bool):
    return lambda _message: value


class _StubPreferencesClient:
    def __init__(self, record: PreferencesRecord | None = None, fail_on: str | None = None) -> None:
        self.record = record
        self.fail_on = fail_on
        self.calls: list[tuple[str, str, dict | None]] = []

    async def get_preferences(self, account_id: str) -> PreferencesRecord | None:
        self.calls.append(("get", account_id, None))
        return self.record

    async def create_preferences(self, account_id: str, values: dict) -> dict:
        self.calls.append(("create", account_id, values))
        self._maybe_fail("create")
        self.record = PreferencesRecord(id="pr-1", **values)
        return {"id": "pr-1"}

    async def update_preferences(self, account_id: str, values: dict) -> dict:
        self.calls.append(("update", account_id, values))
        self._maybe_fail("update")
        self.record = PreferencesRecord(id="pr-1", **values)
        return {}

    async def delete_preferences(self, account_id: str) -> None:
        self.calls.append(("delete", account_id, None))
        self._maybe_fail("delete")
        self.record = None

    def _maybe_fail(self, operation: str) -> None:
        if operation == self.fail_on:
            raise ApiError(code="BAD_REQUEST", message="max_price must be a number", status_code=400)


def test_absent_preferences_leave_mode_none() -> None:
    notifications = NotificationQueue()
    controller = PreferencesController(_StubPreferencesClient(), notifications)

    record = asyncio.run(controller.load("u-1"))

    assert record is None
    assert controller.mode == PreferencesMode.NONE
    assert notifications.items == []


def test_save_creates_when_absent_then_reloads() -> None:
    client = _StubPreferencesClient()
    notifications = NotificationQueue()
    controller = PreferencesController(client, notifications)

    async def scenario() -> bool:
        await controller.load("u-1")
        controller.start_edit()
        return await controller.save({"min_price": "800", "max_price": 1200})

    assert asyncio.run(scenario()) is True
    assert [call[0] for call in client.calls] == ["get", "create", "get"]
    assert client.calls[1][2] == {"min_price": 800, "max_price": 1200}
    assert controller.mode == PreferencesMode.VIEW
    assert notifications.items[-1].kind == NotificationKind.SUCCESS


def test_save_updates_existing_and_reports_server_error() -> None:
    client = _StubPreferencesClient(record=PreferencesRecord(id="pr-1", min_price=500), fail_on="update")
    notifications = NotificationQueue()
    controller = PreferencesController(client, notifications)

    async def scenario() -> bool:
        await controller.load("u-1")
        controller.start_edit()
        return await controller.save({"max_price": 900})

    assert asyncio.run(scenario()) is False
    assert controller.mode == PreferencesMode.EDIT
    assert notifications.items[-1].message == "max_price must be a number"


def test_invalid_range_never_reaches_the_api() -> None:
    client = _StubPreferencesClient()
    controller = PreferencesController(client, NotificationQueue())

    async def scenario() -> bool:
        await controller.load("u-1")
        return await controller.save({"min_price": 3000, "max_price": 1000})

    assert asyncio.run(scenario()) is False
    assert [call[0] for call in client.calls] == ["get"]


def test_delete_requires_confirmation() -> None:
    client = _StubPreferencesClient(record=PreferencesRecord(id="pr-1"))

    declined = PreferencesController(client, NotificationQueue(), confirm=_answer(False))
    asyncio.run(declined.load("u-1"))
    assert asyncio.run(declined.delete()) is False
    assert "delete" not in [call[0] for call in client.calls]

    accepted = PreferencesController(client, NotificationQueue(), confirm=_answer(True))
    asyncio.run(accepted.load("u-1"))
    assert asyncio.run(accepted.delete()) is True
    assert accepted.record is None
    assert accepted.mode == PreferencesMode.NONE


def test_cancel_edit_returns_to_view_when_record_exists() -> None:
    client = _StubPreferencesClient(record=PreferencesRecord(id="pr-1", min_price=500))
    controller = PreferencesController(client, NotificationQueue())

    asyncio.run(controller.load("u-1"))
    controller.start_edit()
    assert controller.mode == PreferencesMode.EDIT
    controller.cancel_edit()

    assert controller.mode == PreferencesMode.VIEW
    assert [call[0] for call in client.calls] == ["get"]


class _GatedPreferencesClient:
    def __init__(self) -> None:
        self.gates: dict[str, asyncio.Event] = {}

    async def get_preferences(self, account_id: str) -> PreferencesRecord:
        gate = asyncio.Event()
        self.gates[account_id] = gate
        await gate.wait()
        return PreferencesRecord(id=f"pref-{account_id}", min_price=100)


def test_load_landing_after_reset_is_dropped() -> None:
    client = _GatedPreferencesClient()
    controller = PreferencesController(client, NotificationQueue())

    async def scenario():
        pending = asyncio.create_task(controller.load("u-A"))
        await asyncio.sleep(0)
        controller.reset()
        client.gates["u-A"].set()
        return await pending

    result = asyncio.run(scenario())

    assert result is None
    assert controller.account_id is None
    assert controller.record is None
    assert controller.mode == PreferencesMode.NONE
    assert controller.loading is False


def test_load_for_previous_account_does_not_overwrite_newer_one() -> None:
    client = _GatedPreferencesClient()
    controller = PreferencesController(client, NotificationQueue())

    async def scenario() -> None:
        first = asyncio.create_task(controller.load("u-A"))
        await asyncio.sleep(0)
        second = asyncio.create_task(controller.load("u-B"))
        await asyncio.sleep(0)
        client.gates["u-B"].set()
        await second
        client.gates["u-A"].set()
        await first

    asyncio.run(scenario())

    assert controller.account_id == "u-B"
    assert controller.record is not None
    assert controller.record.id == "pref-u-B"
    assert controller.mode == PreferencesMode.VIEW
