import asyncio

from clients.rental_api_sdk.errors import ServerError
from clients.rental_api_sdk.normalizers import PluralEnvelope

from rental_console.app.admin_console import AdminConsole
from rental_console.app.config import AppConfig
from rental_console.app.fetch_orchestrator import FetchMode


class _GatedAccountsClient:
    """Each page request blocks until the test releases it."""

    def __init__(self) -> None:
        self.gates: dict[int, asyncio.Event] = {}
        self.fail_pages: set[int] = set()

    async def list_accounts(self, **params) -> PluralEnvelope:
        page = params["page"]
        gate = asyncio.Event()
        self.gates[page] = gate
        await gate.wait()
        if page in self.fail_pages:
            raise ServerError(code="HTTP_ERROR", message="boom", status_code=500)
        return PluralEnvelope(key="users", items=[{"id": f"u-page-{page}"}], total=30)


class _Unused:
    pass


def _console(accounts: _GatedAccountsClient) -> AdminConsole:
    return AdminConsole(
        accounts=accounts,
        listings=_Unused(),
        complexes=_Unused(),
        preferences=_Unused(),
        config=AppConfig(debounce_ms=0),
    )


def test_late_page_one_response_is_discarded() -> None:
    accounts = _GatedAccountsClient()
    console = _console(accounts)

    async def scenario():
        first = asyncio.create_task(console.fetcher.fetch(FetchMode.REFINE))
        await asyncio.sleep(0)
        console.query.pagination.page = 2
        second = asyncio.create_task(console.fetcher.fetch(FetchMode.REFINE))
        await asyncio.sleep(0)

        accounts.gates[2].set()
        second_result = await second
        accounts.gates[1].set()
        first_result = await first
        return first_result, second_result

    first_result, second_result = asyncio.run(scenario())

    assert second_result.applied is True
    assert first_result.applied is False
    assert console.state.rows == [{"id": "u-page-2"}]
    assert console.query.pagination.page == 2


def test_response_for_superseded_query_is_discarded_even_if_it_lands_first() -> None:
    accounts = _GatedAccountsClient()
    console = _console(accounts)

    async def scenario():
        first = asyncio.create_task(console.fetcher.fetch(FetchMode.REFINE))
        await asyncio.sleep(0)
        console.query.pagination.page = 2
        accounts.gates[1].set()
        return await first

    result = asyncio.run(scenario())

    assert result.applied is False
    assert console.state.rows == []
    assert console.query.pagination.total == 0


def test_stale_failure_does_not_surface_an_error() -> None:
    accounts = _GatedAccountsClient()
    accounts.fail_pages = {1}
    console = _console(accounts)

    async def scenario():
        first = asyncio.create_task(console.fetcher.fetch(FetchMode.INITIAL))
        await asyncio.sleep(0)
        console.query.pagination.page = 2
        second = asyncio.create_task(console.fetcher.fetch(FetchMode.REFINE))
        await asyncio.sleep(0)
        accounts.gates[2].set()
        await second
        accounts.gates[1].set()
        await first

    asyncio.run(scenario())

    assert console.state.last_error is None
    assert console.notifications.items == []
    assert console.state.page_loading is False


def test_results_after_close_are_dropped() -> None:
    accounts = _GatedAccountsClient()
    console = _console(accounts)

    async def scenario():
        pending = asyncio.create_task(console.fetcher.fetch(FetchMode.REFINE))
        await asyncio.sleep(0)
        console.fetcher.close()
        accounts.gates[1].set()
        return await pending

    result = asyncio.run(scenario())

    assert result.applied is False
    assert console.fetcher.alive is False
    assert console.state.rows == []
