"""Operation submission, reservation and toast routing."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal

import pytest

from fakes import ALICE, FakeGardenChain, FakeWallet, SignalRecorder, client_factory_for
from garden_console.app import GardenConsole
from garden_console.errors import ChainConnectionError, NotConnected, SubmissionError
from garden_console.events import Toast
from garden_console.notifications import NotificationCategory
from garden_console.models import display_amount
from garden_console.operations import NO_ASSET, Coin, OperationKind


@pytest.fixture
def chain(config) -> FakeGardenChain:
    return FakeGardenChain(config.contract_address, config.presale_denom)


@pytest.fixture
def console(config, store, chain) -> GardenConsole:
    console = GardenConsole(config, client_factory_for(chain), FakeWallet(), store=store)
    asyncio.run(console.session.connect())
    return console


def _create(console: GardenConsole, ticker: str = "TNT") -> str:
    asyncio.run(console.ops.create_shitcoin(ticker, "testnet terror", "69,420"))
    return f"factory/{console.config.contract_address}/{ticker.lower()}"


def test_operations_require_connection(config, store, chain):
    console = GardenConsole(config, client_factory_for(chain), FakeWallet(), store=store)

    with pytest.raises(NotConnected):
        asyncio.run(console.ops.launch_shitcoin("factory/x/tnt"))
    with pytest.raises(NotConnected):
        asyncio.run(console.ops.shitcoins())
    assert chain.executed == []


def test_create_builds_message_fee_and_funds(console, chain):
    toasts = SignalRecorder(console.bus.toast)
    reloads = SignalRecorder(console.bus.reload_all)

    outcome = asyncio.run(console.ops.create_shitcoin("  TNT ", " testnet terror ", "69,420"))

    sender, msg, fee, funds = chain.executed[0]
    assert outcome is not None and outcome.transaction_hash == "TX1"
    assert sender == ALICE
    assert msg == {"create_shitcoin": {"ticker": "TNT", "name": "testnet terror", "supply": "69420"}}
    assert fee.gas == 750_000
    assert funds == [Coin(10_000, "untrn")]
    assert toasts.calls[0][0].category is NotificationCategory.CREATE_SHITCOIN
    assert "$TNT" in toasts.calls[0][0].message
    assert reloads.count == 1
    assert not console.tracker.working


def test_enter_presale_attaches_scaled_funds(console, chain):
    denom = _create(console)
    reloads = SignalRecorder(console.bus.reload)

    asyncio.run(console.ops.enter_presale(denom, "12,345"))

    _, msg, fee, funds = chain.executed[-1]
    assert msg == {"enter_presale": {"denom": denom}}
    assert fee.gas == 500_000
    assert funds == [Coin(12_345_000_000, console.config.presale_denom)]
    assert reloads.calls == [(denom,)]


@pytest.mark.parametrize(
    "method, args, key, gas",
    [
        ("extend_presale", (), "extend_presale", 200_000),
        ("launch_shitcoin", (), "launch_shitcoin", 750_000),
        ("claim_shitcoin", (), "claim_shitcoin", 500_000),
        ("set_url", ("https://example.com/tnt.png",), "set_url", 500_000),
    ],
)
def test_unfunded_operations_carry_no_funds(console, chain, method, args, key, gas):
    denom = "factory/x/tnt"
    chain.fail_with = SubmissionError("not relevant here")

    asyncio.run(getattr(console.ops, method)(denom, *args))

    _, msg, fee, funds = chain.executed[-1]
    assert list(msg) == [key]
    assert msg[key]["denom"] == denom
    assert fee.gas == gas
    assert funds == []


def test_invalid_input_rejected_before_reserving(console, chain):
    with pytest.raises(ValueError):
        asyncio.run(console.ops.enter_presale("factory/x/tnt", "lots"))
    with pytest.raises(ValueError):
        asyncio.run(console.ops.create_shitcoin("TNT", "terror", "-1"))
    assert chain.executed == []
    assert not console.tracker.working


def test_suppressed_success_still_shows_errors(console, chain):
    denom = _create(console)
    chain.block_time += chain.presale_length
    console.gate.suppress(NotificationCategory.SHITCOIN_LAUNCHED)
    toasts = SignalRecorder(console.bus.toast)
    reloads = SignalRecorder(console.bus.reload)

    assert asyncio.run(console.ops.launch_shitcoin(denom)) is not None
    assert toasts.calls == []
    assert reloads.calls == [(denom,)]

    assert asyncio.run(console.ops.launch_shitcoin(denom)) is None
    toast: Toast = toasts.calls[0][0]
    assert toast.is_error
    assert "shitcoin already launched" in toast.message


def test_failure_releases_reservation(console, chain):
    chain.fail_with = SubmissionError("out of gas")
    busy = SignalRecorder(console.bus.busy_changed)

    assert asyncio.run(console.ops.claim_shitcoin("factory/x/tnt")) is None

    assert not console.ops.is_busy(OperationKind.CLAIM, "factory/x/tnt")
    assert busy.calls == [("claim", "factory/x/tnt", True), ("claim", "factory/x/tnt", False)]


def test_same_key_is_serialized_other_keys_run_concurrently(console, chain):
    chain.fail_with = None
    first = _create(console, "AAA")
    second = _create(console, "BBB")

    async def scenario() -> list:
        chain.hold = asyncio.Event()
        a1 = asyncio.create_task(console.ops.enter_presale(first, "1"))
        b1 = asyncio.create_task(console.ops.enter_presale(second, "2"))
        await asyncio.sleep(0)

        assert console.ops.is_busy(OperationKind.ENTER_PRESALE, first)
        assert console.ops.is_busy(OperationKind.ENTER_PRESALE, second)
        assert not console.ops.is_busy(OperationKind.CLAIM, first)
        assert console.ops.working

        duplicate = await console.ops.enter_presale(first, "5")
        chain.hold.set()
        return [duplicate, await a1, await b1]

    duplicate, a1, b1 = asyncio.run(scenario())

    assert duplicate is None
    assert a1 is not None and b1 is not None
    entered = [msg for _, msg, _, _ in chain.executed if "enter_presale" in msg]
    assert len(entered) == 2
    assert not console.ops.working


def test_create_reservation_uses_sentinel_key(console, chain):
    async def scenario() -> None:
        chain.hold = asyncio.Event()
        task = asyncio.create_task(console.ops.create_shitcoin("TNT", "terror", "1"))
        await asyncio.sleep(0)
        assert console.ops.is_busy(OperationKind.CREATE, NO_ASSET)
        chain.hold.set()
        await task

    asyncio.run(scenario())
    assert not console.ops.is_busy(OperationKind.CREATE)


def test_queries_parse_contract_responses(console, chain):
    denom = _create(console)
    asyncio.run(console.ops.enter_presale(denom, "3"))

    page = asyncio.run(console.ops.shitcoins(limit=5))
    metadata = asyncio.run(console.ops.shitcoin_metadata(denom))
    degen = asyncio.run(console.ops.degen_metadata(denom))
    settings = asyncio.run(console.ops.garden_config())

    assert page.total == 1 and page.limit == 5
    assert page.shitcoins[0].denom == denom
    assert metadata.presale_raise == 3_000_000
    assert display_amount(metadata.presale_raise) == 3
    assert metadata.supply == 69_420 * 10**6
    assert metadata.expiry_ms == metadata.presale_end * 1000
    assert degen.presale_submission == 3_000_000
    assert degen.percent_of_presale(metadata) == 100
    assert degen.claimable_amount(metadata) == metadata.supply // 2
    assert settings.presale_length == chain.presale_length


@pytest.mark.parametrize(
    "raised, expected",
    [
        (RuntimeError("account sequence mismatch"), SubmissionError),
        (ConnectionResetError("rpc hung up"), ChainConnectionError),
        (SubmissionError("presale is over"), SubmissionError),
    ],
)
def test_execute_failures_map_onto_taxonomy(console, chain, caplog, raised, expected):
    chain.fail_with = raised
    toasts = SignalRecorder(console.bus.toast)

    with caplog.at_level(logging.WARNING, logger="garden_console.coordinator"):
        assert asyncio.run(console.ops.claim_shitcoin("factory/x/tnt")) is None

    toast: Toast = toasts.calls[0][0]
    assert toast.is_error
    assert toast.message == f"Something went wrong: {raised}"
    assert expected.__name__ in caplog.text
    assert not console.ops.is_busy(OperationKind.CLAIM, "factory/x/tnt")


def test_presale_share_of_supply(console, chain):
    denom = _create(console)
    asyncio.run(console.ops.enter_presale(denom, "1"))
    chain.submissions[(denom, "neutron1someoneelse")] += 3_000_000
    chain.shitcoins[denom]["presale_raise"] += 3_000_000

    metadata = asyncio.run(console.ops.shitcoin_metadata(denom))
    degen = asyncio.run(console.ops.degen_metadata(denom))

    assert degen.percent_of_presale(metadata) == 25
    assert degen.percent_of_supply(metadata) == Decimal("12.5")
    assert degen.claimable_amount(metadata) == metadata.supply // 8
