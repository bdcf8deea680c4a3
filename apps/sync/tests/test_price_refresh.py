"""Price refresh pipeline: batching, rate limits, resumability."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from flight_finder_core.errors import RateLimited, UpstreamAuthError, UpstreamError
from flight_finder_db.models import FlightPrice
from flight_finder_sync.pipeline import PriceRefresh
from flight_finder_sync.pipeline.refresh import select_candidates


@pytest.fixture
def destinations(make_destination):
    return [
        make_destination("BCN", "KL", "VY", "HV"),
        make_destination("LIS", "KL", "TP"),
        make_destination("OPO", "HV"),
        make_destination("MAD", "KL", "UX"),
    ]


def test_select_candidates_filters_and_orders(destinations):
    picked = select_candidates(destinations, fresh_codes={"MAD"}, min_carriers=2)

    assert [d.code for d in picked] == ["BCN", "LIS"]


def test_select_candidates_counts_distinct_carriers(make_destination):
    doubled = make_destination("NCE", "KL", "KL")

    assert select_candidates([doubled], set(), min_carriers=2) == []


async def test_refresh_batch(
    destinations, make_store, fake_offers, sync_settings, sleep, clock, today
):
    store = make_store(destinations)
    offers = fake_offers()
    refresh = PriceRefresh(offers, store, sync_settings, sleep=sleep, clock=clock)

    result = await refresh.run(batch_size=2, week_offsets=[0], today=today)

    assert result.processed == 2
    assert result.remaining == 1
    assert result.prices_saved == 6
    assert result.errors == 0
    assert not result.completed
    assert [call[0] for call in offers.calls] == ["BCN"] * 3 + ["LIS"] * 3
    assert all(call[3] == 1 for call in offers.calls)
    assert sorted({(c[1], c[2]) for c in offers.calls}) == [
        (date(2026, 10, 22), date(2026, 10, 25)),
        (date(2026, 10, 23), date(2026, 10, 25)),
        (date(2026, 10, 23), date(2026, 10, 26)),
    ]
    # search delay between calls, destination delay between destinations
    assert sleep.delays == [3.0, 3.0, 1.0, 3.0, 3.0]


async def test_refresh_keeps_cheapest_offer(
    make_destination, make_store, fake_offers, make_offer, sync_settings, sleep, clock
):
    store = make_store([make_destination("BCN", "KL", "VY")])
    offers = fake_offers(
        {
            "BCN": [
                [make_offer("180.00", id="a"), make_offer("95.50", ("VY",), id="b")],
                [],
                [make_offer("120.00")],
            ]
        }
    )
    refresh = PriceRefresh(offers, store, sync_settings, sleep=sleep, clock=clock)

    result = await refresh.run(week_offsets=[0])

    assert result.prices_saved == 2
    thu_sun = store.prices[("BCN", date(2026, 10, 22), date(2026, 10, 25))][0]
    assert thu_sun.price == Decimal("95.50")
    assert thu_sun.carriers == ["VY"]
    assert thu_sun.flight_data["id"] == "b"


async def test_rate_limit_stops_destination_and_pauses(
    destinations, make_store, fake_offers, make_offer, sync_settings, sleep, clock
):
    store = make_store(destinations)
    offers = fake_offers({"BCN": [[make_offer("80.00")], RateLimited()]})
    refresh = PriceRefresh(offers, store, sync_settings, sleep=sleep, clock=clock)

    result = await refresh.run(batch_size=2, week_offsets=[0])

    assert [call[0] for call in offers.calls] == ["BCN", "BCN", "LIS", "LIS", "LIS"]
    assert result.rate_limited == 1
    assert result.prices_saved == 4
    assert result.errors == 0
    assert sleep.delays == [3.0, 10.0, 1.0, 3.0, 3.0]


async def test_upstream_errors_are_counted_not_fatal(
    destinations, make_store, fake_offers, sync_settings, sleep, clock
):
    store = make_store(destinations)
    offers = fake_offers({"BCN": [UpstreamError(500, "boom"), UpstreamError(400)]})
    refresh = PriceRefresh(offers, store, sync_settings, sleep=sleep, clock=clock)

    result = await refresh.run(batch_size=1, week_offsets=[0])

    assert result.errors == 2
    assert result.prices_saved == 1
    assert len(offers.calls) == 3


async def test_credential_failure_aborts_run(
    destinations, make_store, fake_offers, sync_settings, sleep, clock
):
    store = make_store(destinations)
    offers = fake_offers({"BCN": [UpstreamAuthError(401, "invalid_client")]})
    refresh = PriceRefresh(offers, store, sync_settings, sleep=sleep, clock=clock)

    with pytest.raises(UpstreamAuthError):
        await refresh.run(batch_size=2, week_offsets=[0])
    assert store.price_writes == 0


async def test_rerun_picks_up_remaining_destinations(
    destinations, make_store, fake_offers, sync_settings, sleep, clock
):
    store = make_store(destinations)
    offers = fake_offers()
    refresh = PriceRefresh(offers, store, sync_settings, sleep=sleep, clock=clock)

    first = await refresh.run(batch_size=2, week_offsets=[0])
    offers.calls.clear()
    second = await refresh.run(batch_size=2, week_offsets=[0])

    assert first.remaining == 1
    assert {call[0] for call in offers.calls} == {"MAD"}
    assert second.processed == 1
    assert second.remaining == 0
    assert second.completed


async def test_destinations_become_stale_after_window(
    destinations, make_store, fake_offers, sync_settings, sleep, clock
):
    store = make_store(destinations)
    refresh = PriceRefresh(
        fake_offers(), store, sync_settings, sleep=sleep, clock=clock
    )
    await refresh.run(batch_size=10, week_offsets=[0])

    clock.advance(timedelta(hours=23))
    assert (await refresh.run(batch_size=10, week_offsets=[0])).processed == 0

    clock.advance(timedelta(hours=1))
    assert (await refresh.run(batch_size=10, week_offsets=[0])).processed == 3


async def test_offset_skips_leading_candidates(
    destinations, make_store, fake_offers, sync_settings, sleep, clock
):
    offers = fake_offers()
    refresh = PriceRefresh(
        offers, make_store(destinations), sync_settings, sleep=sleep, clock=clock
    )

    result = await refresh.run(batch_size=1, week_offsets=[0], offset_destinations=1)

    assert {call[0] for call in offers.calls} == {"LIS"}
    assert result.remaining == 1


async def test_refresh_twice_against_database_is_idempotent(
    destinations, sql_store, session_factory, fake_offers, sync_settings, sleep, clock
):
    await sql_store.upsert_destinations(destinations)
    refresh = PriceRefresh(
        fake_offers(), sql_store, sync_settings, sleep=sleep, clock=clock
    )

    first = await refresh.run(batch_size=2, week_offsets=[0])
    second = await refresh.run(batch_size=2, week_offsets=[0])
    # Force a third pass over everything: same keys must be updated, not duplicated.
    clock.advance(timedelta(days=2))
    third = await refresh.run(batch_size=10, week_offsets=[0])

    assert first.processed == 2
    assert second.processed == 1
    assert third.processed == 3
    async with session_factory() as session:
        total = await session.scalar(select(func.count()).select_from(FlightPrice))
    assert total == 9
