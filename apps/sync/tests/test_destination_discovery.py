"""Destination discovery: pagination, enrichment, region filter, rate limits."""

from __future__ import annotations

from datetime import date

import pytest

from flight_finder_core.errors import ConfigurationError, RateLimited, UpstreamError
from flight_finder_gds.amadeus import Location
from flight_finder_gds.schiphol import DeparturesPage
from flight_finder_sync.pipeline import DestinationDiscovery

THU = date(2026, 10, 22)
FRI = date(2026, 10, 23)
SAT = date(2026, 10, 24)


def _location(code: str, city: str, country: str, country_code: str) -> Location:
    return Location(
        iata_code=code, city=city, country=country, country_code=country_code
    )


LOCATIONS = {
    "BCN": _location("BCN", "Barcelona", "Spain", "ES"),
    "LIS": _location("LIS", "Lisbon", "Portugal", "PT"),
    "JFK": _location("JFK", "New York", "United States", "US"),
    "CDG": _location("CDG", "Paris", "France", "FR"),
}


@pytest.fixture
def pages(make_flight):
    return {
        (THU, 0): DeparturesPage(
            flights=[make_flight("KL", "BCN"), make_flight("VY", "BCN")],
            is_last_page=False,
        ),
        (THU, 1): DeparturesPage(
            flights=[make_flight("TP", "LIS"), make_flight("DL", "JFK")],
            is_last_page=True,
        ),
        (FRI, 0): DeparturesPage(
            flights=[make_flight("KL", "LIS"), make_flight("HV", "BCN")],
            is_last_page=True,
        ),
    }


async def test_discovery_aggregates_and_filters_region(
    pages, fake_schedule, fake_locations, make_store, sync_settings, sleep, today
):
    schedule = fake_schedule(pages)
    locations = fake_locations(LOCATIONS)
    store = make_store()
    discovery = DestinationDiscovery(
        schedule, locations, store, sync_settings, sleep=sleep
    )

    result = await discovery.run(today)

    assert schedule.calls == [(THU, 0), (THU, 1), (FRI, 0), (SAT, 0)]
    assert result.dates_scanned == 3
    assert result.pages_fetched == 4
    assert result.destinations_found == 3
    assert result.skipped_outside_region == 1
    assert result.destinations_saved == 2
    assert store.destinations["BCN"].carriers == ["HV", "KL", "VY"]
    assert store.destinations["LIS"].carriers == ["KL", "TP"]
    assert store.destinations["LIS"].city == "Lisbon"
    assert "JFK" not in store.destinations
    assert locations.calls == ["BCN", "JFK", "LIS"]


async def test_rate_limit_aborts_only_current_date(
    make_flight, fake_schedule, fake_locations, make_store, sync_settings, sleep, today
):
    schedule = fake_schedule(
        {
            (THU, 0): DeparturesPage(
                flights=[make_flight("KL", "BCN"), make_flight("VY", "BCN")],
                is_last_page=False,
            ),
            (THU, 1): RateLimited(),
            (FRI, 0): DeparturesPage(
                flights=[make_flight("TP", "LIS")], is_last_page=True
            ),
        }
    )
    store = make_store()
    discovery = DestinationDiscovery(
        schedule, fake_locations(LOCATIONS), store, sync_settings, sleep=sleep
    )

    result = await discovery.run(today)

    assert (FRI, 0) in schedule.calls
    assert (THU, 2) not in schedule.calls
    assert result.rate_limited
    assert sync_settings.rate_limit_pause in sleep.delays
    assert set(store.destinations) == {"BCN", "LIS"}


async def test_rate_limit_during_enrichment_keeps_partial_results(
    make_flight, fake_schedule, fake_locations, make_store, sync_settings, sleep, today
):
    schedule = fake_schedule(
        {
            (THU, 0): DeparturesPage(
                flights=[
                    make_flight("KL", "BCN"),
                    make_flight("AF", "CDG"),
                    make_flight("TP", "LIS"),
                ],
                is_last_page=True,
            ),
        }
    )
    locations = fake_locations({**LOCATIONS, "CDG": RateLimited()})
    store = make_store()
    discovery = DestinationDiscovery(
        schedule, locations, store, sync_settings, sleep=sleep
    )

    result = await discovery.run(today)

    assert locations.calls == ["BCN", "CDG"]
    assert result.rate_limited
    assert result.destinations_saved == 1
    assert set(store.destinations) == {"BCN"}


async def test_known_destinations_are_not_looked_up_again(
    pages,
    fake_schedule,
    fake_locations,
    make_store,
    make_destination,
    sync_settings,
    sleep,
    today,
):
    store = make_store([make_destination("BCN", "KL")])
    locations = fake_locations(LOCATIONS)
    discovery = DestinationDiscovery(
        fake_schedule(pages), locations, store, sync_settings, sleep=sleep
    )

    await discovery.run(today)

    assert "BCN" not in locations.calls
    assert store.destinations["BCN"].carriers == ["HV", "KL", "VY"]


async def test_failed_lookup_is_skipped(
    pages, fake_schedule, fake_locations, make_store, sync_settings, sleep, today
):
    locations = fake_locations({**LOCATIONS, "BCN": UpstreamError(500, "oops")})
    store = make_store()
    discovery = DestinationDiscovery(
        fake_schedule(pages), locations, store, sync_settings, sleep=sleep
    )

    result = await discovery.run(today)

    assert result.errors == 1
    assert set(store.destinations) == {"LIS"}


async def test_page_ceiling_stops_pagination(
    make_flight, fake_schedule, fake_locations, make_store, sync_settings, sleep, today
):
    sync_settings.page_ceiling = 3
    sync_settings.discovery_weekdays = [3]
    endless = DeparturesPage(flights=[make_flight("KL", "BCN")], is_last_page=False)
    schedule = fake_schedule({(THU, page): endless for page in range(10)})
    discovery = DestinationDiscovery(
        schedule, fake_locations(LOCATIONS), make_store(), sync_settings, sleep=sleep
    )

    result = await discovery.run(today)

    assert schedule.calls == [(THU, 0), (THU, 1), (THU, 2)]
    assert result.pages_fetched == 3


async def test_missing_credentials_are_fatal(
    fake_schedule, fake_locations, make_store, sync_settings, sleep, today
):
    schedule = fake_schedule({(THU, 0): ConfigurationError("SCHIPHOL_APP_ID")})
    discovery = DestinationDiscovery(
        schedule, fake_locations(LOCATIONS), make_store(), sync_settings, sleep=sleep
    )

    with pytest.raises(ConfigurationError):
        await discovery.run(today)


async def test_rejected_schedule_keys_are_fatal(
    fake_schedule, fake_locations, make_store, sync_settings, sleep, today
):
    schedule = fake_schedule({(THU, 0): UpstreamError(401, "Authentication failed")})
    discovery = DestinationDiscovery(
        schedule, fake_locations(LOCATIONS), make_store(), sync_settings, sleep=sleep
    )

    with pytest.raises(UpstreamError):
        await discovery.run(today)
