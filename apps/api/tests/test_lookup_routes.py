"""Airport and destination lookups: no token, validation and caching."""

from __future__ import annotations

from flight_finder_db.models import Destination


async def test_short_location_query_skips_upstream(client, gateway):
    for query in ("", "l", " l "):
        resp = await client.post("/search-airports", json={"query": query})

        assert resp.status_code == 200
        assert resp.json() == {"data": []}
    assert gateway.location_calls == []


async def test_location_search_passes_documents_through_and_caches(
    client, gateway, redis_conn
):
    gateway.locations = [
        {"type": "location", "subType": "AIRPORT", "iataCode": "LIS", "name": "LISBOA"}
    ]

    first = await client.post("/search-airports", json={"query": " Lisb "})
    second = await client.post("/search-airports", json={"query": "lisb"})

    assert first.status_code == 200
    assert first.json()["data"] == gateway.locations
    assert second.json() == first.json()
    assert gateway.location_calls == ["Lisb"]
    assert "airports:locations:lisb" in redis_conn.store


async def test_closest_airport_from_coordinates(client):
    resp = await client.post(
        "/get-closest-airport", json={"latitude": 52.37, "longitude": 4.89}
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["airport"]["iataCode"] == "AMS"
    assert 0 < body["distance"] < 30
    assert body["userLocation"] == {"lat": 52.37, "lon": 4.89}
    assert body["error"] is None


async def test_closest_airport_without_coordinates_uses_default(client):
    resp = await client.post("/get-closest-airport", json={"latitude": 52.37})

    assert resp.status_code == 200
    body = resp.json()
    assert body["airport"]["iataCode"] == "LHR"
    assert body["distance"] is None
    assert body["userLocation"] is None
    assert body["error"] == "Could not detect location, using default airport"


async def test_closest_airport_rejects_out_of_range_coordinates(client):
    resp = await client.post(
        "/get-closest-airport", json={"latitude": 91, "longitude": 200}
    )

    assert resp.status_code == 400
    assert [f["path"] for f in resp.json()["fields"]] == ["latitude", "longitude"]


async def test_destinations_filter_by_code_city_or_country(client, session_factory):
    async with session_factory() as session:
        session.add_all(
            [
                Destination(code="BCN", city="Barcelona", country="Spain"),
                Destination(code="LIS", city="Lisbon", country="Portugal"),
                Destination(code="OPO", city="Porto", country="Portugal"),
                Destination(code="AGP", city="Malaga", country="Spain"),
            ]
        )
        await session.commit()

    everything = await client.post("/get-destinations", json={})
    portugal = await client.post("/get-destinations", json={"query": "PORT"})
    by_code = await client.post("/get-destinations", json={"query": "bcn"})
    wildcard = await client.post("/get-destinations", json={"query": "%"})

    assert [d["code"] for d in everything.json()["data"]] == [
        "BCN",
        "LIS",
        "AGP",
        "OPO",
    ]
    assert [d["code"] for d in portugal.json()["data"]] == ["LIS", "OPO"]
    assert by_code.json()["data"] == [
        {"code": "BCN", "city": "Barcelona", "country": "Spain"}
    ]
    assert wildcard.json()["data"] == []
