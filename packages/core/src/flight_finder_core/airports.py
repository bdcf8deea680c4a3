"""Static catalogue of European airports for autocomplete and nearest-airport lookup."""

from __future__ import annotations

import math
from typing import NamedTuple

EARTH_RADIUS_KM = 6371.0


class Airport(NamedTuple):
    iata_code: str
    name: str
    city: str
    country: str
    latitude: float
    longitude: float


EUROPEAN_AIRPORTS: tuple[Airport, ...] = (
    Airport(
        "LHR", "London Heathrow Airport", "London", "United Kingdom", 51.4700, -0.4543
    ),
    Airport(
        "LGW", "London Gatwick Airport", "London", "United Kingdom", 51.1537, -0.1821
    ),
    Airport(
        "MAN", "Manchester Airport", "Manchester", "United Kingdom", 53.3537, -2.2750
    ),
    Airport(
        "EDI", "Edinburgh Airport", "Edinburgh", "United Kingdom", 55.9500, -3.3725
    ),
    Airport(
        "BHX", "Birmingham Airport", "Birmingham", "United Kingdom", 52.4539, -1.7480
    ),
    Airport("GLA", "Glasgow Airport", "Glasgow", "United Kingdom", 55.8719, -4.4331),
    Airport("BRS", "Bristol Airport", "Bristol", "United Kingdom", 51.3827, -2.7191),
    Airport("CDG", "Charles de Gaulle Airport", "Paris", "France", 49.0097, 2.5479),
    Airport("ORY", "Paris Orly Airport", "Paris", "France", 48.7262, 2.3652),
    Airport("NCE", "Nice Côte d'Azur Airport", "Nice", "France", 43.6584, 7.2159),
    Airport("LYS", "Lyon-Saint Exupéry Airport", "Lyon", "France", 45.7256, 5.0811),
    Airport(
        "MRS", "Marseille Provence Airport", "Marseille", "France", 43.4393, 5.2214
    ),
    Airport("TLS", "Toulouse-Blagnac Airport", "Toulouse", "France", 43.6291, 1.3638),
    Airport("FRA", "Frankfurt Airport", "Frankfurt", "Germany", 50.0379, 8.5622),
    Airport("MUC", "Munich Airport", "Munich", "Germany", 48.3538, 11.7861),
    Airport("BER", "Berlin Brandenburg Airport", "Berlin", "Germany", 52.3667, 13.5033),
    Airport("DUS", "Düsseldorf Airport", "Düsseldorf", "Germany", 51.2895, 6.7668),
    Airport("HAM", "Hamburg Airport", "Hamburg", "Germany", 53.6304, 9.9882),
    Airport("CGN", "Cologne Bonn Airport", "Cologne", "Germany", 50.8659, 7.1427),
    Airport("MAD", "Madrid-Barajas Airport", "Madrid", "Spain", 40.4983, -3.5676),
    Airport("BCN", "Barcelona-El Prat Airport", "Barcelona", "Spain", 41.2974, 2.0833),
    Airport(
        "AGP", "Málaga-Costa del Sol Airport", "Málaga", "Spain", 36.6749, -4.4991
    ),
    Airport(
        "PMI", "Palma de Mallorca Airport", "Palma de Mallorca", "Spain",
        39.5517, 2.7388,
    ),
    Airport("ALC", "Alicante-Elche Airport", "Alicante", "Spain", 38.2822, -0.5582),
    Airport("SVQ", "Seville Airport", "Seville", "Spain", 37.4180, -5.8931),
    Airport("VLC", "Valencia Airport", "Valencia", "Spain", 39.4893, -0.4816),
    Airport("BIO", "Bilbao Airport", "Bilbao", "Spain", 43.3011, -2.9106),
    Airport(
        "FCO", "Leonardo da Vinci-Fiumicino Airport", "Rome", "Italy", 41.8003, 12.2389
    ),
    Airport("MXP", "Milan Malpensa Airport", "Milan", "Italy", 45.6306, 8.7281),
    Airport("VCE", "Venice Marco Polo Airport", "Venice", "Italy", 45.5053, 12.3519),
    Airport("NAP", "Naples International Airport", "Naples", "Italy", 40.8860, 14.2908),
    Airport(
        "CTA", "Catania-Fontanarossa Airport", "Catania", "Italy", 37.4668, 15.0664
    ),
    Airport("BGY", "Milan Bergamo Airport", "Milan", "Italy", 45.6739, 9.7042),
    Airport(
        "BLQ", "Bologna Guglielmo Marconi Airport", "Bologna", "Italy", 44.5354, 11.2887
    ),
    Airport(
        "AMS", "Amsterdam Airport Schiphol", "Amsterdam", "Netherlands", 52.3105, 4.7683
    ),
    Airport("EIN", "Eindhoven Airport", "Eindhoven", "Netherlands", 51.4501, 5.3745),
    Airport(
        "RTM", "Rotterdam The Hague Airport", "Rotterdam", "Netherlands",
        51.9569, 4.4372,
    ),
    Airport("BRU", "Brussels Airport", "Brussels", "Belgium", 50.9010, 4.4856),
    Airport(
        "CRL", "Brussels South Charleroi Airport", "Brussels", "Belgium",
        50.4592, 4.4538,
    ),
    Airport("ZRH", "Zurich Airport", "Zurich", "Switzerland", 47.4582, 8.5556),
    Airport("GVA", "Geneva Airport", "Geneva", "Switzerland", 46.2381, 6.1090),
    Airport(
        "BSL", "Basel-Mulhouse-Freiburg Airport", "Basel", "Switzerland",
        47.5896, 7.5299,
    ),
    Airport(
        "VIE", "Vienna International Airport", "Vienna", "Austria", 48.1103, 16.5697
    ),
    Airport("SZG", "Salzburg Airport", "Salzburg", "Austria", 47.7933, 13.0043),
    Airport("INN", "Innsbruck Airport", "Innsbruck", "Austria", 47.2602, 11.3440),
    Airport("LIS", "Lisbon Portela Airport", "Lisbon", "Portugal", 38.7756, -9.1354),
    Airport(
        "OPO", "Francisco Sá Carneiro Airport", "Porto", "Portugal", 41.2481, -8.6814
    ),
    Airport("FAO", "Faro Airport", "Faro", "Portugal", 37.0144, -7.9659),
    Airport(
        "ATH", "Athens International Airport", "Athens", "Greece", 37.9364, 23.9445
    ),
    Airport("SKG", "Thessaloniki Airport", "Thessaloniki", "Greece", 40.5197, 22.9709),
    Airport(
        "HER", "Heraklion International Airport", "Heraklion", "Greece",
        35.3397, 25.1803,
    ),
    Airport("DUB", "Dublin Airport", "Dublin", "Ireland", 53.4213, -6.2701),
    Airport("ORK", "Cork Airport", "Cork", "Ireland", 51.8413, -8.4911),
    Airport("SNN", "Shannon Airport", "Shannon", "Ireland", 52.7020, -8.9248),
    Airport("WAW", "Warsaw Chopin Airport", "Warsaw", "Poland", 52.1657, 20.9671),
    Airport(
        "KRK", "Kraków John Paul II Airport", "Kraków", "Poland", 50.0777, 19.7848
    ),
    Airport(
        "GDN", "Gdańsk Lech Wałęsa Airport", "Gdańsk", "Poland", 54.3776, 18.4662
    ),
    Airport(
        "PRG", "Václav Havel Airport Prague", "Prague", "Czech Republic",
        50.1008, 14.2600,
    ),
    Airport(
        "BUD", "Budapest Ferenc Liszt Airport", "Budapest", "Hungary", 47.4369, 19.2556
    ),
    Airport("CPH", "Copenhagen Airport", "Copenhagen", "Denmark", 55.6180, 12.6560),
    Airport("BLL", "Billund Airport", "Billund", "Denmark", 55.7403, 9.1518),
    Airport(
        "ARN", "Stockholm Arlanda Airport", "Stockholm", "Sweden", 59.6519, 17.9186
    ),
    Airport(
        "GOT", "Gothenburg Landvetter Airport", "Gothenburg", "Sweden", 57.6628, 12.2798
    ),
    Airport("BMA", "Stockholm Bromma Airport", "Stockholm", "Sweden", 59.3544, 17.9417),
    Airport("OSL", "Oslo Gardermoen Airport", "Oslo", "Norway", 60.1939, 11.1004),
    Airport("BGO", "Bergen Airport", "Bergen", "Norway", 60.2934, 5.2181),
    Airport("SVG", "Stavanger Airport", "Stavanger", "Norway", 58.8767, 5.6378),
    Airport("HEL", "Helsinki-Vantaa Airport", "Helsinki", "Finland", 60.3172, 24.9633),
    Airport("IST", "Istanbul Airport", "Istanbul", "Turkey", 41.2753, 28.7519),
    Airport("SAW", "Sabiha Gökçen Airport", "Istanbul", "Turkey", 40.8986, 29.3092),
    Airport("AYT", "Antalya Airport", "Antalya", "Turkey", 36.8987, 30.8005),
    Airport("ZAG", "Zagreb Airport", "Zagreb", "Croatia", 45.7429, 16.0688),
    Airport("DBV", "Dubrovnik Airport", "Dubrovnik", "Croatia", 42.5614, 18.2682),
    Airport("SPU", "Split Airport", "Split", "Croatia", 43.5389, 16.2980),
    Airport("OTP", "Henri Coandă Airport", "Bucharest", "Romania", 44.5711, 26.0850),
    Airport("SOF", "Sofia Airport", "Sofia", "Bulgaria", 42.6967, 23.4114),
    Airport("KEF", "Keflavík Airport", "Reykjavík", "Iceland", 63.9850, -22.6056),
)


def search_airports(query: str | None, limit: int | None = None) -> list[Airport]:
    """Case-insensitive substring match on code, name, city and country.

    An empty query returns the whole catalogue.  Exact code matches sort first.
    """
    if not query or not query.strip():
        matches = list(EUROPEAN_AIRPORTS)
    else:
        term = query.strip().lower()
        matches = [
            ap
            for ap in EUROPEAN_AIRPORTS
            if term in ap.iata_code.lower()
            or term in ap.name.lower()
            or term in ap.city.lower()
            or term in ap.country.lower()
        ]
        matches.sort(key=lambda ap: ap.iata_code.lower() != term)
    return matches[:limit] if limit else matches


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def closest_airport(latitude: float, longitude: float) -> tuple[Airport, float]:
    """Nearest catalogue airport and its distance in km.

    Raises ``ValueError`` for coordinates outside [-90, 90] / [-180, 180].
    """
    if not -90 <= latitude <= 90:
        raise ValueError("Invalid latitude: must be between -90 and 90")
    if not -180 <= longitude <= 180:
        raise ValueError("Invalid longitude: must be between -180 and 180")
    return min(
        (
            (ap, haversine_km(latitude, longitude, ap.latitude, ap.longitude))
            for ap in EUROPEAN_AIRPORTS
        ),
        key=lambda pair: pair[1],
    )
