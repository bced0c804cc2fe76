"""Airport search: ranks airports for a free-text query by code, city and name."""

import re
import unicodedata
from dataclasses import dataclass

from sunside.models import Airport

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _normalize_text(value: str) -> str:
    """Lowercase, strip accents, collapse everything else to single spaces."""
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return _NON_ALNUM.sub(" ", stripped.lower()).strip()


def _normalize_code(value: str) -> str:
    return _normalize_text(value).replace(" ", "")


@dataclass(frozen=True)
class IndexedAirport:
    """Airport with pre-normalised search fields."""

    airport: Airport
    iata: str
    icao: str
    ident: str
    name: str
    city: str
    country: str
    words: tuple[str, ...]
    combined: str


def build_search_index(airports: list[Airport]) -> tuple[IndexedAirport, ...]:
    """Normalise every airport's searchable fields once."""
    index: list[IndexedAirport] = []
    for airport in airports:
        iata = _normalize_code(airport.iata) if airport.iata else ""
        icao = _normalize_code(airport.icao) if airport.icao else ""
        ident = _normalize_code(airport.ident) if airport.ident else ""
        name = _normalize_text(airport.name or "")
        city = _normalize_text(airport.city or "")
        country = _normalize_text(airport.country or "")
        words = tuple(w for w in (*name.split(" "), *city.split(" ")) if w)
        index.append(
            IndexedAirport(
                airport=airport,
                iata=iata,
                icao=icao,
                ident=ident,
                name=name,
                city=city,
                country=country,
                words=words,
                combined=f"{iata} {icao} {ident} {name} {city} {country}".strip(),
            )
        )
    return tuple(index)


def _score(entry: IndexedAirport, q_text: str, q_code: str, tokens: list[str]) -> float | None:
    """Lower is better. None means no match."""
    if not all(token in entry.combined for token in tokens):
        return None

    scores: list[float] = []
    codes = ((entry.iata, 0), (entry.icao, 1), (entry.ident, 2))

    # Exact code, then code prefix (shorter remainder first), then substring.
    for code, rank in codes:
        if code and code == q_code:
            scores.append(rank)
    for code, rank in codes:
        if code and code.startswith(q_code):
            scores.append(10 + rank + max(0, len(code) - len(q_code)))

    if entry.city and entry.city.startswith(q_text):
        scores.append(20)
    if entry.name and entry.name.startswith(q_text):
        scores.append(21)
    if all(any(word.startswith(token) for word in entry.words) for token in tokens):
        scores.append(22)

    for code, rank in codes:
        if code and q_code in code:
            scores.append(30 + rank + code.index(q_code))
    if entry.city and q_text in entry.city:
        scores.append(40 + entry.city.index(q_text))
    if entry.name and q_text in entry.name:
        scores.append(41 + entry.name.index(q_text))

    if not scores:
        return None

    penalty = 0.0
    if not entry.iata:
        penalty += 0.25
    if not entry.city:
        penalty += 0.1
    return min(scores) + penalty


def search_airports(
    index: tuple[IndexedAirport, ...], query: str, limit: int = 20
) -> list[Airport]:
    """Best matches for ``query``, at most ``limit`` of them.

    Ties are broken in favour of airports with an IATA code, then
    alphabetically by code and name.
    """
    q_text = _normalize_text(query)
    if not q_text:
        return []
    q_code = _normalize_code(query)
    tokens = q_text.split()

    scored: list[tuple[float, bool, str, Airport]] = []
    for entry in index:
        score = _score(entry, q_text, q_code, tokens)
        if score is None:
            continue
        a = entry.airport
        code = a.iata or a.icao or a.ident or ""
        scored.append((score, not entry.iata, f"{code} {a.name}".lower(), a))

    scored.sort(key=lambda s: s[:3])
    return [s[3] for s in scored[:limit]]
