"""HTML page parsers for www.ncaa.com.

Stats, rankings, standings, history, schools and bracket pages are only
published as HTML. These helpers turn a parsed page into plain rows; the
resolution layer never looks at markup itself.
"""

import logging
import re

from bs4 import BeautifulSoup, Tag

from ncaa_api.core import BracketRound, BracketStructure

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def _text(node: Tag | None) -> str:
    if node is None:
        return ""
    return _WHITESPACE.sub(" ", node.get_text(" ", strip=True)).strip()


def _headers(table: Tag) -> list[str]:
    head = table.find("thead")
    cells = head.find_all(["th", "td"]) if head else []
    if not cells:
        first_row = table.find("tr")
        cells = first_row.find_all("th") if first_row else []
    return [_text(c) for c in cells]


def _rows(table: Tag, headers: list[str]) -> list[dict]:
    body = table.find("tbody") or table
    rows = []
    for tr in body.find_all("tr"):
        cells = tr.find_all("td")
        if not cells:
            continue
        values = [_text(c) for c in cells]
        if headers and len(headers) == len(values):
            rows.append(dict(zip(headers, values)))
        else:
            keys = [headers[i] if i < len(headers) else str(i) for i in range(len(values))]
            rows.append(dict(zip(keys, values)))
    return rows


def parse_table(soup: BeautifulSoup) -> list[dict]:
    """Rows of the first data table on the page, keyed by column header."""
    table = soup.find("table")
    if table is None:
        return []
    return _rows(table, _headers(table))


def parse_standings(soup: BeautifulSoup) -> list[dict]:
    """One entry per conference table.

    Standings pages repeat a conference heading followed by its table. Headers
    like "CONFERENCE" / "OVERALL" span column groups, so the last header row
    is used for keys.
    """
    standings = []
    for table in soup.find_all("table"):
        heading = table.find_previous(["h3", "h4", "figcaption"])
        conference = _text(heading) if heading else ""

        header_rows = table.find("thead").find_all("tr") if table.find("thead") else []
        if header_rows:
            headers = [_text(c) for c in header_rows[-1].find_all(["th", "td"])]
        else:
            headers = _headers(table)

        standings.append({"conference": conference, "standings": _rows(table, headers)})
    return standings


def parse_page_meta(soup: BeautifulSoup) -> dict:
    """Title, last-updated text and number of result pages."""
    title = _text(soup.find("h2")) or _text(soup.find("h1")) or _text(soup.find("title"))

    updated = ""
    updated_node = soup.find(class_=re.compile(r"(last-?updated|update-time)", re.I))
    if updated_node is not None:
        updated = _text(updated_node)

    pages = 1
    pager = soup.find(class_=re.compile(r"pager", re.I))
    if pager is not None:
        numbers = [int(t) for t in (_text(li) for li in pager.find_all("li")) if t.isdigit()]
        if numbers:
            pages = max(numbers)

    return {"title": title, "updated": updated, "pages": pages}


def parse_schools_index(soup: BeautifulSoup) -> list[dict]:
    """Schools from the schools index table (slug taken from the school link)."""
    schools = []
    for tr in soup.find_all("tr"):
        link = tr.find("a", href=True)
        cells = tr.find_all("td")
        if link is None or not cells:
            continue
        slug = link["href"].rstrip("/").rsplit("/", 1)[-1]
        schools.append({"slug": slug, "name": _text(cells[0]), "long": _text(link)})
    return schools


def _bracket_rounds(soup: BeautifulSoup) -> tuple[BracketRound, ...]:
    rounds: list[BracketRound] = []
    seen: set[str] = set()
    for node in soup.select("[data-round], .round-title, .bracket-round-title"):
        name = node.get("data-round-name") or _text(node)
        if not name or name in seen:
            continue
        seen.add(name)
        round_id = node.get("data-round") or str(len(rounds) + 1)
        rounds.append(BracketRound(name=name, round_id=str(round_id)))
    return tuple(rounds)


def _bracket_regions(soup: BeautifulSoup) -> tuple[str, ...]:
    regions: list[str] = []
    for node in soup.select("[data-region], .region-name, .region h3"):
        name = node.get("data-region") or _text(node)
        if name and name not in regions:
            regions.append(name)
    return tuple(regions)


def parse_bracket_structure(soup: BeautifulSoup, sport: str, year: int) -> BracketStructure:
    """Tournament layout (title, regions, rounds) from a bracket page."""
    container = soup.find(attrs={"data-bracket-id": True})
    bracket_id = container["data-bracket-id"] if container is not None else None

    size = None
    if container is not None and str(container.get("data-bracket-size", "")).isdigit():
        size = int(container["data-bracket-size"])

    rounds = _bracket_rounds(soup)
    if not rounds:
        logger.warning("[BRACKET] No rounds found on %s %s bracket page", sport, year)

    return BracketStructure(
        sport=sport,
        title=_text(soup.find("h1")) or f"{sport} {year} Championship",
        year=year,
        bracket_id=bracket_id,
        regions=_bracket_regions(soup),
        rounds=rounds,
        size=size,
    )
