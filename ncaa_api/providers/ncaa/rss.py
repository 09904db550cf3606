"""RSS feed parsing for ncaa.com news."""

import logging
import re
import xml.etree.ElementTree as ET

from bs4 import BeautifulSoup

from ncaa_api.core import UpstreamFetchError

logger = logging.getLogger(__name__)

_MEDIA_NS = "{http://search.yahoo.com/mrss/}"


def _strip_markup(text: str | None) -> str:
    """CDATA descriptions carry HTML; keep the text only."""
    if not text:
        return ""
    plain = BeautifulSoup(text, "lxml").get_text(" ", strip=True)
    return re.sub(r"\s+", " ", plain)


def _image(item: ET.Element) -> str | None:
    for tag in (f"{_MEDIA_NS}content", f"{_MEDIA_NS}thumbnail", "enclosure"):
        node = item.find(tag)
        if node is not None and node.get("url"):
            return node.get("url")
    return None


def parse_feed(xml_text: str) -> list[dict]:
    """Parse an RSS 2.0 document into news items.

    Raises:
        UpstreamFetchError: the document is not valid XML
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise UpstreamFetchError(f"Invalid RSS feed: {e}") from e

    items = []
    for item in root.iter("item"):
        items.append(
            {
                "title": (item.findtext("title") or "").strip(),
                "link": (item.findtext("link") or "").strip(),
                "description": _strip_markup(item.findtext("description")),
                "published": (item.findtext("pubDate") or "").strip(),
                "image": _image(item),
            }
        )
    logger.debug("[RSS] Parsed %d items", len(items))
    return items
