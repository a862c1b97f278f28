"""
Ingestion Agent.

Fetches board game items from the BoardGameGeek XML API2 `thing` endpoint
and turns the XML into plain dicts for the normalizer.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional

import requests

from harvester.errors import FetchError
import config.settings as settings

logger = logging.getLogger(__name__)


def _number(value: Optional[str]) -> Any:
    """Parse a BGG attribute value into int or float, keeping text otherwise."""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def _value_of(item: ET.Element, tag: str) -> Any:
    element = item.find(tag)
    if element is None:
        return None
    return _number(element.get("value"))


def _text_of(item: ET.Element, tag: str) -> Optional[str]:
    element = item.find(tag)
    if element is None or element.text is None:
        return None
    return element.text.strip()


def _parse_poll(poll: ET.Element) -> Dict[str, Any]:
    results = []
    for group in poll.findall("results"):
        result_items = []
        for result in group.findall("result"):
            entry = {
                "value": result.get("value"),
                "numvotes": _number(result.get("numvotes")),
            }
            if result.get("level") is not None:
                entry["level"] = _number(result.get("level"))
            result_items.append(entry)
        parsed_group = {"resultItemList": result_items}
        if group.get("numplayers") is not None:
            parsed_group["numplayers"] = group.get("numplayers")
        results.append(parsed_group)

    return {
        "name": poll.get("name"),
        "title": poll.get("title"),
        "totalvotes": _number(poll.get("totalvotes")),
        "results": results,
    }


def _parse_ratings(ratings: Optional[ET.Element]) -> Optional[Dict[str, Any]]:
    if ratings is None:
        return None
    parsed = {}
    for child in ratings:
        if child.tag == "ranks":
            parsed["ranks"] = [
                {
                    "type": rank.get("type"),
                    "name": rank.get("name"),
                    "friendlyname": rank.get("friendlyname"),
                    "value": _number(rank.get("value")),
                }
                for rank in child.findall("rank")
            ]
        else:
            parsed[child.tag] = _number(child.get("value"))
    return parsed


def parse_item(item: ET.Element) -> Dict[str, Any]:
    """Convert one <item> element into a raw item dict."""
    primary_name = None
    for name in item.findall("name"):
        if name.get("type") == "primary":
            primary_name = name.get("value")
            break

    statistics = item.find("statistics")
    raw = {
        "id": _number(item.get("id")),
        "type": item.get("type"),
        "thumbnail": _text_of(item, "thumbnail"),
        "image": _text_of(item, "image"),
        "name": primary_name,
        "description": item.findtext("description"),
        "yearpublished": _value_of(item, "yearpublished"),
        "minplayers": _value_of(item, "minplayers"),
        "maxplayers": _value_of(item, "maxplayers"),
        "playingtime": _value_of(item, "playingtime"),
        "minplaytime": _value_of(item, "minplaytime"),
        "maxplaytime": _value_of(item, "maxplaytime"),
        "minage": _value_of(item, "minage"),
        "polls": [_parse_poll(poll) for poll in item.findall("poll")],
        "links": [
            {
                "type": link.get("type"),
                "id": _number(link.get("id")),
                "value": link.get("value"),
            }
            for link in item.findall("link")
        ],
    }
    if statistics is not None:
        raw["statistics"] = {"ratings": _parse_ratings(statistics.find("ratings"))}
    return raw


def parse_things(xml_text: str) -> List[Dict[str, Any]]:
    """
    Parse a `thing` response body.

    Raises:
        FetchError: If the body is not valid XML or is an API error document
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise FetchError(f"Invalid XML from BGG API: {e}") from e

    if root.tag == "errors" or root.tag == "error":
        message = root.findtext(".//message") or "unknown error"
        raise FetchError(f"BGG API error: {message}")

    return [parse_item(item) for item in root.findall("item")]


class BggThingClient:
    """
    Minimal client for the BGG XML API2 `thing` endpoint.

    One instance owns one HTTP session. After a failed call the orchestrator
    closes the client and builds a new one.
    """

    def __init__(
        self,
        base_url: str = settings.BGG_API_BASE,
        timeout_seconds: float = settings.BGG_REQUEST_TIMEOUT_SECONDS,
        token: str = settings.BGG_API_TOKEN
    ):
        """
        Initialize BGG client.

        Args:
            base_url: XML API2 root URL
            timeout_seconds: Per-request timeout
            token: Optional bearer token for registered applications
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

        self.session = requests.Session()
        self.session.headers["User-Agent"] = settings.BGG_USER_AGENT
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

        logger.debug(f"Initialized BggThingClient for {self.base_url}")

    def query(
        self,
        ids: List[int],
        videos: int = 0,
        comments: int = 0,
        marketplace: int = 0,
        stats: int = 1,
        type: str = settings.THING_TYPE
    ) -> List[Dict[str, Any]]:
        """
        Fetch items by id.

        Args:
            ids: BGG thing ids
            videos, comments, marketplace, stats: Inclusion flags (0 or 1)
            type: Thing type filter

        Returns:
            Raw item dicts in response order

        Raises:
            requests.RequestException: On transport or HTTP status errors
            FetchError: If the request was queued or the body is unusable
        """
        params = {
            "id": ",".join(str(i) for i in ids),
            "videos": videos,
            "comments": comments,
            "marketplace": marketplace,
            "stats": stats,
            "type": type,
        }
        response = self.session.get(
            f"{self.base_url}/thing",
            params=params,
            timeout=self.timeout_seconds
        )
        response.raise_for_status()

        # BGG answers 202 while it prepares the result
        if response.status_code == 202:
            raise FetchError("BGG API queued the request (HTTP 202)")

        items = parse_things(response.text)
        logger.debug(f"Fetched {len(items)} items for {len(ids)} ids")
        return items

    def close(self) -> None:
        self.session.close()
