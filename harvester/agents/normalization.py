"""
Game Normalization Agent.

Converts raw BGG thing items into canonical Game records.
"""

import html
import logging
import re
from html.entities import name2codepoint
from typing import Any, List, Optional

from harvester.agents.recommendation import (
    score_age_poll,
    score_player_count_poll,
    top_recommendation,
)
from harvester.models.game import (
    AgeRecommendation,
    Game,
    PlayTime,
    PlayerCount,
    Rating,
)

logger = logging.getLogger(__name__)

CATEGORY_LINK_TYPE = "boardgamecategory"
MECHANIC_LINK_TYPE = "boardgamemechanic"

_LEGACY_ENTITY_RE = re.compile(r"&(#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")
_NUMERIC_REFERENCE_RE = re.compile(r"&#(\d+)(;)")
_WHITESPACE_RUN_RE = re.compile(r"\s\s+")


def _decode_legacy_entities(text: str) -> str:
    """Decode against the HTML 4 entity table; unknown names are left as is."""

    def replace(match):
        ref = match.group(1)
        if ref[0] == "#":
            try:
                codepoint = int(ref[2:], 16) if ref[1] in "xX" else int(ref[1:])
                return chr(codepoint)
            except (ValueError, OverflowError):
                return match.group(0)
        if ref in name2codepoint:
            return chr(name2codepoint[ref])
        return match.group(0)

    return _LEGACY_ENTITY_RE.sub(replace, text)


def clean_description(text: Optional[str]) -> str:
    """
    Sanitize a BGG description.

    BGG descriptions are frequently escaped twice (e.g. "&amp;#10;"), so
    entities are decoded once with the HTML5 table and once more with the
    legacy HTML 4 table. Leftover numeric references are blanked, newlines
    become spaces and whitespace runs collapse to a single space.
    """
    if not text:
        return ""
    decoded = _decode_legacy_entities(html.unescape(text))
    decoded = _NUMERIC_REFERENCE_RE.sub(" ", decoded)
    decoded = decoded.replace("\n", " ")
    return _WHITESPACE_RUN_RE.sub(" ", decoded)


def _links_of_type(links: Optional[List[dict]], link_type: str) -> List[str]:
    return [
        link.get("value")
        for link in links or []
        if link and link.get("type") == link_type
    ]


def _get(data: Optional[dict], *path: str) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


class GameNormalizer:
    """
    Maps one raw BGG item to a Game.

    Pure transformation: no I/O and no state between calls, so the same
    item always produces an identical record. Missing optional fields
    fall back to None or empty lists instead of raising.
    """

    def normalize(self, raw: dict) -> Game:
        polls = raw.get("polls")
        player_count_poll = score_player_count_poll(polls)
        age_poll = score_age_poll(polls)

        top_player_count = top_recommendation(player_count_poll)
        top_age = top_recommendation(age_poll)

        ratings = _get(raw, "statistics", "ratings")

        return Game(
            id=raw.get("id"),
            thumbnail=raw.get("thumbnail"),
            image=raw.get("image"),
            name=raw.get("name"),
            description=clean_description(raw.get("description")),
            year_published=raw.get("yearpublished"),
            categories=_links_of_type(raw.get("links"), CATEGORY_LINK_TYPE),
            mechanics=_links_of_type(raw.get("links"), MECHANIC_LINK_TYPE),
            complexity=_get(ratings, "averageweight"),
            rating=Rating(
                average=_get(ratings, "average"),
                bayesian=_get(ratings, "bayesaverage"),
                stddev=_get(ratings, "stddev")
            ),
            play_time_minutes=PlayTime(
                rated=raw.get("playingtime"),
                min=raw.get("minplaytime"),
                max=raw.get("maxplaytime")
            ),
            player_count=PlayerCount(
                min=raw.get("minplayers"),
                max=raw.get("maxplayers"),
                suggested=top_player_count.value if top_player_count else None,
                poll_results=player_count_poll
            ),
            age=AgeRecommendation(
                rated=raw.get("minage"),
                suggested=top_age.value if top_age else None,
                poll_results=age_poll
            ),
        )

    def normalize_many(self, items: List[dict]) -> List[Game]:
        games = [self.normalize(item) for item in items]
        logger.debug(f"Normalized {len(games)} games")
        return games
