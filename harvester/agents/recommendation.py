"""
Recommendation Scorer.

Turns BGG community polls (suggested player count, suggested player age)
into normalized {value, score} recommendation lists.
"""

import logging
import math
from typing import Any, Iterable, List, Optional, Union

from harvester.models.game import Recommendation

logger = logging.getLogger(__name__)

AGE_POLL_NAME = "suggested_playerage"
PLAYER_COUNT_POLL_NAME = "suggested_numplayers"

# Weight of each player count vote option in the per-bucket tally
PLAYER_COUNT_WEIGHTS = {
    "Best": 1.0,
    "Recommended": 0.5,
    "Not Recommended": -0.5,
}


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def to_percentage(part: float, whole: float) -> int:
    return round_half_away_from_zero(100 * part / whole)


def coerce_bucket(value: Any) -> Union[str, int]:
    """Numeric bucket labels become ints; labels like "21 and up" or "4+" stay strings."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return value


def _as_number(value: Any) -> float:
    if value is None:
        return 0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def find_poll(polls: Optional[Iterable[dict]], name: str) -> Optional[dict]:
    for poll in polls or []:
        if poll and poll.get("name") == name:
            return poll
    return None


def parse_age_poll(poll: dict) -> Optional[List[Recommendation]]:
    """
    Score every age bucket by its share of the total votes.

    Buckets without votes are dropped. Returns None when the poll has no
    result groups, no votes, or no bucket with votes.
    """
    results = poll.get("results")
    if not results:
        return None

    total_votes = _as_number(poll.get("totalvotes"))
    if total_votes == 0:
        return None

    recommendations = []
    for group in results:
        for item in (group or {}).get("resultItemList") or []:
            if not isinstance(item, dict):
                continue
            num_votes = _as_number(item.get("numvotes"))
            if num_votes == 0:
                continue
            recommendations.append(Recommendation(
                value=coerce_bucket(item.get("value")),
                score=to_percentage(num_votes, total_votes)
            ))

    return recommendations or None


def parse_player_count_poll(poll: dict) -> Optional[List[Recommendation]]:
    """
    Score every player count bucket by its weighted vote tally.

    Best counts fully, Recommended half, Not Recommended negative half.
    The score is the tally as a percentage of all votes in the bucket,
    floored at zero.
    """
    results = poll.get("results")
    if not results:
        logger.debug("No poll results found for player count recommendation")
        return None

    recommendations = []
    for group in results:
        if not group or group.get("numplayers") is None or group.get("resultItemList") is None:
            continue

        tally = 0.0
        votes = 0.0
        for item in group["resultItemList"]:
            if not isinstance(item, dict):
                continue
            num_votes = _as_number(item.get("numvotes"))
            weight = PLAYER_COUNT_WEIGHTS.get(item.get("value"))
            if num_votes == 0 or weight is None:
                continue
            tally += weight * num_votes
            votes += num_votes

        if votes == 0:
            continue
        recommendations.append(Recommendation(
            value=coerce_bucket(group["numplayers"]),
            score=max(0, to_percentage(tally, votes))
        ))

    return recommendations or None


def score_age_poll(polls: Optional[Iterable[dict]]) -> Optional[List[Recommendation]]:
    poll = find_poll(polls, AGE_POLL_NAME)
    if poll is None:
        return None
    return parse_age_poll(poll)


def score_player_count_poll(polls: Optional[Iterable[dict]]) -> Optional[List[Recommendation]]:
    poll = find_poll(polls, PLAYER_COUNT_POLL_NAME)
    if poll is None:
        return None
    return parse_player_count_poll(poll)


def top_recommendation(
    recommendations: Optional[List[Recommendation]]
) -> Optional[Recommendation]:
    """
    Pick the highest scoring recommendation.

    Ties go to the earliest entry. Returns None for a missing or empty
    list, or when every score is zero.
    """
    if not recommendations or all(r.score == 0 for r in recommendations):
        return None

    best = recommendations[0]
    for recommendation in recommendations[1:]:
        if recommendation.score > best.score:
            best = recommendation
    return best
