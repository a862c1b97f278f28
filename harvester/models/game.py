"""
Game data model.

Represents the normalized board game record written to the batch files,
and the poll-derived recommendations it carries.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class Recommendation:
    """
    A single poll bucket with its normalized score.
    Output of the recommendation scorer.
    """
    value: Union[str, int]  # Poll bucket, e.g. 3 players or "21 and up"
    score: int  # 0-100

    def to_dict(self) -> dict:
        return {"value": self.value, "score": self.score}


@dataclass(frozen=True)
class Rating:
    average: Optional[float] = None
    bayesian: Optional[float] = None  # BGG "geek rating"
    stddev: Optional[float] = None


@dataclass(frozen=True)
class PlayTime:
    rated: Optional[int] = None
    min: Optional[int] = None
    max: Optional[int] = None


@dataclass(frozen=True)
class PlayerCount:
    min: Optional[int] = None
    max: Optional[int] = None
    suggested: Optional[Union[str, int]] = None
    poll_results: Optional[List[Recommendation]] = None


@dataclass(frozen=True)
class AgeRecommendation:
    rated: Optional[int] = None
    suggested: Optional[Union[str, int]] = None
    poll_results: Optional[List[Recommendation]] = None


def _poll_block(block, bounds: dict) -> dict:
    """Serialize a player/age block, omitting absent poll data."""
    data = dict(bounds)
    if block.suggested is not None:
        data["suggested"] = block.suggested
    if block.poll_results is not None:
        data["pollResults"] = [r.to_dict() for r in block.poll_results]
    return data


@dataclass(frozen=True)
class Game:
    """
    Canonical board game record.

    Created once per fetched item by the normalizer and serialized verbatim.
    """
    id: int
    thumbnail: Optional[str] = None
    image: Optional[str] = None
    name: Optional[str] = None
    description: str = ""
    year_published: Optional[int] = None
    categories: List[str] = field(default_factory=list)
    mechanics: List[str] = field(default_factory=list)
    complexity: Optional[float] = None  # BGG average weight, 1-5
    rating: Rating = field(default_factory=Rating)
    play_time_minutes: PlayTime = field(default_factory=PlayTime)
    player_count: PlayerCount = field(default_factory=PlayerCount)
    age: AgeRecommendation = field(default_factory=AgeRecommendation)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict using the published field names."""
        data = {
            "id": self.id,
            "thumbnail": self.thumbnail,
            "image": self.image,
            "name": self.name,
            "description": self.description,
            "yearPublished": self.year_published,
            "rating": {
                "average": self.rating.average,
                "bayesian": self.rating.bayesian,
                "stddev": self.rating.stddev,
            },
        }
        if self.complexity is not None:
            data["complexity"] = self.complexity
        data.update({
            "categories": list(self.categories),
            "mechanics": list(self.mechanics),
            "playTimeMinutes": {
                "rated": self.play_time_minutes.rated,
                "min": self.play_time_minutes.min,
                "max": self.play_time_minutes.max,
            },
            "playerCount": _poll_block(
                self.player_count,
                {"min": self.player_count.min, "max": self.player_count.max},
            ),
            "age": _poll_block(self.age, {"rated": self.age.rated}),
        })
        return data
