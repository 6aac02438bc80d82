"""Event configuration.

Values come from defaults, then a JSON document (the event record of an
export, or a standalone config file), then HACKVOTE_* environment variables.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Self

logger = logging.getLogger(__name__)

# Keys used by the original event documents, mapped to field names
_CAMEL_CASE_KEYS = {
    "judgeWeight": "judge_weight",
    "participantWeight": "participant_weight",
    "maxVotesP1": "max_votes_p1",
    "maxVotesP2": "max_votes_p2",
    "topN": "top_n",
    "podiumSize": "podium_size",
    "scoringPolicy": "scoring_policy",
    "roleWeights": "role_weights",
}

ENV_PREFIX = "HACKVOTE_"


@dataclass
class EventConfig:
    """Tunable parameters of one voting event.

    Attributes:
        title: Display name of the event
        judge_weight: Share of the judge vote in the normalized policy
        participant_weight: Share of the participant vote in the normalized policy
        max_votes_p1: Teams a voter may pick in phase 1
        max_votes_p2: Teams a voter may pick in the final
        top_n: Finalists taken from phase 1
        podium_size: Final ranks that must be free of ties before finalizing
        scoring_policy: Name of the registered scoring policy
        role_weights: role name -> multiplier used by the weighted-sum policy
    """
    title: str = "Hackathon"
    judge_weight: float = 0.8
    participant_weight: float = 0.2
    max_votes_p1: int = 3
    max_votes_p2: int = 3
    top_n: int = 10
    podium_size: int = 3
    scoring_policy: str = "weighted-sum"
    role_weights: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Build a config from a dict, ignoring keys it doesn't know."""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            key = _CAMEL_CASE_KEYS.get(key, key)
            if key in known and value is not None:
                values[key] = value

        # Older events stored a single limit for both phases
        legacy = data.get("maxVotesPerUser")
        if legacy is not None:
            values.setdefault("max_votes_p1", legacy)
            values.setdefault("max_votes_p2", legacy)

        config = cls(**values)
        config.validate()
        return config

    @classmethod
    def from_file(cls, path: str | Path) -> Self:
        """Load a config from a JSON file, then apply environment overrides."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        config = cls.from_dict(data)
        config.apply_env_overrides()
        return config

    def apply_env_overrides(self, environ: dict[str, str] | None = None) -> None:
        """Apply HACKVOTE_<FIELD> environment variables, e.g. HACKVOTE_TOP_N=5."""
        if environ is None:
            environ = dict(os.environ)

        for f in fields(self):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            if f.name == "role_weights":
                try:
                    value = json.loads(raw)
                except json.JSONDecodeError:
                    logger.warning("Ignoring unparseable %s%s", ENV_PREFIX, f.name.upper())
                    continue
            else:
                value = self._convert_env_value(raw, f.type)
            setattr(self, f.name, value)

        self.validate()

    @staticmethod
    def _convert_env_value(value: str, target: type) -> Any:
        try:
            if target is int:
                return int(value)
            if target is float:
                return float(value)
        except ValueError:
            logger.warning("Could not convert %r to %s, keeping it as a string", value, target.__name__)
        return value

    def validate(self) -> None:
        """Reset invalid values to their defaults, logging a warning for each."""
        defaults = EventConfig()

        for name in ("judge_weight", "participant_weight"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                logger.warning("Invalid %s %r, using %s", name, value, getattr(defaults, name))
                setattr(self, name, getattr(defaults, name))

        for name in ("max_votes_p1", "max_votes_p2", "top_n", "podium_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                logger.warning("Invalid %s %r, using %s", name, value, getattr(defaults, name))
                setattr(self, name, getattr(defaults, name))

        if not isinstance(self.role_weights, dict):
            logger.warning("Invalid role_weights %r, ignoring", self.role_weights)
            self.role_weights = {}

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
