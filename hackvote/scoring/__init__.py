"""Scoring policies for turning votes into team scores."""

from typing import Any

from .base import ScoringPolicy, Tally

# Policy registry - import policies here to register them
_scoring_policies: dict[str, type[ScoringPolicy]] = {}


def register_scoring_policy(policy_class: type[ScoringPolicy]) -> type[ScoringPolicy]:
    """Decorator to register a scoring policy class under its key."""
    _scoring_policies[policy_class.key] = policy_class
    return policy_class


def get_all_scoring_policies() -> list[type[ScoringPolicy]]:
    """Return all registered policy classes."""
    return list(_scoring_policies.values())


def get_scoring_policy(key: str, config: Any = None) -> ScoringPolicy:
    """Build the policy registered under ``key``, configured from an EventConfig.

    Raises:
        ValueError: If no policy is registered under that key
    """
    try:
        policy_class = _scoring_policies[key]
    except KeyError:
        known = ", ".join(sorted(_scoring_policies)) or "none"
        raise ValueError(f"Unknown scoring policy {key!r} (known: {known})") from None
    if config is None:
        return policy_class()
    return policy_class.from_config(config)
