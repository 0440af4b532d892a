"""
Purpose: Central configuration for driver search.
What it does:

Stores all tunable timings for watching a request until a driver is assigned:

SEARCH_TIMEOUT_SECONDS = 120
POLL_INTERVAL_SECONDS = 2

and which watch channels run (push subscription, status polling, or both).

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchingPolicy:
    """
    Central configuration for the matching coordinator.
    """

    # --- Search timer ---
    # How long to search before giving up with TimedOut.
    search_timeout_seconds: float = 120.0

    # --- Poll channel ---
    use_poll: bool = True
    poll_interval_seconds: float = 2.0
    # Read the status once right away ("driver already assigned?") before the first sleep.
    initial_status_check: bool = True

    # --- Push channel ---
    use_push: bool = True
    # Delay between subscribe attempts after a failed subscribe.
    resubscribe_interval_seconds: float = 5.0

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.search_timeout_seconds <= 0:
            raise ValueError("search_timeout_seconds must be > 0")

        if self.poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be > 0")

        if self.resubscribe_interval_seconds <= 0:
            raise ValueError("resubscribe_interval_seconds must be > 0")

        if not self.use_poll and not self.use_push:
            raise ValueError("At least one watch channel (push or poll) must be enabled.")


def default_matching_policy() -> MatchingPolicy:
    """
    Convenience factory for the default policy.
    """
    p = MatchingPolicy()
    p.validate()
    return p


def web_matching_policy() -> MatchingPolicy:
    """
    Example: clients without a push channel rely on polling alone.
    """
    p = MatchingPolicy(use_push=False, use_poll=True)
    p.validate()
    return p
