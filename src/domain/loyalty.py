"""
Loyalty rules — score, tier, repeat-visit bump, and message category.

All functions are pure and total: missing or negative counters are read
as zero, and every score stays within [0, 100].
"""

from dataclasses import dataclass
from typing import Literal

from src.domain.records import ClientProfile

Tier = Literal["VIP", "Fidèle", "Nouveau"]
MessageCategory = Literal[
    "bienvenue", "anniversaire", "vip", "doublon", "rappel", "invitation", "remerciement",
]
MESSAGE_CATEGORIES: tuple[str, ...] = (
    "bienvenue", "anniversaire", "vip", "doublon", "rappel", "invitation", "remerciement",
)

MAX_SCORE = 100

VISIT_POINTS = 10
VISIT_CAP = 50
NIGHT_POINTS = 2
NIGHT_CAP = 30
ENGAGEMENT_WITH_EMAIL = 20
ENGAGEMENT_WITHOUT_EMAIL = 10

REPEAT_VISIT_BONUS = 10
NEW_CLIENT_SCORE = 10

VIP_THRESHOLD = 70
LOYAL_THRESHOLD = 40
VIP_MESSAGE_THRESHOLD = 80

# Thresholds evaluated high to low, first match wins
_TIER_THRESHOLDS: list[tuple[int, Tier]] = [
    (VIP_THRESHOLD, "VIP"),
    (LOYAL_THRESHOLD, "Fidèle"),
]


@dataclass(frozen=True)
class LoyaltySignals:
    """What the category selector needs to know about a client."""
    is_vip: bool = False
    is_duplicate: bool = False
    fidelite_score: int = 0
    total_sejours: int = 0


def _floor(value: int | None) -> int:
    if value is None or value < 0:
        return 0
    return int(value)


def clamp_score(score: int | None) -> int:
    return min(_floor(score), MAX_SCORE)


def loyalty_score(total_sejours: int | None, total_nuits: int | None, has_email: bool) -> int:
    visits = min(_floor(total_sejours) * VISIT_POINTS, VISIT_CAP)
    nights = min(_floor(total_nuits) * NIGHT_POINTS, NIGHT_CAP)
    engagement = ENGAGEMENT_WITH_EMAIL if has_email else ENGAGEMENT_WITHOUT_EMAIL
    return min(visits + nights + engagement, MAX_SCORE)


def loyalty_tier(score: int | None) -> Tier:
    score = _floor(score)
    for threshold, tier in _TIER_THRESHOLDS:
        if score >= threshold:
            return tier
    return "Nouveau"


def repeat_visit_score(previous_score: int | None) -> int:
    """Stored score of a returning client: previous + flat bonus, capped."""
    return min(_floor(previous_score) + REPEAT_VISIT_BONUS, MAX_SCORE)


def select_message_category(
    client: LoyaltySignals | ClientProfile, trigger: str | None = None
) -> MessageCategory:
    if trigger == "bienvenue":
        return "bienvenue"
    if trigger == "anniversaire":
        return "anniversaire"
    if client.is_vip or _floor(client.fidelite_score) >= VIP_MESSAGE_THRESHOLD:
        return "vip"
    if client.is_duplicate or _floor(client.total_sejours) > 1:
        return "doublon"
    if trigger in ("inactif", "rappel"):
        return "rappel"
    if trigger == "invitation":
        return "invitation"
    return "remerciement"
