"""
Lost & Found Workflow
open --claim--> claimed --resolve--> resolved
open --expire--> expired
open --match--> matched (both items)
"""

import re
from datetime import datetime
from typing import Optional

from app.auth.roles import Actor
from app.errors import InvalidTransition
from app.models.lost_found import LostFoundItem, LostFoundStatus
from app.utils import as_utc, utcnow

RESOLVABLE_STATUSES = (LostFoundStatus.OPEN, LostFoundStatus.CLAIMED, LostFoundStatus.MATCHED)


def claim_transition(actor: Actor, now: Optional[datetime] = None):
    def transition(item: LostFoundItem) -> dict:
        if item.reported_by == actor.id:
            raise InvalidTransition("Cannot claim your own item", "own_item")
        if item.status != LostFoundStatus.OPEN:
            raise InvalidTransition("Item is not available for claiming", "not_open")
        return {"status": LostFoundStatus.CLAIMED, "claimed_by": actor.id, "claimed_at": now or utcnow()}
    return transition


def resolve_transition(actor: Actor, now: Optional[datetime] = None):
    def transition(item: LostFoundItem) -> dict:
        if item.status not in RESOLVABLE_STATUSES:
            raise InvalidTransition(f"Item is already {item.status.value}", "closed")
        return {"status": LostFoundStatus.RESOLVED, "resolved_by": actor.id, "resolved_at": now or utcnow()}
    return transition


def expire_transition():
    def transition(item: LostFoundItem) -> Optional[dict]:
        if item.status != LostFoundStatus.OPEN:
            return None
        return {"status": LostFoundStatus.EXPIRED}
    return transition


def match_transition(other_id: str):
    def transition(item: LostFoundItem) -> dict:
        if item.status != LostFoundStatus.OPEN:
            raise InvalidTransition("Only open items can be matched", "not_open")
        return {"status": LostFoundStatus.MATCHED, "matched_with": other_id}
    return transition


def _words(text: str) -> list:
    return re.split(r"\s+", text.lower().strip())


def match_score(item: LostFoundItem, candidate: LostFoundItem) -> int:
    """
    Likelihood that two reports describe the same object

    Location text: exact match 50, one containing the other 25.
    Date proximity: up to 30 points within a week, minus 4 per day apart.
    Description: 5 per shared word longer than three letters, at most 20.
    """
    score = 0.0

    location = item.location.lower()
    other_location = candidate.location.lower()
    if location == other_location:
        score += 50
    elif location in other_location or other_location in location:
        score += 25

    delta = as_utc(item.date_lost_or_found) - as_utc(candidate.date_lost_or_found)
    days = abs(delta.total_seconds()) / 86400
    if days <= 7:
        score += max(30 - days * 4, 0)

    candidate_words = set(_words(candidate.description))
    common = sum(1 for word in _words(item.description) if len(word) > 3 and word in candidate_words)
    score += min(common * 5, 20)

    return round(score)
