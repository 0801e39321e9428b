"""
Membership / Registration Engine
Capacity-bounded join and leave for club rosters and event attendee lists
"""

import logging
from datetime import datetime
from typing import Optional

from app.auth.roles import Actor
from app.errors import InvalidTransition
from app.models.club import Club, ClubMember, MemberRole
from app.models.club import is_full as club_is_full
from app.models.event import Attendee, AttendeeStatus, Event
from app.models.event import is_full as event_is_full
from app.models.user import User
from app.store import Collection, DocumentStore
from app.utils import as_utc, utcnow
from app.workflow.engine import apply_transition

logger = logging.getLogger(__name__)


def join_club_transition(actor: Actor, now: Optional[datetime] = None):
    def transition(club: Club) -> dict:
        if not club.is_approved or not club.is_active:
            raise InvalidTransition("Club is not approved yet", "not_approved")
        if club_is_full(club):
            raise InvalidTransition("Club is full", "full")
        if any(m.user == actor.id for m in club.members):
            raise InvalidTransition("Already a member of this club", "already_joined")
        member = ClubMember(user=actor.id, role=MemberRole.MEMBER, joined_at=now or utcnow())
        return {"members": club.members + [member]}
    return transition


def leave_club_transition(actor: Actor):
    def transition(club: Club) -> dict:
        remaining = [m for m in club.members if m.user != actor.id]
        if len(remaining) == len(club.members):
            raise InvalidTransition("Not a member of this club", "not_a_member")
        return {"members": remaining}
    return transition


def member_role_transition(member_id: str, role: MemberRole):
    """Overwrite one member's role; several members may hold the same role"""
    def transition(club: Club) -> dict:
        if not any(m.user == member_id for m in club.members):
            raise InvalidTransition("Member not found", "member_not_found")
        members = [
            m.model_copy(update={"role": role}) if m.user == member_id else m
            for m in club.members
        ]
        return {"members": members}
    return transition


def register_transition(actor: Actor, now: Optional[datetime] = None):
    now = now or utcnow()

    def transition(event: Event) -> dict:
        if not event.is_approved or not event.is_active:
            raise InvalidTransition("Event is not approved yet", "not_approved")
        if event.registration_deadline and now > as_utc(event.registration_deadline):
            raise InvalidTransition("Registration deadline has passed", "deadline_passed")
        if event_is_full(event):
            raise InvalidTransition("Event is full", "full")
        if any(a.user == actor.id for a in event.attendees):
            raise InvalidTransition("Already registered for this event", "already_joined")
        attendee = Attendee(user=actor.id, status=AttendeeStatus.REGISTERED, registered_at=now)
        return {"attendees": event.attendees + [attendee]}
    return transition


def unregister_transition(actor: Actor):
    def transition(event: Event) -> dict:
        remaining = [a for a in event.attendees if a.user != actor.id]
        if len(remaining) == len(event.attendees):
            raise InvalidTransition("Not registered for this event", "not_a_member")
        return {"attendees": remaining}
    return transition


async def _link_user_club(store: DocumentStore, user_id: str, club_id: str, linked: bool) -> None:
    def transition(user: User) -> Optional[dict]:
        clubs = [c for c in user.clubs if c != club_id]
        if linked:
            clubs.append(club_id)
        if clubs == user.clubs:
            return None
        return {"clubs": clubs}

    await apply_transition(store, Collection.USERS, User, user_id, transition, "User")


async def join_club(store: DocumentStore, actor: Actor, club_id: str) -> Club:
    """Append the actor to the roster and the club to the actor's clubs, atomically"""
    async with store.transaction():
        club = await apply_transition(store, Collection.CLUBS, Club, club_id, join_club_transition(actor), "Club")
        await _link_user_club(store, actor.id, club_id, linked=True)
    logger.info("Club member joined: club=%s user=%s", club_id, actor.id)
    return club


async def leave_club(store: DocumentStore, actor: Actor, club_id: str) -> Club:
    async with store.transaction():
        club = await apply_transition(store, Collection.CLUBS, Club, club_id, leave_club_transition(actor), "Club")
        await _link_user_club(store, actor.id, club_id, linked=False)
    logger.info("Club member left: club=%s user=%s", club_id, actor.id)
    return club


async def register_for_event(store: DocumentStore, actor: Actor, event_id: str) -> Event:
    event = await apply_transition(store, Collection.EVENTS, Event, event_id, register_transition(actor), "Event")
    logger.info("Event registration: event=%s user=%s", event_id, actor.id)
    return event


async def unregister_from_event(store: DocumentStore, actor: Actor, event_id: str) -> Event:
    return await apply_transition(store, Collection.EVENTS, Event, event_id, unregister_transition(actor), "Event")
