"""
Real-time event names pushed to subscribers
"""

from enum import Enum


class RealtimeEvent(str, Enum):
    # Events
    NEW_EVENT = "new-event"
    EVENT_UPDATED = "event-updated"
    EVENT_DELETED = "event-deleted"
    EVENT_APPROVED = "event-approved"
    EVENT_REJECTED = "event-rejected"
    EVENT_REGISTRATION = "event-registration"
    EVENT_UNREGISTRATION = "event-unregistration"

    # Clubs
    NEW_CLUB = "new-club"
    CLUB_UPDATED = "club-updated"
    CLUB_DELETED = "club-deleted"
    CLUB_APPROVED = "club-approved"
    CLUB_REJECTED = "club-rejected"
    CLUB_MEMBER_JOINED = "club-member-joined"
    CLUB_MEMBER_LEFT = "club-member-left"
    CLUB_MEMBER_ROLE_UPDATED = "club-member-role-updated"

    # Feedback
    NEW_FEEDBACK = "new-feedback"
    FEEDBACK_UPDATED = "feedback-updated"
    FEEDBACK_DELETED = "feedback-deleted"
    FEEDBACK_RESPONSE = "feedback-response"
    FEEDBACK_VOTE = "feedback-vote"

    # Lost & found
    LOST_FOUND_UPDATE = "lost-found-update"
    LOST_FOUND_DELETED = "lost-found-deleted"
    LOST_FOUND_CLAIMED = "lost-found-claimed"
    LOST_FOUND_RESOLVED = "lost-found-resolved"
    ITEMS_MATCHED = "items-matched"

    # Announcements
    NEW_ANNOUNCEMENT = "new-announcement"
    ANNOUNCEMENT_UPDATED = "announcement-updated"
    ANNOUNCEMENT_DELETED = "announcement-deleted"
