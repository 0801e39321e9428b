"""
Capability table tests
"""
from datetime import timedelta

import pytest

from app.auth.roles import (
    Action,
    Actor,
    ResourceType,
    Role,
    auto_approves,
    has_capability,
    is_publicly_visible,
    require_capability,
)
from app.errors import Forbidden, Unauthorized
from app.utils import utcnow

STUDENT = Actor(id='s1', role=Role.STUDENT)
OTHER = Actor(id='s2', role=Role.STUDENT)
FACULTY = Actor(id='f1', role=Role.FACULTY)
ADMIN = Actor(id='a1', role=Role.ADMIN)


class TestAutoApprove:
    def test_faculty_and_admin_events_skip_review(self):
        assert auto_approves(FACULTY, ResourceType.EVENT)
        assert auto_approves(ADMIN, ResourceType.EVENT)
        assert not auto_approves(STUDENT, ResourceType.EVENT)

    def test_only_admin_clubs_skip_review(self):
        assert auto_approves(ADMIN, ResourceType.CLUB)
        assert not auto_approves(FACULTY, ResourceType.CLUB)
        assert not auto_approves(STUDENT, ResourceType.CLUB)


class TestOwnership:
    def test_organizer_edits_own_event(self):
        event = {'organizer': 's1', 'is_approved': True}
        assert has_capability(STUDENT, Action.EDIT, ResourceType.EVENT, event)
        assert not has_capability(OTHER, Action.EDIT, ResourceType.EVENT, event)

    def test_admin_overrides_ownership(self):
        event = {'organizer': 's1'}
        assert has_capability(ADMIN, Action.DELETE, ResourceType.EVENT, event)

    def test_faculty_is_not_an_owner_by_role(self):
        event = {'organizer': 's1'}
        assert not has_capability(FACULTY, Action.DELETE, ResourceType.EVENT, event)

    def test_president_edits_but_cannot_delete_club(self):
        club = {'advisor': 'f1', 'president': 's1'}
        assert has_capability(STUDENT, Action.EDIT, ResourceType.CLUB, club)
        assert has_capability(STUDENT, Action.MANAGE_MEMBERS, ResourceType.CLUB, club)
        assert not has_capability(STUDENT, Action.DELETE, ResourceType.CLUB, club)
        assert has_capability(FACULTY, Action.DELETE, ResourceType.CLUB, club)

    def test_claimer_may_resolve(self):
        item = {'reported_by': 's1', 'claimed_by': 's2'}
        assert has_capability(OTHER, Action.RESOLVE, ResourceType.LOST_FOUND, item)
        assert not has_capability(FACULTY, Action.RESOLVE, ResourceType.LOST_FOUND, item)


class TestReviewRights:
    @pytest.mark.parametrize('resource_type', [ResourceType.EVENT, ResourceType.CLUB])
    def test_staff_approve(self, resource_type):
        assert has_capability(FACULTY, Action.APPROVE, resource_type)
        assert has_capability(ADMIN, Action.REJECT, resource_type)
        assert not has_capability(STUDENT, Action.APPROVE, resource_type)

    def test_only_staff_respond_to_feedback(self):
        assert has_capability(FACULTY, Action.RESPOND, ResourceType.FEEDBACK)
        assert not has_capability(STUDENT, Action.RESPOND, ResourceType.FEEDBACK)

    def test_only_staff_post_announcements(self):
        assert has_capability(FACULTY, Action.CREATE, ResourceType.ANNOUNCEMENT)
        assert not has_capability(STUDENT, Action.CREATE, ResourceType.ANNOUNCEMENT)


class TestVisibility:
    def test_pending_event_hidden_from_anonymous(self):
        event = {'organizer': 's1', 'is_approved': False, 'is_active': True}
        assert not has_capability(None, Action.READ, ResourceType.EVENT, event)
        assert not has_capability(OTHER, Action.READ, ResourceType.EVENT, event)
        assert has_capability(STUDENT, Action.READ, ResourceType.EVENT, event)
        assert has_capability(FACULTY, Action.READ, ResourceType.EVENT, event)

    def test_private_feedback_visible_to_submitter_and_staff(self):
        feedback = {'submitted_by': 's1', 'is_public': False}
        assert has_capability(STUDENT, Action.READ, ResourceType.FEEDBACK, feedback)
        assert has_capability(FACULTY, Action.READ, ResourceType.FEEDBACK, feedback)
        assert not has_capability(OTHER, Action.READ, ResourceType.FEEDBACK, feedback)

    def test_expired_announcement_not_public(self):
        past = (utcnow() - timedelta(days=1)).isoformat()
        future = (utcnow() + timedelta(days=1)).isoformat()
        assert not is_publicly_visible(ResourceType.ANNOUNCEMENT, {'is_active': True, 'expires_at': past})
        assert is_publicly_visible(ResourceType.ANNOUNCEMENT, {'is_active': True, 'expires_at': future})
        assert is_publicly_visible(ResourceType.ANNOUNCEMENT, {'is_active': True, 'expires_at': None})


class TestRequireCapability:
    def test_anonymous_mutation_is_unauthorized(self):
        with pytest.raises(Unauthorized):
            require_capability(None, Action.CREATE, ResourceType.EVENT)

    def test_missing_right_is_forbidden(self):
        with pytest.raises(Forbidden) as exc:
            require_capability(STUDENT, Action.APPROVE, ResourceType.CLUB, message='Nope')
        assert exc.value.message == 'Nope'

    def test_returns_actor(self):
        assert require_capability(STUDENT, Action.JOIN, ResourceType.CLUB) is STUDENT
