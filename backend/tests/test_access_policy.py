"""
Tests for the declarative access policy table.
"""

import uuid

import pytest

from ticketing.core.exceptions import Forbidden
from ticketing.services.access_policy import Action, Principal, Resource, Role, authorize, is_allowed

OWNER = Principal(user_id=uuid.uuid4())
STRANGER = Principal(user_id=uuid.uuid4())
ADMIN = Principal(user_id=uuid.uuid4(), is_admin=True)


def test_roles_follow_admin_flag():
    assert OWNER.role is Role.OWNER
    assert ADMIN.role is Role.ADMIN


@pytest.mark.parametrize("principal", [None, OWNER, ADMIN])
def test_everyone_can_read_events(principal):
    assert is_allowed(principal, Resource.EVENT, Action.READ)


@pytest.mark.parametrize("action", [Action.CREATE, Action.UPDATE, Action.DELETE])
def test_only_admin_writes_events(action):
    assert is_allowed(ADMIN, Resource.EVENT, action)
    assert not is_allowed(OWNER, Resource.EVENT, action)
    assert not is_allowed(None, Resource.EVENT, action)


@pytest.mark.parametrize("action", [Action.READ, Action.CANCEL])
def test_owner_scoped_booking_actions(action):
    assert is_allowed(OWNER, Resource.BOOKING, action, owner_id=OWNER.user_id)
    assert not is_allowed(STRANGER, Resource.BOOKING, action, owner_id=OWNER.user_id)
    assert is_allowed(ADMIN, Resource.BOOKING, action, owner_id=OWNER.user_id)


def test_bookings_are_created_for_yourself_only():
    assert is_allowed(OWNER, Resource.BOOKING, Action.CREATE, owner_id=OWNER.user_id)
    assert not is_allowed(OWNER, Resource.BOOKING, Action.CREATE, owner_id=STRANGER.user_id)
    assert not is_allowed(ADMIN, Resource.BOOKING, Action.CREATE, owner_id=OWNER.user_id)


def test_own_scope_requires_owner_id():
    assert not is_allowed(OWNER, Resource.BOOKING, Action.READ)


def test_list_all_bookings_is_admin_only():
    assert is_allowed(ADMIN, Resource.BOOKING, Action.LIST_ALL)
    assert not is_allowed(OWNER, Resource.BOOKING, Action.LIST_ALL)


def test_profiles():
    assert is_allowed(OWNER, Resource.PROFILE, Action.READ, owner_id=OWNER.user_id)
    assert not is_allowed(OWNER, Resource.PROFILE, Action.READ, owner_id=STRANGER.user_id)
    assert is_allowed(ADMIN, Resource.PROFILE, Action.READ, owner_id=OWNER.user_id)
    assert not is_allowed(ADMIN, Resource.PROFILE, Action.UPDATE, owner_id=OWNER.user_id)


def test_anonymous_cannot_touch_bookings():
    for action in Action:
        assert not is_allowed(None, Resource.BOOKING, action)


def test_authorize_raises_forbidden():
    authorize(ADMIN, Resource.EVENT, Action.DELETE)
    with pytest.raises(Forbidden):
        authorize(OWNER, Resource.EVENT, Action.DELETE)
