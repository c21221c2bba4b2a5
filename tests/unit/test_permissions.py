"""Unit tests for bndy_calendar.permissions."""

import pytest

from bndy_calendar.calendar_models import Membership, MembershipRole
from bndy_calendar.permissions import EventPermissions, can_create, can_delete, can_edit, is_owner

pytestmark = pytest.mark.unit


@pytest.fixture
def member_b() -> Membership:
    return Membership(id="mem-b", artist_id="artist-blues", user_id="user-b", role=MembershipRole.ADMIN)


@pytest.fixture
def reds_member() -> Membership:
    return Membership(id="mem-r", artist_id="artist-reds", user_id="user-a", role=MembershipRole.OWNER)


class TestUnavailability:
    """Only the recorded owner may change an unavailability."""

    def test_membership_owned(self, make_event, membership, member_b):
        event = make_event(type="unavailable", membership_id="mem-a")

        assert can_edit(event, "user-a", membership)
        assert can_delete(event, "user-a", membership)
        assert not can_edit(event, "user-b", member_b)
        assert not can_delete(event, "user-b", member_b)

    def test_user_owned(self, make_event, membership, member_b):
        event = make_event(type="unavailable", owner_user_id="user-a")

        assert can_edit(event, "user-a", membership)
        assert can_edit(event, "user-a", None)
        assert not can_edit(event, "user-b", member_b)
        assert not can_edit(event, None, membership)

    def test_admin_role_does_not_grant_access(self, make_event, member_b):
        event = make_event(type="unavailable", membership_id="mem-a")

        assert member_b.has_role(MembershipRole.ADMIN)
        assert not can_edit(event, "user-b", member_b)


class TestArtistEvents:
    def test_any_member_of_artist_may_edit(self, make_event, membership, member_b):
        event = make_event(type="gig")

        assert can_edit(event, "user-a", membership)
        assert can_edit(event, "user-b", member_b)

    def test_member_of_other_artist_may_not_edit(self, make_event, reds_member):
        assert not can_edit(make_event(type="gig"), "user-a", reds_member)

    def test_no_membership_may_not_edit(self, make_event):
        assert not can_edit(make_event(type="gig"), "user-a", None)

    def test_personal_event_is_editable(self, make_event):
        assert can_edit(make_event(artist_id=None, type="other"), "user-a", None)


class TestIsOwner:
    def test_membership_recorded_event(self, make_event, membership, member_b):
        event = make_event(membership_id="mem-a")

        assert is_owner(event, "user-a", membership)
        assert not is_owner(event, "user-b", member_b)
        assert can_edit(event, "user-b", member_b)

    def test_artist_wide_event(self, make_event, membership, member_b, reds_member):
        event = make_event()

        assert is_owner(event, "user-a", membership)
        assert is_owner(event, "user-b", member_b)
        assert not is_owner(event, "user-a", reds_member)

    def test_personal_event(self, make_event):
        event = make_event(artist_id=None, owner_user_id="user-a")

        assert is_owner(event, "user-a", None)
        assert not is_owner(event, "user-b", None)


class TestCanCreate:
    def test_requires_signed_in_user(self, membership):
        assert not can_create(None, "artist-blues", membership)
        assert not can_create("", None, None)

    def test_personal_context(self):
        assert can_create("user-a")

    def test_artist_context_requires_membership(self, membership, reds_member):
        assert can_create("user-a", "artist-blues", membership)
        assert not can_create("user-a", "artist-blues", reds_member)
        assert not can_create("user-a", "artist-blues", None)


class TestEventPermissions:
    def test_bound_checks_match_functions(self, make_event, membership):
        permissions = EventPermissions("user-a", membership)
        mine = make_event(type="unavailable", membership_id="mem-a")
        theirs = make_event(type="unavailable", membership_id="mem-b")

        assert permissions.artist_id == "artist-blues"
        assert permissions.can_edit(mine)
        assert permissions.can_delete(mine)
        assert permissions.is_owner(mine)
        assert not permissions.can_edit(theirs)
        assert permissions.can_create("artist-blues")
        assert not permissions.can_create("artist-reds")

    def test_without_membership(self):
        permissions = EventPermissions("user-a")

        assert permissions.artist_id is None
        assert permissions.can_create()


class TestMembershipRoles:
    def test_rank_order(self):
        assert MembershipRole.OWNER.rank > MembershipRole.ADMIN.rank > MembershipRole.MEMBER.rank

    @pytest.mark.parametrize(
        "role,minimum,expected",
        [
            (MembershipRole.OWNER, MembershipRole.ADMIN, True),
            (MembershipRole.ADMIN, MembershipRole.ADMIN, True),
            (MembershipRole.MEMBER, MembershipRole.ADMIN, False),
            (MembershipRole.MEMBER, MembershipRole.MEMBER, True),
        ],
    )
    def test_has_role(self, role, minimum, expected):
        membership = Membership(id="m", artist_id="a", role=role)

        assert membership.has_role(minimum) is expected
