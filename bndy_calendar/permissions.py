"""Edit, delete and create permissions for calendar events.

Pure predicates over ``(event, current_user_id, membership)``. They gate which
controls the calendar shows; the API enforces its own checks.
"""

from typing import Optional

from .calendar_models import Event, EventType, Membership


def _owns_unavailability(
    event: Event, current_user_id: Optional[str], membership: Optional[Membership]
) -> bool:
    if event.owner_user_id:
        return current_user_id is not None and event.owner_user_id == current_user_id
    return membership is not None and event.membership_id == membership.id


def can_edit(event: Event, current_user_id: Optional[str], membership: Optional[Membership]) -> bool:
    """Check if the current user may edit an event.

    - Unavailability: only the recorded owner (user, else membership).
    - Artist events: any member of that same artist, whatever the role.
    - Personal events with no artist: always.
    - Anything else, e.g. another artist's event seen in a combined view: never.
    """
    if event.type == EventType.UNAVAILABLE:
        return _owns_unavailability(event, current_user_id, membership)
    if event.artist_id:
        return membership is not None and membership.artist_id == event.artist_id
    return True


def can_delete(event: Event, current_user_id: Optional[str], membership: Optional[Membership]) -> bool:
    """Check if the current user may delete an event. Same policy as :func:`can_edit` for now."""
    return can_edit(event, current_user_id, membership)


def is_owner(event: Event, current_user_id: Optional[str], membership: Optional[Membership]) -> bool:
    """Identity check for display ("only X can edit this"), not enforcement.

    Narrower than :func:`can_edit`: an event recorded against one member or
    user is owned only by that member or user.
    """
    if event.type == EventType.UNAVAILABLE:
        return _owns_unavailability(event, current_user_id, membership)
    if event.artist_id:
        if membership is None or membership.artist_id != event.artist_id:
            return False
        return event.membership_id is None or event.membership_id == membership.id
    return event.owner_user_id is None or event.owner_user_id == current_user_id


def can_create(
    current_user_id: Optional[str],
    artist_id: Optional[str] = None,
    membership: Optional[Membership] = None,
) -> bool:
    """Check if the current user may create events.

    Requires a signed-in user; in an artist context also requires a membership
    of that artist.
    """
    if not current_user_id:
        return False
    if artist_id:
        return membership is not None and membership.artist_id == artist_id
    return True


class EventPermissions:
    """Permission checks bound to one user and membership context."""

    def __init__(self, current_user_id: Optional[str], membership: Optional[Membership] = None):
        self.current_user_id = current_user_id
        self.membership = membership

    @property
    def artist_id(self) -> Optional[str]:
        return self.membership.artist_id if self.membership else None

    def can_edit(self, event: Event) -> bool:
        return can_edit(event, self.current_user_id, self.membership)

    def can_delete(self, event: Event) -> bool:
        return can_delete(event, self.current_user_id, self.membership)

    def is_owner(self, event: Event) -> bool:
        return is_owner(event, self.current_user_id, self.membership)

    def can_create(self, artist_id: Optional[str] = None) -> bool:
        return can_create(self.current_user_id, artist_id, self.membership)
