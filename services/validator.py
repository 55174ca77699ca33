from enum import Enum
from utils.helpers import utcnow, as_naive_utc


class InvitationStatus(Enum):
    VALID = 'valid'
    NOT_FOUND = 'not_found'
    ALREADY_ACCEPTED = 'already_accepted'
    EXPIRED = 'expired'
    TEAM_INACTIVE = 'team_inactive'


def classify_invitation(invitation, now=None):
    """
    Decide whether a fetched invitation can be accepted.

    Rules are checked in order and the first match wins, so an accepted
    invitation is reported as accepted even after it has expired. An
    invitation stops being valid at the instant it expires.
    """
    if invitation is None:
        return InvitationStatus.NOT_FOUND

    if invitation.accepted_at is not None:
        return InvitationStatus.ALREADY_ACCEPTED

    now = as_naive_utc(now) if now is not None else utcnow()
    if as_naive_utc(invitation.expires_at) <= now:
        return InvitationStatus.EXPIRED

    if invitation.team is None or not invitation.team.is_active:
        return InvitationStatus.TEAM_INACTIVE

    return InvitationStatus.VALID
