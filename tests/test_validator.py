"""Tests for invitation classification"""

from datetime import datetime

import pytest

from services.backends import InvitationRecord, TeamInfo
from services.validator import InvitationStatus, classify_invitation

NOW = datetime(2026, 3, 1, 12, 0, 0)


def record(expires_at='2099-01-01', accepted_at=None, team_active=True, team=True):
    return InvitationRecord(
        id=1,
        token='abc',
        email='jane@example.com',
        role='member',
        team_id=7,
        expires_at=datetime.fromisoformat(expires_at),
        accepted_at=datetime.fromisoformat(accepted_at) if accepted_at else None,
        created_at=None,
        invited_by=None,
        team=TeamInfo(id=7, name='Lab', slug='lab', primary_color='#123456',
                      is_active=team_active) if team else None,
    )


def test_missing_invitation_is_not_found():
    assert classify_invitation(None, NOW) is InvitationStatus.NOT_FOUND


def test_past_expiry_is_expired():
    assert classify_invitation(record(expires_at='2020-01-01'), NOW) is InvitationStatus.EXPIRED


def test_accepted_wins_over_expiry():
    invitation = record(expires_at='2099-01-01', accepted_at='2024-05-01')
    assert classify_invitation(invitation, NOW) is InvitationStatus.ALREADY_ACCEPTED


@pytest.mark.parametrize('expires_at', ['2020-01-01', '2026-03-01T11:59:59', '2099-01-01'])
def test_accepted_regardless_of_expiry(expires_at):
    invitation = record(expires_at=expires_at, accepted_at='2024-05-01')
    assert classify_invitation(invitation, NOW) is InvitationStatus.ALREADY_ACCEPTED


def test_expiry_instant_is_already_expired():
    invitation = record(expires_at='2026-03-01T12:00:00')
    assert classify_invitation(invitation, NOW) is InvitationStatus.EXPIRED


def test_inactive_team():
    invitation = record(team_active=False)
    assert classify_invitation(invitation, NOW) is InvitationStatus.TEAM_INACTIVE


def test_expired_wins_over_inactive_team():
    invitation = record(expires_at='2020-01-01', team_active=False)
    assert classify_invitation(invitation, NOW) is InvitationStatus.EXPIRED


def test_missing_team_counts_as_inactive():
    assert classify_invitation(record(team=False), NOW) is InvitationStatus.TEAM_INACTIVE


def test_valid_invitation():
    assert classify_invitation(record(), NOW) is InvitationStatus.VALID


def test_timezone_aware_now_is_normalised():
    aware_now = datetime.fromisoformat('2026-03-01T14:00:00+02:00')
    invitation = record(expires_at='2026-03-01T12:30:00')
    assert classify_invitation(invitation, aware_now) is InvitationStatus.VALID
