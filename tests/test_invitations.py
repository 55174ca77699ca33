"""Tests for team and invitation management"""

from datetime import timedelta

import pytest

from models import TeamInvitation
from services import invitations
from services.errors import NotFound, PermissionDenied, ValidationError
from services.validator import InvitationStatus
from utils.helpers import utcnow


class TestCreateInvitation:

    def test_normalises_email_and_sets_expiry(self, backend, team):
        invitation = invitations.create_invitation(backend, team.id, '  Jane@Example.COM ', role='admin')

        assert invitation.email == 'jane@example.com'
        assert invitation.role == 'admin'
        assert invitation.accepted_at is None
        remaining = invitation.expires_at - utcnow()
        assert timedelta(days=6, hours=23) < remaining <= timedelta(days=7)

    def test_tokens_are_unique(self, backend, team):
        first = invitations.create_invitation(backend, team.id, 'a@example.com')
        second = invitations.create_invitation(backend, team.id, 'b@example.com')

        assert first.token != second.token
        assert len(first.token) > 20

    def test_expiry_days_come_from_config(self, app, backend, team):
        app.config['INVITATION_EXPIRY_DAYS'] = 2
        invitation = invitations.create_invitation(backend, team.id, 'a@example.com')

        assert invitation.expires_at - utcnow() <= timedelta(days=2)

    @pytest.mark.parametrize('email, role, key', [
        ('', 'member', 'error_email_required'),
        ('not-an-email', 'member', 'error_email_invalid'),
        ('jane@example.com', 'owner', 'error_role_invalid'),
        ('jane@example.com', 'superuser', 'error_role_invalid'),
    ])
    def test_rejects_bad_input(self, backend, team, email, role, key):
        with pytest.raises(ValidationError) as excinfo:
            invitations.create_invitation(backend, team.id, email, role=role)
        assert excinfo.value.message_key == key

    def test_rejects_duplicate_pending_invitation(self, backend, team, make_invitation):
        make_invitation(email='jane@example.com')

        with pytest.raises(ValidationError) as excinfo:
            invitations.create_invitation(backend, team.id, 'JANE@example.com')
        assert excinfo.value.message_key == 'error_already_invited'

    def test_expired_invitation_does_not_block_new_one(self, backend, team, make_invitation):
        make_invitation(email='jane@example.com', expires_in=-1)

        invitation = invitations.create_invitation(backend, team.id, 'jane@example.com')
        assert invitation.token != 'abc'


class TestResendAndRevoke:

    def test_resend_extends_expiry(self, backend, team, make_invitation):
        invitation = make_invitation(expires_in=-3)

        resent = invitations.resend_invitation(backend, team.id, invitation.id)

        assert resent.expires_at > utcnow() + timedelta(days=6)

    def test_resend_accepted_invitation_is_rejected(self, backend, team, make_invitation):
        invitation = make_invitation(accepted_at=utcnow())

        with pytest.raises(ValidationError):
            invitations.resend_invitation(backend, team.id, invitation.id)

    def test_resend_unknown_invitation(self, backend, team):
        with pytest.raises(NotFound):
            invitations.resend_invitation(backend, team.id, 999)

    def test_revoke_deletes_invitation(self, backend, team, make_invitation):
        invitation = make_invitation()

        invitations.revoke_invitation(backend, team.id, invitation.id)

        assert TeamInvitation.query.count() == 0

    def test_revoke_is_scoped_to_team(self, backend, team, make_invitation):
        invitation = make_invitation()

        with pytest.raises(NotFound):
            invitations.revoke_invitation(backend, team.id + 1, invitation.id)
        assert TeamInvitation.query.count() == 1


def test_list_reports_status(backend, team, make_invitation):
    make_invitation(token='pending', email='a@example.com')
    make_invitation(token='old', email='b@example.com', expires_in=-1)
    make_invitation(token='done', email='c@example.com', accepted_at=utcnow())

    statuses = {invitation.token: status
                for invitation, status in invitations.list_invitations(backend, team.id)}

    assert statuses == {
        'pending': InvitationStatus.VALID,
        'old': InvitationStatus.EXPIRED,
        'done': InvitationStatus.ALREADY_ACCEPTED,
    }


def test_join_url(app):
    assert invitations.build_join_url('tok') == 'https://teams.example.com/join/tok'


class TestTeams:

    def test_slug_is_generated(self, backend, make_user):
        owner = make_user()
        team = invitations.create_team(backend, 'Smith Lab: Cell Biology', owner.id)

        assert team.slug == 'smith-lab-cell-biology'
        assert backend.get_membership_role(team.id, owner.id) == 'owner'

    def test_taken_slug_is_rejected(self, backend, team, make_user):
        owner = make_user()

        with pytest.raises(ValidationError) as excinfo:
            invitations.create_team(backend, 'Research Lab', owner.id)
        assert excinfo.value.message_key == 'error_team_slug_taken'

    def test_name_required(self, backend, make_user):
        with pytest.raises(ValidationError):
            invitations.create_team(backend, '  ', make_user().id)

    def test_require_manager(self, backend, team, make_user, make_member):
        admin = make_user('Ada Admin')
        member = make_user('Mo Member')
        make_member(admin, role='admin')
        make_member(member, role='member')

        assert invitations.require_manager(backend, team.id, admin.id) == 'admin'
        with pytest.raises(PermissionDenied):
            invitations.require_manager(backend, team.id, member.id)
        with pytest.raises(NotFound):
            invitations.require_manager(backend, team.id + 1, admin.id)

    def test_suspended_admin_cannot_manage(self, backend, team, make_user, make_member):
        admin = make_user('Ada Admin')
        make_member(admin, role='admin', status='suspended')

        with pytest.raises(PermissionDenied):
            invitations.require_manager(backend, team.id, admin.id)
