"""Team and invitation management for team owners and admins"""
import logging
import os
import secrets
from datetime import timedelta

from flask import current_app
from itsdangerous import URLSafeSerializer

from models.invitation import INVITABLE_ROLES
from utils.helpers import utcnow, normalize_email, is_valid_email, slugify
from .errors import NotFound, PermissionDenied, ValidationError
from .validator import classify_invitation

logger = logging.getLogger(__name__)

INVITATION_EXPIRY_DAYS = 7
MANAGER_ROLES = ('owner', 'admin')


def get_serializer():
    """Get the token serializer"""
    return URLSafeSerializer(current_app.config['SECRET_KEY'], salt='team-invitation')


def generate_invitation_token(email):
    """Generate an unguessable, signed invitation token"""
    # The nonce keeps tokens unique when the same address is invited again
    return get_serializer().dumps({'email': email, 'nonce': secrets.token_urlsafe(16)})


def build_join_url(token):
    base_url = current_app.config.get('BASE_URL') or os.environ.get('BASE_URL', 'http://localhost:5000')
    return f"{base_url.rstrip('/')}/join/{token}"


def expiry_days():
    return int(current_app.config.get('INVITATION_EXPIRY_DAYS', INVITATION_EXPIRY_DAYS))


def require_manager(backend, team_id, user_id):
    """Raise unless the user is an active owner or admin of the team"""
    if backend.get_team(team_id) is None:
        raise NotFound('error_team_not_found')
    role = backend.get_membership_role(team_id, user_id)
    if role not in MANAGER_ROLES:
        raise PermissionDenied()
    return role


def create_team(backend, name, owner_id, slug=None, primary_color=None):
    """Create a team with the given user as owner"""
    name = (name or '').strip()
    if not name:
        raise ValidationError('error_team_name_required')

    slug = slugify(slug or name)
    if not slug:
        raise ValidationError('error_team_slug_invalid')
    if backend.slug_taken(slug):
        raise ValidationError('error_team_slug_taken')

    team = backend.create_team_with_owner(name, slug, owner_id, primary_color=primary_color)
    logger.info("[Invitations] Team %s (%s) created by user %s", team.id, slug, owner_id)
    return team


def create_invitation(backend, team_id, email, role='member', invited_by=None):
    """Invite an email address to a team"""
    email = normalize_email(email)
    if not email:
        raise ValidationError('error_email_required')
    if not is_valid_email(email):
        raise ValidationError('error_email_invalid')
    if role not in INVITABLE_ROLES:
        raise ValidationError('error_role_invalid')

    now = utcnow()
    if backend.find_pending_invitation(team_id, email, now):
        raise ValidationError('error_already_invited')

    token = generate_invitation_token(email)
    invitation = backend.create_invitation(
        team_id,
        email,
        role,
        token,
        expires_at=now + timedelta(days=expiry_days()),
        invited_by=invited_by,
    )
    logger.info("[Invitations] Invitation %s created for team %s (%s)", invitation.id, team_id, role)
    return invitation


def resend_invitation(backend, team_id, invitation_id):
    """Push an unaccepted invitation's expiry out again"""
    invitation = backend.get_invitation(team_id, invitation_id)
    if invitation is None:
        raise NotFound('error_invitation_missing')
    if invitation.accepted_at is not None:
        raise ValidationError('invitation_already_accepted')

    invitation = backend.extend_invitation(
        team_id, invitation_id, utcnow() + timedelta(days=expiry_days())
    )
    logger.info("[Invitations] Invitation %s extended until %s", invitation_id, invitation.expires_at)
    return invitation


def revoke_invitation(backend, team_id, invitation_id):
    if not backend.delete_invitation(team_id, invitation_id):
        raise NotFound('error_invitation_missing')
    logger.info("[Invitations] Invitation %s revoked", invitation_id)


def list_invitations(backend, team_id):
    """Invitations of a team, newest first, paired with their status"""
    now = utcnow()
    return [(invitation, classify_invitation(invitation, now))
            for invitation in backend.list_invitations(team_id)]


def invitation_to_dict(invitation, status=None):
    data = {
        'id': invitation.id,
        'email': invitation.email,
        'role': invitation.role,
        'team_id': invitation.team_id,
        'token': invitation.token,
        'join_url': build_join_url(invitation.token),
        'expires_at': invitation.expires_at.isoformat(),
        'accepted_at': invitation.accepted_at.isoformat() if invitation.accepted_at else None,
        'created_at': invitation.created_at.isoformat() if invitation.created_at else None,
    }
    if status is not None:
        data['status'] = status.value
    return data
