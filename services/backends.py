"""
Invitation store adapters.

Two generations of the tenant schema exist side by side: the current
``team_*`` tables and the older ``agency_*`` tables. Each generation gets
its own backend class; the application picks one the first time it is
needed (from INVITATION_SCHEMA, or by probing for ``team_invitations``)
and keeps it for the life of the process.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from flask import current_app

from models import db, User, Team, TeamMember, TeamInvitation
from models.agency import Agency, AgencyMember, AgencyInvitation
from .errors import InvitationUnavailable

logger = logging.getLogger(__name__)


@dataclass
class TeamInfo:
    id: int
    name: str
    slug: str
    primary_color: Optional[str]
    is_active: bool


@dataclass
class InvitationRecord:
    """An invitation joined with its team, independent of schema generation."""
    id: int
    token: str
    email: Optional[str]
    role: str
    team_id: int
    expires_at: datetime
    accepted_at: Optional[datetime]
    created_at: Optional[datetime]
    invited_by: Optional[int]
    team: Optional[TeamInfo]


class InvitationBackend:
    """Base adapter; subclasses bind it to one generation's tables."""

    name = None
    team_model = None
    member_model = None
    invitation_model = None
    team_key = None
    default_flag = None

    # -- reads -------------------------------------------------------------

    def fetch_invitation(self, token):
        invitation = self.invitation_model.query.filter_by(token=token).first()
        if invitation is None:
            return None
        return self._to_record(invitation)

    def get_invitation(self, team_id, invitation_id):
        invitation = self._scoped_invitation(team_id, invitation_id)
        return self._to_record(invitation) if invitation else None

    def list_invitations(self, team_id):
        invitations = (self.invitation_model.query
                       .filter(getattr(self.invitation_model, self.team_key) == team_id)
                       .order_by(self.invitation_model.created_at.desc(),
                                 self.invitation_model.id.desc())
                       .all())
        return [self._to_record(invitation) for invitation in invitations]

    def find_pending_invitation(self, team_id, email, now):
        model = self.invitation_model
        invitation = model.query.filter(
            getattr(model, self.team_key) == team_id,
            sa.func.lower(model.email) == email,
            model.accepted_at.is_(None),
            model.expires_at > now,
        ).first()
        return self._to_record(invitation) if invitation else None

    def get_team(self, team_id):
        team = db.session.get(self.team_model, team_id)
        return self._to_team_info(team) if team else None

    def slug_taken(self, slug):
        return self.team_model.query.filter_by(slug=slug).first() is not None

    def get_membership_role(self, team_id, user_id):
        membership = self._membership(team_id, user_id)
        if membership is None or membership.status != 'active':
            return None
        return membership.role

    def find_user_by_name(self, name):
        return User.query.filter_by(name=name).first()

    def get_user(self, user_id):
        return db.session.get(User, user_id)

    # -- writes ------------------------------------------------------------

    def accept_invitation(self, token, user_id, now):
        """Accept an invitation for an existing user; returns (team_id, role)."""
        try:
            team_id, role = self._accept(token, user_id, now)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return team_id, role

    def create_user_and_accept(self, token, now, **user_fields):
        """
        Create a user and accept the invitation in one transaction.

        Either both the user and the acceptance are committed or neither
        is; a failed accept never leaves an orphaned user behind.
        """
        try:
            user = User(**user_fields)
            db.session.add(user)
            db.session.flush()
            team_id, role = self._accept(token, user.id, now)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return user, team_id, role

    def update_user_login(self, user, now, pin_hash=None, pin_hash_format=None):
        if pin_hash is not None:
            user.pin_hash = pin_hash
            user.pin_hash_format = pin_hash_format
        user.last_login = now
        user.failed_pin_attempts = 0
        user.locked_until = None
        db.session.flush()

    def record_failed_pin(self, user, now, max_attempts, lockout):
        """
        Count a wrong PIN; returns the lockout end when this attempt hit the limit.

        The counter starts over once the lock is set, so after the lockout
        has passed the user again has ``max_attempts`` tries.
        """
        try:
            attempts = (user.failed_pin_attempts or 0) + 1
            locked_until = None
            if attempts >= max_attempts:
                locked_until = now + lockout
                user.locked_until = locked_until
                attempts = 0
            user.failed_pin_attempts = attempts
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return locked_until

    def create_invitation(self, team_id, email, role, token, expires_at, invited_by=None):
        invitation = self.invitation_model(
            email=email,
            role=role,
            token=token,
            expires_at=expires_at,
            invited_by=invited_by,
            **{self.team_key: team_id}
        )
        db.session.add(invitation)
        db.session.commit()
        return self._to_record(invitation)

    def extend_invitation(self, team_id, invitation_id, expires_at):
        invitation = self._scoped_invitation(team_id, invitation_id)
        if invitation is None:
            return None
        invitation.expires_at = expires_at
        db.session.commit()
        return self._to_record(invitation)

    def delete_invitation(self, team_id, invitation_id):
        invitation = self._scoped_invitation(team_id, invitation_id)
        if invitation is None:
            return False
        db.session.delete(invitation)
        db.session.commit()
        return True

    def create_team_with_owner(self, name, slug, user_id, primary_color=None):
        """Create a team and make the creator its owner."""
        try:
            team = self.team_model(name=name, slug=slug)
            if primary_color:
                team.primary_color = primary_color
            db.session.add(team)
            db.session.flush()
            db.session.add(self.member_model(
                user_id=user_id,
                role='owner',
                status='active',
                **{self.team_key: team.id, self.default_flag: True}
            ))
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return self._to_team_info(team)

    # -- internals ---------------------------------------------------------

    def _accept(self, token, user_id, now):
        model = self.invitation_model
        # Conditional update: concurrent acceptors race on this row and only
        # the first one matches accepted_at IS NULL.
        result = db.session.execute(
            sa.update(model)
            .where(model.token == token,
                   model.accepted_at.is_(None),
                   model.expires_at > now)
            .values(accepted_at=now)
        )
        if result.rowcount != 1:
            raise InvitationUnavailable(token)

        invitation = model.query.filter_by(token=token).one()
        team_id = getattr(invitation, self.team_key)

        team = db.session.get(self.team_model, team_id)
        if team is None or not team.is_active:
            raise InvitationUnavailable(token)

        membership = self._membership(team_id, user_id)
        if membership is None:
            db.session.add(self.member_model(
                user_id=user_id,
                role=invitation.role,
                status='active',
                **{self.team_key: team_id}
            ))
        else:
            membership.role = invitation.role
            membership.status = 'active'
        db.session.flush()

        logger.info("[Backend] Invitation %s accepted by user %s for %s %s",
                    invitation.id, user_id, self.name, team_id)
        return team_id, invitation.role

    def _membership(self, team_id, user_id):
        return self.member_model.query.filter_by(
            user_id=user_id, **{self.team_key: team_id}
        ).first()

    def _scoped_invitation(self, team_id, invitation_id):
        return self.invitation_model.query.filter_by(
            id=invitation_id, **{self.team_key: team_id}
        ).first()

    def _to_team_info(self, team):
        return TeamInfo(
            id=team.id,
            name=team.name,
            slug=team.slug,
            primary_color=team.primary_color,
            is_active=bool(team.is_active),
        )

    def _to_record(self, invitation):
        team_id = getattr(invitation, self.team_key)
        team = db.session.get(self.team_model, team_id)
        return InvitationRecord(
            id=invitation.id,
            token=invitation.token,
            email=invitation.email,
            role=invitation.role,
            team_id=team_id,
            expires_at=invitation.expires_at,
            accepted_at=invitation.accepted_at,
            created_at=invitation.created_at,
            invited_by=invitation.invited_by,
            team=self._to_team_info(team) if team else None,
        )


class TeamSchemaBackend(InvitationBackend):
    name = 'team'
    team_model = Team
    member_model = TeamMember
    invitation_model = TeamInvitation
    team_key = 'team_id'
    default_flag = 'is_default_team'


class AgencySchemaBackend(InvitationBackend):
    name = 'agency'
    team_model = Agency
    member_model = AgencyMember
    invitation_model = AgencyInvitation
    team_key = 'agency_id'
    default_flag = 'is_default_agency'


BACKENDS = {
    TeamSchemaBackend.name: TeamSchemaBackend,
    AgencySchemaBackend.name: AgencySchemaBackend,
}


def select_backend(engine, schema='auto'):
    """Pick the backend for a schema name, probing the database for 'auto'"""
    if schema == 'auto':
        tables = sa.inspect(engine).get_table_names()
        schema = 'team' if TeamInvitation.__tablename__ in tables else 'agency'

    try:
        backend_class = BACKENDS[schema]
    except KeyError:
        raise ValueError(f"Unknown invitation schema: {schema!r}")
    return backend_class()


def get_backend():
    """Backend for the current app, selected once and then cached"""
    backend = current_app.extensions.get('invitation_backend')
    if backend is None:
        backend = select_backend(db.engine, current_app.config.get('INVITATION_SCHEMA', 'auto'))
        current_app.extensions['invitation_backend'] = backend
        logger.info("[Backend] Using %s schema for invitations", backend.name)
    return backend
