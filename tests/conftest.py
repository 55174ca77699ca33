"""Pytest configuration and fixtures"""

from datetime import timedelta

import pytest

from app import create_app
from models import db, User, Team, TeamMember, TeamInvitation
from services.backends import TeamSchemaBackend
from services.credentials import hash_pin
from utils.helpers import utcnow


@pytest.fixture
def app():
    """App bound to a fresh in-memory database."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'INVITATION_SCHEMA': 'team',
        'BASE_URL': 'https://teams.example.com',
        'LOGIN_URL': '/login',
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def backend(app):
    return TeamSchemaBackend()


@pytest.fixture
def team(app):
    team = Team(name='Research Lab', slug='research-lab', primary_color='#123456', is_active=True)
    db.session.add(team)
    db.session.commit()
    return team


@pytest.fixture
def make_invitation(team):
    """Factory for invitations; expiry is given in days from now."""
    def _make(token='abc', expires_in=7, accepted_at=None, email='jane@example.com',
              role='member', team_id=None):
        invitation = TeamInvitation(
            team_id=team_id or team.id,
            email=email,
            role=role,
            token=token,
            expires_at=utcnow() + timedelta(days=expires_in),
            accepted_at=accepted_at,
        )
        db.session.add(invitation)
        db.session.commit()
        return invitation
    return _make


@pytest.fixture
def make_user(app):
    """Factory for users with a PIN in the current hash format."""
    def _make(name='John Smith', pin='4321', pin_hash=None, pin_hash_format=None):
        if pin_hash is None:
            pin_hash, pin_hash_format = hash_pin(pin)
        user = User(name=name, pin_hash=pin_hash, pin_hash_format=pin_hash_format)
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def make_member(team):
    def _make(user, role='member', status='active'):
        member = TeamMember(team_id=team.id, user_id=user.id, role=role, status=status)
        db.session.add(member)
        db.session.commit()
        return member
    return _make
