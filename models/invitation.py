from datetime import datetime
from .database import db

INVITABLE_ROLES = ('admin', 'member')

class TeamInvitation(db.Model):
    """Database model for invitations to join a team."""
    __tablename__ = 'team_invitations'

    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.Integer, db.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    role = db.Column(db.String(20), nullable=False, default='member')  # admin, member
    token = db.Column(db.String(255), nullable=False, unique=True)
    invited_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    expires_at = db.Column(db.DateTime, nullable=False)
    accepted_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
