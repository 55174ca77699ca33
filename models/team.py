from datetime import datetime
from .database import db

TEAM_ROLES = ('owner', 'admin', 'member')
MEMBER_STATUSES = ('active', 'invited', 'suspended')

class Team(db.Model):
    """A tenant: members, invitations and all shared data hang off a team."""
    __tablename__ = 'teams'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(100), nullable=False, unique=True)
    primary_color = db.Column(db.String(20), default='#4F46E5')
    secondary_color = db.Column(db.String(20), default='#818CF8')
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    members = db.relationship('TeamMember', backref='team', lazy=True)
    invitations = db.relationship('TeamInvitation', backref='team', lazy=True)

class TeamMember(db.Model):
    """Membership of a user in a team."""
    __tablename__ = 'team_members'
    __table_args__ = (db.UniqueConstraint('team_id', 'user_id'),)

    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.Integer, db.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='member')  # owner, admin, member
    status = db.Column(db.String(20), default='active')  # active, invited, suspended
    is_default_team = db.Column(db.Boolean, default=False)
    joined_at = db.Column(db.DateTime, default=datetime.utcnow)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
