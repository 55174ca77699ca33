"""
Previous generation of the tenant schema.

Deployments created before the rename to teams still carry these tables;
the agency backend in services.backends reads and writes them.
"""
from datetime import datetime
from .database import db

class Agency(db.Model):
    __tablename__ = 'agencies'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(100), nullable=False, unique=True)
    primary_color = db.Column(db.String(20), default='#0033A0')
    secondary_color = db.Column(db.String(20), default='#72B5E8')
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    invitations = db.relationship('AgencyInvitation', backref='agency', lazy=True)

class AgencyMember(db.Model):
    __tablename__ = 'agency_members'
    __table_args__ = (db.UniqueConstraint('agency_id', 'user_id'),)

    id = db.Column(db.Integer, primary_key=True)
    agency_id = db.Column(db.Integer, db.ForeignKey('agencies.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='member')
    status = db.Column(db.String(20), default='active')
    is_default_agency = db.Column(db.Boolean, default=False)
    joined_at = db.Column(db.DateTime, default=datetime.utcnow)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

class AgencyInvitation(db.Model):
    __tablename__ = 'agency_invitations'

    id = db.Column(db.Integer, primary_key=True)
    agency_id = db.Column(db.Integer, db.ForeignKey('agencies.id', ondelete='CASCADE'), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='member')
    token = db.Column(db.String(255), nullable=False, unique=True)
    invited_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    expires_at = db.Column(db.DateTime, nullable=False)
    accepted_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
