from datetime import datetime
from .database import db

class User(db.Model):
    """PIN-authenticated identity shared across teams."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    email = db.Column(db.String(255))
    pin_hash = db.Column(db.String(255), nullable=False)
    pin_hash_format = db.Column(db.String(20), nullable=False, default='werkzeug')
    color = db.Column(db.String(20), nullable=False, default='#1e3a5f')
    global_role = db.Column(db.String(20), nullable=False, default='user')  # user, admin
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login = db.Column(db.DateTime)
    failed_pin_attempts = db.Column(db.Integer, nullable=False, default=0)
    locked_until = db.Column(db.DateTime)

    memberships = db.relationship('TeamMember', backref='user', lazy=True)
