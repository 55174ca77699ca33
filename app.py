#!/usr/bin/env python3
"""
Team Invitations Service
A Flask application for teams: join links, PIN accounts and invitation management.
"""

import logging
import os
from dotenv import load_dotenv
from flask import Flask
from flask_migrate import Migrate

# Import our modules
from models import db
from utils.banner import print_startup_banner
from routes import register_blueprints
from migrate_db import register_commands

# Load environment variables from .env file
load_dotenv()

def create_app(test_config=None):
    """Application factory pattern"""
    # Print startup banner (will show in both dev and production)
    print_startup_banner()

    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///team_invitations.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['INVITATION_SCHEMA'] = os.environ.get('INVITATION_SCHEMA', 'auto')
    app.config['INVITATION_EXPIRY_DAYS'] = int(os.environ.get('INVITATION_EXPIRY_DAYS', '7'))
    app.config['BASE_URL'] = os.environ.get('BASE_URL', 'http://localhost:5000')
    app.config['LOGIN_URL'] = os.environ.get('LOGIN_URL', '/')
    app.config['DEFAULT_USER_COLOR'] = os.environ.get('DEFAULT_USER_COLOR', '#1e3a5f')
    app.config['PIN_MAX_ATTEMPTS'] = int(os.environ.get('PIN_MAX_ATTEMPTS', '5'))
    app.config['PIN_LOCKOUT_MINUTES'] = int(os.environ.get('PIN_LOCKOUT_MINUTES', '15'))
    app.config['LOG_LEVEL'] = os.environ.get('LOG_LEVEL', 'INFO')

    if test_config:
        app.config.update(test_config)

    # Handle PostgreSQL URL format for SQLAlchemy 2.0+
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('postgres://'):
        app.config['SQLALCHEMY_DATABASE_URI'] = (
            app.config['SQLALCHEMY_DATABASE_URI'].replace('postgres://', 'postgresql://', 1)
        )

    logging.basicConfig(
        level=getattr(logging, app.config['LOG_LEVEL'].upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    # Initialize extensions
    db.init_app(app)
    Migrate(app, db)

    # Register blueprints
    register_blueprints(app)
    register_commands(app)

    # Database migrations are handled by Flask-Migrate
    # Run: flask db upgrade (in production)

    return app

# Create the application
app = create_app()

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
