#!/usr/bin/env python3
"""
Copy the legacy agency tables into the team tables.

Safe to run repeatedly. Agencies whose id already exists in teams,
members whose (team, user) pair already exists and invitations whose
token already exists are skipped.
"""
import logging

import click

from models import db, Team, TeamMember, TeamInvitation
from models.agency import Agency, AgencyMember, AgencyInvitation

logger = logging.getLogger(__name__)

def migrate_agencies_to_teams():
    """Copy agencies, their members and invitations; returns counts per table"""
    counts = {'teams': 0, 'team_members': 0, 'team_invitations': 0}

    try:
        existing_team_ids = {team_id for (team_id,) in db.session.query(Team.id)}
        for agency in Agency.query.order_by(Agency.id):
            if agency.id in existing_team_ids:
                continue
            db.session.add(Team(
                id=agency.id,
                name=agency.name,
                slug=agency.slug,
                primary_color=agency.primary_color,
                secondary_color=agency.secondary_color,
                is_active=agency.is_active,
                created_at=agency.created_at,
                updated_at=agency.updated_at,
            ))
            counts['teams'] += 1
        db.session.flush()

        # Explicit ids do not advance the PostgreSQL sequence
        if counts['teams'] and db.engine.dialect.name == 'postgresql':
            db.session.execute(db.text(
                "SELECT setval(pg_get_serial_sequence('teams', 'id'), (SELECT MAX(id) FROM teams))"
            ))

        existing_pairs = set(db.session.query(TeamMember.team_id, TeamMember.user_id))
        for member in AgencyMember.query.order_by(AgencyMember.id):
            if (member.agency_id, member.user_id) in existing_pairs:
                continue
            db.session.add(TeamMember(
                team_id=member.agency_id,
                user_id=member.user_id,
                role=member.role,
                status=member.status,
                is_default_team=member.is_default_agency,
                joined_at=member.joined_at,
                created_at=member.created_at,
                updated_at=member.updated_at,
            ))
            counts['team_members'] += 1

        existing_tokens = {token for (token,) in db.session.query(TeamInvitation.token)}
        for invitation in AgencyInvitation.query.order_by(AgencyInvitation.id):
            if invitation.token in existing_tokens:
                continue
            db.session.add(TeamInvitation(
                team_id=invitation.agency_id,
                email=invitation.email,
                role=invitation.role,
                token=invitation.token,
                invited_by=invitation.invited_by,
                expires_at=invitation.expires_at,
                accepted_at=invitation.accepted_at,
                created_at=invitation.created_at,
            ))
            counts['team_invitations'] += 1

        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception("[Migrate] Copying agencies to teams failed")
        raise

    logger.info("[Migrate] Copied %(teams)s teams, %(team_members)s members, "
                "%(team_invitations)s invitations", counts)
    return counts

def register_commands(app):
    @app.cli.command('migrate-agencies')
    def migrate_agencies_command():
        """Copy legacy agency rows into the team tables."""
        counts = migrate_agencies_to_teams()
        for table, count in counts.items():
            click.echo(f"{table}: {count} copied")

if __name__ == "__main__":
    from app import app

    with app.app_context():
        migrate_agencies_to_teams()
