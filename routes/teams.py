from flask import Blueprint, jsonify, request, session
from services import get_backend, login_required
from services import invitations

teams_bp = Blueprint('teams', __name__, url_prefix='/teams')

def _payload():
    return request.get_json(silent=True) or request.form

@teams_bp.route('', methods=['POST'])
@login_required
def create_team():
    """Create a team owned by the signed-in user"""
    data = _payload()
    team = invitations.create_team(
        get_backend(),
        data.get('name'),
        session['user_id'],
        slug=data.get('slug'),
        primary_color=data.get('primary_color'),
    )
    return jsonify({
        'id': team.id,
        'name': team.name,
        'slug': team.slug,
        'primary_color': team.primary_color,
        'is_active': team.is_active,
    }), 201

@teams_bp.route('/<int:team_id>/invitations', methods=['GET'])
@login_required
def list_invitations(team_id):
    backend = get_backend()
    invitations.require_manager(backend, team_id, session['user_id'])
    return jsonify({
        'invitations': [invitations.invitation_to_dict(invitation, status)
                        for invitation, status in invitations.list_invitations(backend, team_id)]
    })

@teams_bp.route('/<int:team_id>/invitations', methods=['POST'])
@login_required
def invite(team_id):
    """Invite someone to the team (owners and admins only)"""
    backend = get_backend()
    invitations.require_manager(backend, team_id, session['user_id'])

    data = _payload()
    invitation = invitations.create_invitation(
        backend,
        team_id,
        data.get('email'),
        role=data.get('role', 'member'),
        invited_by=session['user_id'],
    )
    return jsonify(invitations.invitation_to_dict(invitation)), 201

@teams_bp.route('/<int:team_id>/invitations/<int:invitation_id>/resend', methods=['POST'])
@login_required
def resend(team_id, invitation_id):
    backend = get_backend()
    invitations.require_manager(backend, team_id, session['user_id'])
    invitation = invitations.resend_invitation(backend, team_id, invitation_id)
    return jsonify(invitations.invitation_to_dict(invitation))

@teams_bp.route('/<int:team_id>/invitations/<int:invitation_id>', methods=['DELETE'])
@login_required
def revoke(team_id, invitation_id):
    backend = get_backend()
    invitations.require_manager(backend, team_id, session['user_id'])
    invitations.revoke_invitation(backend, team_id, invitation_id)
    return '', 204
