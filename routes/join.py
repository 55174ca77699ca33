from datetime import timedelta

from flask import Blueprint, current_app, jsonify, request, session
from services import InvitationStatus, JoinFlow, JoinStep, get_backend
from services.errors import InvitationInvalid, RemoteError, ValidationError
from utils import t

join_bp = Blueprint('join', __name__, url_prefix='/join')

def _payload():
    return request.get_json(silent=True) or request.form

def _load_flow(token):
    """Rebuild the visitor's flow for this token from the session"""
    steps = session.get('join_steps', {})
    flow = JoinFlow(
        token,
        get_backend(),
        step=steps.get(token, JoinStep.LOADING.value),
        default_color=current_app.config['DEFAULT_USER_COLOR'],
        max_pin_attempts=current_app.config['PIN_MAX_ATTEMPTS'],
        pin_lockout=timedelta(minutes=current_app.config['PIN_LOCKOUT_MINUTES']),
    )
    flow.load()
    return flow

def _require_open(flow):
    """Refuse submissions once the invitation was found unusable"""
    if flow.step is JoinStep.COMPLETE:
        return
    if flow.step is JoinStep.INVALID or flow.status is not InvitationStatus.VALID:
        if flow.status is None:
            raise RemoteError('invitation_load_failed')
        raise InvitationInvalid(flow.status)

def _save_flow(flow):
    steps = dict(session.get('join_steps', {}))
    steps[flow.token] = flow.step.value
    session['join_steps'] = steps

def _respond(flow):
    data = flow.to_dict()
    if flow.step is JoinStep.INVALID:
        if flow.status is not None and flow.status.value in InvitationInvalid.MESSAGE_KEYS:
            data['message'] = t(InvitationInvalid.MESSAGE_KEYS[flow.status.value])
        else:
            data['message'] = t(flow.message_key or 'invitation_load_failed')
    elif flow.step is JoinStep.COMPLETE:
        data['message'] = t('join_complete', team=flow.invitation.team.name if flow.invitation and flow.invitation.team else '')
    if flow.is_terminal:
        data['redirect'] = current_app.config['LOGIN_URL']
    return jsonify(data)

@join_bp.route('/<token>', methods=['GET'])
def show(token):
    """Load an invitation and report which step the visitor is on"""
    flow = _load_flow(token)
    _save_flow(flow)
    return _respond(flow)

@join_bp.route('/<token>/mode', methods=['POST'])
def switch_mode(token):
    """Switch between creating an account and signing in"""
    try:
        step = JoinStep(_payload().get('step', ''))
    except ValueError:
        raise ValidationError('error_step_unknown')

    flow = _load_flow(token)
    try:
        _require_open(flow)
        flow.switch_to(step)
    finally:
        _save_flow(flow)
    return _respond(flow)

@join_bp.route('/<token>/account', methods=['POST'])
def create_account(token):
    """Join as a new user"""
    data = _payload()
    flow = _load_flow(token)
    try:
        _require_open(flow)
        flow.create_account(data.get('name'), data.get('pin'), data.get('confirm_pin'))
    finally:
        _save_flow(flow)
    return _respond(flow)

@join_bp.route('/<token>/existing', methods=['POST'])
def sign_in(token):
    """Join as an existing user"""
    data = _payload()
    flow = _load_flow(token)
    try:
        _require_open(flow)
        if flow.step is JoinStep.ACCOUNT:
            flow.switch_to(JoinStep.EXISTING_USER)
        flow.sign_in(data.get('name'), data.get('pin'))
    finally:
        _save_flow(flow)
    return _respond(flow)
