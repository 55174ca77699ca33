from .auth import login_required
from .backends import get_backend, select_backend, InvitationRecord, TeamInfo
from .join import JoinFlow, JoinStep
from .validator import InvitationStatus, classify_invitation

__all__ = [
    'login_required', 'get_backend', 'select_backend', 'InvitationRecord', 'TeamInfo',
    'JoinFlow', 'JoinStep', 'InvitationStatus', 'classify_invitation',
]
