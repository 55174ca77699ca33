"""
Errors raised by the join flow and invitation management.

Each error carries a stable ``code`` for API clients and a translation key
for the message shown to the user.
"""


class JoinError(Exception):
    code = 'remote_error'
    message_key = 'error_remote'
    status_code = 503

    def __init__(self, message_key=None, **params):
        self.message_key = message_key or self.message_key
        self.params = params
        super().__init__(self.message_key)


class ValidationError(JoinError):
    """Input rejected locally; nothing was sent to the database."""
    code = 'validation_error'
    message_key = 'error_validation'
    status_code = 400


class InvitationInvalid(JoinError):
    """The invitation cannot be accepted; only a new invitation helps."""
    status_code = 410

    MESSAGE_KEYS = {
        'not_found': 'invitation_not_found',
        'already_accepted': 'invitation_already_accepted',
        'expired': 'invitation_expired',
        'team_inactive': 'invitation_team_inactive',
    }

    def __init__(self, status):
        self.code = status.value
        if self.code == 'not_found':
            self.status_code = 404
        super().__init__(self.MESSAGE_KEYS.get(self.code, 'invitation_not_found'))


class NameConflict(JoinError):
    code = 'name_conflict'
    message_key = 'error_name_conflict'
    status_code = 409


class InvalidCredentials(JoinError):
    code = 'invalid_credentials'
    message_key = 'error_invalid_credentials'
    status_code = 401


class InvalidTransition(JoinError):
    code = 'invalid_step'
    message_key = 'error_invalid_step'
    status_code = 409


class FlowBusy(JoinError):
    code = 'busy'
    message_key = 'error_busy'
    status_code = 409


class RemoteError(JoinError):
    """Database failure or a lost acceptance race; the user may retry."""


class InvitationUnavailable(Exception):
    """The conditional accept matched no row: accepted, expired or unknown."""


class PermissionDenied(JoinError):
    code = 'forbidden'
    message_key = 'error_forbidden'
    status_code = 403


class NotFound(JoinError):
    code = 'not_found'
    message_key = 'error_not_found'
    status_code = 404


class Unauthorized(JoinError):
    code = 'unauthorized'
    message_key = 'error_unauthorized'
    status_code = 401
