"""
Join-by-invitation flow.

A ``JoinFlow`` walks one invitation token through the steps a visitor
sees on the join page::

    loading -> invalid | account
    account <-> existing_user
    account -> complete
    existing_user -> complete

``invalid`` and ``complete`` are terminal. New visitors create an account
from a display name and a four-digit PIN; returning users sign in with
theirs. Either way the invitation is accepted by the backend, whose
conditional update is what actually guarantees single acceptance.
"""
import logging
from contextlib import contextmanager
from datetime import timedelta
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from utils.helpers import utcnow, as_naive_utc
from .credentials import is_valid_pin, hash_pin, verify_pin, UnknownHashFormat
from .errors import (
    FlowBusy, InvalidCredentials, InvalidTransition, InvitationUnavailable,
    NameConflict, RemoteError, ValidationError,
)
from .validator import InvitationStatus, classify_invitation

logger = logging.getLogger(__name__)

DEFAULT_USER_COLOR = '#1e3a5f'
MAX_PIN_ATTEMPTS = 5
PIN_LOCKOUT = timedelta(minutes=15)


class JoinStep(Enum):
    LOADING = 'loading'
    INVALID = 'invalid'
    ACCOUNT = 'account'
    EXISTING_USER = 'existing_user'
    COMPLETE = 'complete'


TRANSITIONS = {
    JoinStep.LOADING: {JoinStep.INVALID, JoinStep.ACCOUNT},
    JoinStep.ACCOUNT: {JoinStep.EXISTING_USER, JoinStep.COMPLETE},
    JoinStep.EXISTING_USER: {JoinStep.ACCOUNT, JoinStep.COMPLETE},
    JoinStep.INVALID: set(),
    JoinStep.COMPLETE: set(),
}

# Steps the visitor may switch between by hand
USER_SELECTABLE = {JoinStep.ACCOUNT, JoinStep.EXISTING_USER}


class JoinFlow:
    """State of one visitor's attempt to join a team through a token."""

    def __init__(self, token, backend, step=JoinStep.LOADING, clock=utcnow,
                 default_color=DEFAULT_USER_COLOR, max_pin_attempts=MAX_PIN_ATTEMPTS,
                 pin_lockout=PIN_LOCKOUT):
        self.token = token
        self.backend = backend
        self.step = JoinStep(step)
        self.clock = clock
        self.default_color = default_color
        self.max_pin_attempts = max_pin_attempts
        self.pin_lockout = pin_lockout

        self.invitation = None
        self.status = None
        self.message_key = None
        self.prefill_name = None
        self.busy = False

        self.user_id = None
        self.team_id = None
        self.role = None

    @property
    def is_terminal(self):
        return not TRANSITIONS[self.step]

    def load(self):
        """
        Fetch and classify the invitation.

        From ``loading`` this moves to ``account`` or ``invalid``. A flow
        restored at ``invalid`` is classified again from scratch, since a
        failed load or an expired invitation that was resent can recover.
        A flow restored at ``account`` or ``existing_user`` moves to
        ``invalid`` once its invitation is no longer acceptable.
        """
        if self.step is JoinStep.INVALID:
            self.step = JoinStep.LOADING
            self.message_key = None

        try:
            record = self.backend.fetch_invitation(self.token)
        except SQLAlchemyError:
            logger.exception("[Join] Failed to load invitation")
            if self.step is JoinStep.LOADING:
                self.message_key = 'invitation_load_failed'
                self._transition(JoinStep.INVALID)
                return self.status
            raise RemoteError()

        self.invitation = record
        self.status = classify_invitation(record, self.clock())

        if self.step is JoinStep.LOADING:
            if self.status is InvitationStatus.VALID:
                self._transition(JoinStep.ACCOUNT)
            else:
                logger.info("[Join] Invitation rejected: %s", self.status.value)
                self._transition(JoinStep.INVALID)
        elif self.step in USER_SELECTABLE and self.status is not InvitationStatus.VALID:
            # Refresh only; visitors cannot pick this move themselves
            logger.info("[Join] Invitation no longer usable: %s", self.status.value)
            self.step = JoinStep.INVALID
        return self.status

    def switch_to(self, step):
        """Toggle between creating an account and signing in"""
        step = JoinStep(step)
        if step not in USER_SELECTABLE:
            raise InvalidTransition()
        if step is not self.step:
            self._transition(step)

    def create_account(self, name, pin, confirm_pin):
        """Create a new identity from name and PIN and accept the invitation"""
        with self._submitting(JoinStep.ACCOUNT):
            name = (name or '').strip()
            if not name:
                raise ValidationError('error_name_required')
            if not is_valid_pin(pin):
                raise ValidationError('error_pin_format')
            if pin != confirm_pin:
                raise ValidationError('error_pin_mismatch')

            invitation = self._require_invitation()

            try:
                existing = self.backend.find_user_by_name(name)
            except SQLAlchemyError:
                logger.exception("[Join] User lookup failed")
                raise RemoteError()

            if existing is not None:
                self.prefill_name = name
                self._transition(JoinStep.EXISTING_USER)
                raise NameConflict()

            pin_hash, pin_hash_format = hash_pin(pin)
            team_color = invitation.team.primary_color if invitation.team else None

            try:
                user, team_id, role = self.backend.create_user_and_accept(
                    self.token,
                    self.clock(),
                    name=name,
                    email=invitation.email or None,
                    pin_hash=pin_hash,
                    pin_hash_format=pin_hash_format,
                    color=team_color or self.default_color,
                    global_role='user',
                )
            except InvitationUnavailable:
                logger.warning("[Join] Invitation %s could not be accepted", invitation.id)
                raise RemoteError('error_invitation_unavailable')
            except SQLAlchemyError:
                logger.exception("[Join] Failed to create account")
                raise RemoteError()

            logger.info("[Join] Created user %s from invitation %s", user.id, invitation.id)
            self._complete(user.id, team_id, role)

    def sign_in(self, name, pin):
        """Accept the invitation as an existing identity"""
        with self._submitting(JoinStep.EXISTING_USER):
            name = (name or '').strip()
            if not name:
                raise ValidationError('error_name_required')
            if not is_valid_pin(pin):
                raise ValidationError('error_pin_required')

            invitation = self._require_invitation()

            # Unknown names and wrong PINs get the same answer
            try:
                user = self.backend.find_user_by_name(name)
            except SQLAlchemyError:
                logger.exception("[Join] User lookup failed")
                raise InvalidCredentials()
            if user is None:
                raise InvalidCredentials()

            now = self.clock()
            if user.locked_until is not None and as_naive_utc(user.locked_until) > now:
                logger.warning("[Join] Sign-in refused for locked user %s", user.id)
                raise InvalidCredentials()

            try:
                valid, needs_upgrade = verify_pin(pin, user.pin_hash, user.pin_hash_format)
            except UnknownHashFormat:
                logger.error("[Join] User %s has an unknown PIN hash format", user.id)
                valid, needs_upgrade = False, False
            if not valid:
                self._record_failed_pin(user, now)
                raise InvalidCredentials()

            try:
                if needs_upgrade:
                    new_hash, new_format = hash_pin(pin)
                    self.backend.update_user_login(user, now, new_hash, new_format)
                else:
                    self.backend.update_user_login(user, now)
                team_id, role = self.backend.accept_invitation(self.token, user.id, now)
            except InvitationUnavailable:
                logger.warning("[Join] Invitation %s could not be accepted", invitation.id)
                raise RemoteError('error_invitation_unavailable')
            except SQLAlchemyError:
                logger.exception("[Join] Failed to accept invitation")
                raise RemoteError()

            if needs_upgrade:
                logger.info("[Join] Upgraded PIN hash for user %s", user.id)
            self._complete(user.id, team_id, role)

    def to_dict(self):
        data = {
            'step': self.step.value,
            'status': self.status.value if self.status else None,
        }
        if self.prefill_name:
            data['prefill_name'] = self.prefill_name
        if self.invitation is not None and self.status is InvitationStatus.VALID:
            data['invitation'] = {
                'email': self.invitation.email,
                'role': self.invitation.role,
                'expires_at': self.invitation.expires_at.isoformat(),
                'team': {
                    'name': self.invitation.team.name,
                    'slug': self.invitation.team.slug,
                    'primary_color': self.invitation.team.primary_color,
                },
            }
        if self.step is JoinStep.COMPLETE:
            data['user_id'] = self.user_id
            data['team_id'] = self.team_id
            data['role'] = self.role
        return data

    def _require_invitation(self):
        if self.invitation is None:
            self.load()
        if self.invitation is None:
            raise RemoteError('error_invitation_unavailable')
        return self.invitation

    def _record_failed_pin(self, user, now):
        try:
            locked_until = self.backend.record_failed_pin(
                user, now, self.max_pin_attempts, self.pin_lockout
            )
        except SQLAlchemyError:
            logger.exception("[Join] Failed to record PIN attempt for user %s", user.id)
            return
        if locked_until is not None:
            logger.warning("[Join] User %s locked until %s after %s failed PINs",
                           user.id, locked_until, self.max_pin_attempts)

    def _complete(self, user_id, team_id, role):
        self.user_id = user_id
        self.team_id = team_id
        self.role = role
        self._transition(JoinStep.COMPLETE)

    def _transition(self, step):
        if step not in TRANSITIONS[self.step]:
            raise InvalidTransition()
        logger.debug("[Join] %s -> %s", self.step.value, step.value)
        self.step = step

    @contextmanager
    def _submitting(self, expected_step):
        if self.busy:
            raise FlowBusy()
        if self.step is not expected_step:
            raise InvalidTransition()
        self.busy = True
        try:
            yield
        finally:
            self.busy = False
