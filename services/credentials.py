"""
PIN credentials.

Stored hashes carry an explicit format tag next to them. Verification is
dispatched on that tag; the hash string itself is never sniffed.
"""
import hashlib
import hmac
import re
from werkzeug.security import generate_password_hash, check_password_hash

PIN_PATTERN = re.compile(r'^[0-9]{4}$')

FORMAT_LEGACY = 'sha256'
FORMAT_SALTED_SHA256 = 'salted_sha256'
FORMAT_WERKZEUG = 'werkzeug'
CURRENT_FORMAT = FORMAT_WERKZEUG


class UnknownHashFormat(ValueError):
    pass


def is_valid_pin(pin):
    """PINs are exactly four ASCII digits"""
    return isinstance(pin, str) and bool(PIN_PATTERN.match(pin))


def hash_pin(pin):
    """Hash a PIN with the current salted scheme, returning (hash, format)"""
    return generate_password_hash(pin), CURRENT_FORMAT


def _verify_legacy(pin, stored_hash):
    digest = hashlib.sha256(pin.encode('utf-8')).hexdigest()
    return hmac.compare_digest(digest, stored_hash)


def _verify_salted_sha256(pin, stored_hash):
    salt, sep, expected = stored_hash.partition(':')
    if not sep:
        return False
    digest = hashlib.sha256(f'{salt}:{pin}'.encode('utf-8')).hexdigest()
    return hmac.compare_digest(digest, expected)


def _verify_werkzeug(pin, stored_hash):
    return check_password_hash(stored_hash, pin)


VERIFIERS = {
    FORMAT_LEGACY: _verify_legacy,
    FORMAT_SALTED_SHA256: _verify_salted_sha256,
    FORMAT_WERKZEUG: _verify_werkzeug,
}


def verify_pin(pin, stored_hash, hash_format):
    """
    Check a PIN against a stored hash.

    Returns a ``(valid, needs_upgrade)`` tuple. ``needs_upgrade`` is only
    set when the PIN matched a hash stored in an older format, so the
    caller can rewrite it with ``hash_pin``.
    """
    try:
        verifier = VERIFIERS[hash_format]
    except KeyError:
        raise UnknownHashFormat(hash_format)

    if not stored_hash:
        return False, False

    valid = verifier(pin, stored_hash)
    return valid, valid and hash_format != CURRENT_FORMAT
