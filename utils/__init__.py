from .helpers import utcnow, as_naive_utc, normalize_email, is_valid_email, slugify
from .i18n import get_language, t

__all__ = ['utcnow', 'as_naive_utc', 'normalize_email', 'is_valid_email', 'slugify', 'get_language', 't']
