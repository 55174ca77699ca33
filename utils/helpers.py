import re
from datetime import datetime, timezone

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

def utcnow():
    """Naive UTC timestamp, matching what the models store"""
    return datetime.utcnow()

def as_naive_utc(value):
    """Coerce a datetime or ISO-8601 string to a naive UTC datetime"""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

def normalize_email(email):
    """Trim and lower-case an email address"""
    return (email or '').strip().lower()

def is_valid_email(email):
    return bool(EMAIL_PATTERN.match(email or ''))

def slugify(name):
    """Build a URL slug from a team name"""
    # Collapse anything that is not a letter or digit into single dashes
    slug = re.sub(r'[^a-z0-9]+', '-', (name or '').strip().lower())
    return slug.strip('-')
