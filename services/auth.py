from functools import wraps
from flask import session
from .errors import Unauthorized

def login_required(f):
    """Decorator to require a signed-in user"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'user_id' not in session:
            raise Unauthorized()
        return f(*args, **kwargs)
    return decorated_function
