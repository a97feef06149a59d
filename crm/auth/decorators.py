# crm/auth/decorators.py

from functools import wraps
from flask_login import current_user, login_required

from crm.exceptions import AuthenticationError


def session_user_required(f):
    """
    Exige una sesión válida con un usuario que tenga email. Las notificaciones y
    la frase motivacional se indexan por ese email.

    Uso:
    @session_user_required
    def vista():
        ...
    """
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if not getattr(current_user, "email", None):
            raise AuthenticationError()
        return f(*args, **kwargs)

    return decorated_function
