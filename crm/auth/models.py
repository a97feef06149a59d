from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin


class User(UserMixin):
    """Usuario del CRM. Se construye a partir del diccionario que devuelve el repositorio."""

    def __init__(self, username, email, password="", id=None, password_hash=None, createdAt=None, **kwargs):
        self.username = username
        self.email = email
        self.id = id
        self.createdAt = createdAt

        if password_hash:
            self.password_hash = password_hash
        elif password:
            self.set_password(password)
        else:
            self.password_hash = None

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if self.password_hash:
            return check_password_hash(self.password_hash, password)
        return False

    # Flask-Login requiere que get_id devuelva un string.
    def get_id(self):
        return str(self.id) if self.id is not None else None

    def to_dict(self):
        """Representación pública: nunca incluye el hash de la contraseña."""
        return {"id": self.id, "username": self.username, "email": self.email}

    def __repr__(self):
        return f"<User {self.username} ({self.email})>"
