class UserDirectory:
    """Resuelve el nombre visible de un usuario a partir de su email."""
    def display_name(self, email):
        raise NotImplementedError


class StaticUserDirectory(UserDirectory):
    """
    Directorio basado en una tabla fija email -> nombre (config USER_DIRECTORY).
    Si el email no está en la tabla, se devuelve el propio email.
    """

    def __init__(self, names=None):
        self.names = {email.lower(): name for email, name in (names or {}).items()}

    def display_name(self, email):
        if not email:
            return None
        return self.names.get(email.lower(), email)
