class BaseAppException(Exception):
    """Clase base para excepciones personalizadas de la aplicación."""
    status_code = 500
    message = "Error interno del servidor."

    def __init__(self, message=None, original_exception=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.original_exception = original_exception

    def to_dict(self):
        return {"message": self.message}


class ValidationError(BaseAppException):
    """Datos de entrada incompletos o mal formados. Lleva los errores por campo."""
    status_code = 400
    message = "Datos inválidos."

    def __init__(self, message=None, errors=None, original_exception=None):
        super().__init__(message, original_exception)
        self.errors = errors or {}

    def to_dict(self):
        return {"message": self.message, "errors": self.errors}


class NotFoundError(BaseAppException):
    """El identificador no corresponde a ningún registro."""
    status_code = 404
    message = "Recurso no encontrado."


class AuthenticationError(BaseAppException):
    """No hay una sesión válida."""
    status_code = 401
    message = "Usuario no autenticado."


class DatabaseQueryError(BaseAppException):
    """Excepción para errores ocurridos durante una consulta a la base de datos."""
    message = "Error al ejecutar la consulta en la base de datos."
