# crm/utils.py

from datetime import datetime, timezone
from bson.objectid import ObjectId
from bson.errors import InvalidId

from crm.models import PipelineStatus


def utcnow():
    return datetime.now(timezone.utc)


def as_utc(value):
    """PyMongo devuelve fechas naive en UTC; las normalizamos a aware."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value):
    """
    Interpreta una fecha ISO 8601 como la que envía el navegador
    ('2025-03-01T10:00:00.000Z'). Devuelve None si no es válida.
    Una fecha sin zona horaria se considera UTC.
    """
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    return as_utc(parsed)


def to_object_id(value):
    """Convierte un id en texto a ObjectId. Un id mal formado equivale a 'no encontrado'."""
    if value is None:
        return None
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def document_to_dict(document):
    """Convierte un documento de MongoDB en el diccionario que expone la API."""
    if document is None:
        return None
    data = dict(document)
    _id = data.pop("_id", None)
    data["id"] = str(_id) if isinstance(_id, ObjectId) else _id
    for key, value in data.items():
        if isinstance(value, datetime):
            data[key] = as_utc(value)
    return data


def _status_label(value):
    try:
        return PipelineStatus(value).label
    except ValueError:
        return value


def describe_status_change(previous_status, new_status):
    """Frase legible que acompaña a cada entrada del historial de estados."""
    if previous_status is None:
        return f"Estado inicial establecido: {_status_label(new_status)}"
    return f"Estado cambiado de {_status_label(previous_status)} a {_status_label(new_status)}"
