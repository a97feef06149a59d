# crm/models.py
#
# Con PyMongo no se usan clases de modelo como con un ORM: los registros viajan
# como diccionarios. Aquí viven los tipos cerrados (estados, prioridades,
# canales) y los valores por defecto que comparten el almacenamiento y la API.

import enum

from crm.exceptions import ValidationError

DEFAULT_CATEGORY_COLOR = "#3B82F6"


class PipelineStatus(str, enum.Enum):
    """Etapas del pipeline de ventas de un cliente."""
    NUEVO = "nuevo"
    PRESUPUESTO_ENVIADO = "presupuesto-enviado"
    PRESUPUESTO_PAGADO = "presupuesto-pagado"
    EN_TAREAS = "en-tareas"
    TERMINADO = "terminado"

    @property
    def label(self):
        return PIPELINE_STATUS_LABELS[self]


PIPELINE_STATUS_LABELS = {
    PipelineStatus.NUEVO: "Nuevo",
    PipelineStatus.PRESUPUESTO_ENVIADO: "Presupuesto Enviado",
    PipelineStatus.PRESUPUESTO_PAGADO: "Presupuesto Pagado",
    PipelineStatus.EN_TAREAS: "En Tareas",
    PipelineStatus.TERMINADO: "Terminado",
}


class TaskPriority(str, enum.Enum):
    BAJA = "baja"
    MEDIA = "media"
    ALTA = "alta"
    URGENTE = "urgente"

    @property
    def rank(self):
        return PRIORITY_RANK[self]


PRIORITY_RANK = {
    TaskPriority.URGENTE: 4,
    TaskPriority.ALTA: 3,
    TaskPriority.MEDIA: 2,
    TaskPriority.BAJA: 1,
}


class TaskStatus(str, enum.Enum):
    PENDIENTE = "pendiente"
    EN_PROGRESO = "en-progreso"
    COMPLETADA = "completada"
    CANCELADA = "cancelada"


class ContactChannel(str, enum.Enum):
    """Canal por el que llegó el cliente."""
    WHATSAPP = "whatsapp"
    EMAIL = "email"
    TELEFONO = "telefono"
    PRESENCIAL = "presencial"


def enum_values(enum_cls):
    return [member.value for member in enum_cls]


def coerce_enum(enum_cls, value, field_name):
    """
    Devuelve el valor canónico (str) del miembro o lanza ValidationError.
    Es la última barrera antes de la base de datos: ningún valor fuera del
    conjunto cerrado llega a persistirse.
    """
    try:
        return enum_cls(value).value
    except ValueError:
        raise ValidationError(
            f"Valor inválido para '{field_name}'.",
            errors={field_name: [f"Debe ser uno de: {', '.join(enum_values(enum_cls))}."]},
        )
