# crm/ranking.py

from datetime import datetime, timezone

from crm.models import TaskPriority, TaskStatus
from crm.utils import as_utc

# Las tareas sin fecha de vencimiento van al final dentro de su prioridad.
_NO_DUE_DATE = datetime.max.replace(tzinfo=timezone.utc)


def _priority_rank(task):
    try:
        return TaskPriority(task.get("priority")).rank
    except ValueError:
        return 0


def _pending_sort_key(task):
    due_date = task.get("dueDate")
    return (-_priority_rank(task), as_utc(due_date) if due_date else _NO_DUE_DATE)


def rank_pending_tasks(tasks):
    """
    Filtra las tareas pendientes y las ordena por prioridad (urgente > alta >
    media > baja) y, a igual prioridad, por fecha de vencimiento ascendente.
    sorted() es estable: a igualdad de clave se conserva el orden de entrada.
    """
    pending = [task for task in tasks if task.get("status") == TaskStatus.PENDIENTE.value]
    return sorted(pending, key=_pending_sort_key)
