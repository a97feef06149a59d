# crm/storage.py

import logging
from datetime import datetime
from pymongo.errors import DuplicateKeyError, PyMongoError

from crm.auth.models import User
from crm.directory import StaticUserDirectory
from crm.exceptions import ValidationError
from crm.models import (
    DEFAULT_CATEGORY_COLOR, ContactChannel, PipelineStatus, TaskPriority,
    TaskStatus, coerce_enum,
)
from crm.ranking import rank_pending_tasks
from crm.repositories import (
    MongoCategoryRepository, MongoClientRepository, MongoMotivationalPhraseRepository,
    MongoStatusHistoryRepository, MongoTaskRepository, MongoUserRepository,
)
from crm.utils import describe_status_change, parse_datetime, utcnow

logger = logging.getLogger(__name__)

DEFAULT_MOTIVATIONAL_PHRASE = "¡Vamos por un día productivo! 💪"

CATEGORY_FIELDS = ("name", "description", "color")
CLIENT_FIELDS = ("name", "company", "email", "phone", "whatsapp", "channel", "categoryId", "status", "notes")
TASK_FIELDS = ("title", "description", "clientId", "assignedTo", "priority", "status", "dueDate")

REQUIRED_FIELDS = {
    "category": ("name",),
    "client": ("name", "email", "phone"),
    "task": ("title",),
}


def _clean(value):
    """Un texto vacío equivale a borrar el valor."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _pick(data, fields):
    return {key: _clean(data[key]) for key in fields if key in data}


def _normalize_email(email):
    """Los emails se guardan y se comparan en minúsculas."""
    return email.strip().lower() if isinstance(email, str) else email


def _coerce_due_date(value):
    if isinstance(value, datetime):
        return value
    parsed = parse_datetime(value) if isinstance(value, str) else None
    if parsed is None:
        raise ValidationError(
            "Fecha de vencimiento inválida.",
            errors={"dueDate": ["Formato de fecha y hora inválido."]},
        )
    return parsed


def _check_required(entity, data, partial=False):
    errors = {}
    for field in REQUIRED_FIELDS[entity]:
        if partial and field not in data:
            continue
        if data.get(field) is None:
            errors[field] = ["Este campo es obligatorio"]
    if errors:
        raise ValidationError("Faltan campos obligatorios.", errors=errors)


class CrmStorage:
    """
    Capa de acceso a datos del CRM.

    Agrupa los repositorios de cada entidad y añade lo que no es CRUD puro:
    el enriquecimiento de lecturas (categoría del cliente, cliente y nombre del
    asignado de una tarea), el historial de cambios de estado, la ordenación de
    tareas pendientes y las notificaciones por usuario.

    Las lecturas por id devuelven None cuando no hay registro; los borrados
    devuelven si se eliminó algo. Solo los datos inválidos lanzan excepción.
    """

    def __init__(self, categories, clients, tasks, history, users, phrases,
                 directory=None, default_phrase=DEFAULT_MOTIVATIONAL_PHRASE):
        self.categories = categories
        self.clients = clients
        self.tasks = tasks
        self.history = history
        self.users = users
        self.phrases = phrases
        self.directory = directory or StaticUserDirectory()
        self.default_phrase = default_phrase

    @classmethod
    def from_database(cls, db, directory=None, default_phrase=DEFAULT_MOTIVATIONAL_PHRASE):
        return cls(
            categories=MongoCategoryRepository(db),
            clients=MongoClientRepository(db),
            tasks=MongoTaskRepository(db),
            history=MongoStatusHistoryRepository(db),
            users=MongoUserRepository(db),
            phrases=MongoMotivationalPhraseRepository(db),
            directory=directory,
            default_phrase=default_phrase,
        )

    # --- Categorías ---

    def get_categories(self):
        return self.categories.get_all()

    def get_category(self, category_id):
        return self.categories.find_by_id(category_id)

    def create_category(self, data):
        category = _pick(data, CATEGORY_FIELDS)
        _check_required("category", category)
        category.setdefault("description", None)
        category["color"] = category.get("color") or DEFAULT_CATEGORY_COLOR
        category["createdAt"] = utcnow()
        created = self.categories.add(category)
        logger.info(f"Categoría '{created['name']}' creada con id {created['id']}.")
        return created

    def update_category(self, category_id, data):
        changes = _pick(data, CATEGORY_FIELDS)
        _check_required("category", changes, partial=True)
        if "color" in changes and changes["color"] is None:
            changes["color"] = DEFAULT_CATEGORY_COLOR
        return self.categories.update(category_id, changes)

    def delete_category(self, category_id):
        deleted = self.categories.delete(category_id)
        if deleted:
            logger.info(f"Categoría {category_id} eliminada.")
        return deleted

    # --- Clientes ---

    def _categories_by_id(self):
        return {category["id"]: category for category in self.categories.get_all()}

    @staticmethod
    def _with_category(client, categories_by_id):
        enriched = dict(client)
        category = categories_by_id.get(client.get("categoryId"))
        if category is not None:
            enriched["category"] = category
        return enriched

    def _enrich_clients(self, clients):
        categories_by_id = self._categories_by_id()
        return [self._with_category(client, categories_by_id) for client in clients]

    def get_clients(self):
        return self._enrich_clients(self.clients.get_all())

    def get_client(self, client_id):
        client = self.clients.find_by_id(client_id)
        if client is None:
            return None
        category_id = client.get("categoryId")
        category = self.categories.find_by_id(category_id) if category_id else None
        return self._with_category(client, {category_id: category} if category else {})

    def get_clients_by_status(self, status):
        status = coerce_enum(PipelineStatus, status, "status")
        return self._enrich_clients(self.clients.find_by_status(status))

    def get_clients_by_category(self, category_id):
        return self._enrich_clients(self.clients.find_by_category(category_id))

    def _client_changes(self, data, partial):
        changes = _pick(data, CLIENT_FIELDS)
        _check_required("client", changes, partial=partial)
        if not partial:
            changes["status"] = changes.get("status") or PipelineStatus.NUEVO.value
        if "status" in changes:
            changes["status"] = coerce_enum(PipelineStatus, changes["status"], "status")
        if changes.get("channel") is not None:
            changes["channel"] = coerce_enum(ContactChannel, changes["channel"], "channel")
        return changes

    def create_client(self, data):
        client = self._client_changes(data, partial=False)
        for field in CLIENT_FIELDS:
            client.setdefault(field, None)
        client["createdAt"] = client["updatedAt"] = utcnow()
        created = self.clients.add(client)
        logger.info(f"Cliente '{created['name']}' creado con id {created['id']}.")
        return created

    def update_client(self, client_id, data):
        """
        Actualización parcial. Si el payload trae 'status', el estado anterior
        se lee ANTES de escribir y, si cambia, se añade una fila al historial.
        Lectura y escritura son dos operaciones separadas: dos actualizaciones
        concurrentes pueden registrar el mismo estado anterior.
        """
        changes = self._client_changes(data, partial=True)
        status_in_payload = "status" in changes
        previous_status = self.clients.get_status(client_id) if status_in_payload else None

        changes["updatedAt"] = utcnow()
        updated = self.clients.update(client_id, changes)
        if updated is None:
            return None

        if status_in_payload and updated["status"] != previous_status:
            self._record_status_change(updated["id"], previous_status, updated["status"])
        return updated

    def _record_status_change(self, client_id, previous_status, new_status):
        # El historial es best-effort: un fallo aquí no deshace la actualización del cliente.
        try:
            entry = self.history.add({
                "clientId": client_id,
                "previousStatus": previous_status,
                "newStatus": new_status,
                "notes": describe_status_change(previous_status, new_status),
                "changedAt": utcnow(),
            })
            logger.info(f"Cliente {client_id}: {entry['notes']}.")
            return entry
        except PyMongoError as e:
            logger.error(f"Error al registrar historial de estado para el cliente {client_id}: {e}", exc_info=True)
            return None

    def delete_client(self, client_id):
        deleted = self.clients.delete(client_id)
        if deleted:
            removed = self.history.delete_by_client_id(str(client_id))
            logger.info(f"Cliente {client_id} eliminado junto con {removed} entradas de historial.")
        return deleted

    # --- Historial de estados ---

    def get_client_status_history(self, client_id):
        if self.clients.find_by_id(client_id) is None:
            return None
        return self.history.find_by_client_id(str(client_id))

    def create_status_history_entry(self, client_id, data):
        if self.clients.find_by_id(client_id) is None:
            return None
        errors = {}
        if _clean(data.get("newStatus")) is None:
            errors["newStatus"] = ["Este campo es obligatorio"]
        if errors:
            raise ValidationError("Faltan campos obligatorios.", errors=errors)

        new_status = coerce_enum(PipelineStatus, data["newStatus"], "newStatus")
        previous_status = _clean(data.get("previousStatus"))
        if previous_status is not None:
            previous_status = coerce_enum(PipelineStatus, previous_status, "previousStatus")
        return self.history.add({
            "clientId": str(client_id),
            "previousStatus": previous_status,
            "newStatus": new_status,
            "notes": _clean(data.get("notes")) or describe_status_change(previous_status, new_status),
            "changedAt": utcnow(),
        })

    # --- Tareas ---

    def _with_client(self, task, clients_by_id):
        enriched = dict(task)
        client = clients_by_id.get(task.get("clientId"))
        if client is not None:
            enriched["client"] = client
        if task.get("assignedTo"):
            enriched["assignedUserName"] = self.directory.display_name(task["assignedTo"])
        return enriched

    def _enrich_tasks(self, tasks):
        clients_by_id = {client["id"]: client for client in self.get_clients()}
        return [self._with_client(task, clients_by_id) for task in tasks]

    def get_tasks(self):
        return self._enrich_tasks(self.tasks.get_all())

    def get_task(self, task_id):
        task = self.tasks.find_by_id(task_id)
        if task is None:
            return None
        client_id = task.get("clientId")
        client = self.get_client(client_id) if client_id else None
        return self._with_client(task, {client_id: client} if client else {})

    def get_tasks_by_client(self, client_id):
        return self._enrich_tasks(self.tasks.find_by_client(client_id))

    def get_tasks_by_status(self, status):
        status = coerce_enum(TaskStatus, status, "status")
        return self._enrich_tasks(self.tasks.find_by_status(status))

    def get_pending_tasks(self):
        return rank_pending_tasks(self.get_tasks_by_status(TaskStatus.PENDIENTE.value))

    def _task_changes(self, data, partial):
        changes = _pick(data, TASK_FIELDS)
        _check_required("task", changes, partial=partial)
        if not partial:
            changes["priority"] = changes.get("priority") or TaskPriority.MEDIA.value
            changes["status"] = changes.get("status") or TaskStatus.PENDIENTE.value
        if "priority" in changes:
            changes["priority"] = coerce_enum(TaskPriority, changes["priority"], "priority")
        if "status" in changes:
            changes["status"] = coerce_enum(TaskStatus, changes["status"], "status")
        if changes.get("dueDate") is not None:
            changes["dueDate"] = _coerce_due_date(changes["dueDate"])
        if changes.get("assignedTo") is not None:
            changes["assignedTo"] = _normalize_email(changes["assignedTo"])
        return changes

    def create_task(self, data):
        task = self._task_changes(data, partial=False)
        for field in TASK_FIELDS:
            task.setdefault(field, None)
        task["createdAt"] = task["updatedAt"] = utcnow()
        created = self.tasks.add(task)
        logger.info(f"Tarea '{created['title']}' creada con id {created['id']}.")
        return created

    def update_task(self, task_id, data):
        changes = self._task_changes(data, partial=True)
        changes["updatedAt"] = utcnow()
        return self.tasks.update(task_id, changes)

    def delete_task(self, task_id):
        deleted = self.tasks.delete(task_id)
        if deleted:
            logger.info(f"Tarea {task_id} eliminada.")
        return deleted

    # --- Notificaciones y frase motivacional ---

    def get_tasks_by_assigned_user(self, email):
        return self._enrich_tasks(self.tasks.find_by_assignee(_normalize_email(email)))

    def get_pending_tasks_for_user(self, email):
        return rank_pending_tasks(self.get_tasks_by_assigned_user(email))

    def get_pending_tasks_count(self, email):
        return self.tasks.count_pending_by_assignee(_normalize_email(email))

    def get_motivational_phrase(self, email):
        """Frase guardada del usuario o la frase por defecto (la lectura nunca escribe)."""
        stored = self.phrases.find_by_email(email)
        if stored is None:
            return self.default_phrase
        return stored["phrase"]

    def update_motivational_phrase(self, email, phrase):
        if not isinstance(phrase, str) or not phrase.strip():
            raise ValidationError(
                "La frase es obligatoria.",
                errors={"phrase": ["La frase debe ser un texto no vacío."]},
            )
        return self.phrases.upsert(email, phrase, utcnow())

    # --- Estadísticas ---

    def get_stats(self):
        by_status = self.clients.count_by_status()
        return {
            "totalClients": self.clients.count(),
            "pendingTasks": self.tasks.count_by_status(TaskStatus.PENDIENTE.value),
            "pipelineStats": {status.value: by_status.get(status.value, 0) for status in PipelineStatus},
        }

    # --- Usuarios ---

    def get_user(self, user_id):
        data = self.users.find_by_id(user_id)
        return User(**data) if data else None

    def find_user_for_login(self, username_or_email):
        data = self.users.find_by_username_or_email(username_or_email)
        return User(**data) if data else None

    def create_user(self, username, email, password):
        email = _normalize_email(email)
        errors = {}
        if self.users.find_by_username(username):
            errors["username"] = ["Por favor, elige un nombre de usuario diferente."]
        if self.users.find_by_email(email):
            errors["email"] = ["Este correo electrónico ya está registrado."]
        if errors:
            raise ValidationError("No se pudo registrar el usuario.", errors=errors)

        user = User(username=username, email=email, password=password)
        try:
            data = self.users.add({
                "username": user.username,
                "email": user.email,
                "password_hash": user.password_hash,
                "createdAt": utcnow(),
            })
        except DuplicateKeyError as e:
            raise ValidationError(
                "No se pudo registrar el usuario.",
                errors={"username": ["El usuario o el correo ya existen."]},
                original_exception=e,
            )
        logger.info(f"Usuario '{username}' registrado con id {data['id']}.")
        return User(**data)
