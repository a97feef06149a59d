from pymongo import ASCENDING, DESCENDING, ReturnDocument

from crm.models import TaskStatus
from crm.utils import document_to_dict, to_object_id

NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]

# -----------------------------------------------
# INTERFACES DE REPOSITORIO
# -----------------------------------------------


class CategoryRepository:
    """Define el contrato para operaciones de datos de categorías."""
    def get_all(self):
        raise NotImplementedError

    def find_by_id(self, category_id):
        raise NotImplementedError

    def add(self, category):
        raise NotImplementedError

    def update(self, category_id, changes):
        raise NotImplementedError

    def delete(self, category_id):
        raise NotImplementedError


class ClientRepository:
    """Define el contrato para operaciones de datos de clientes."""
    def get_all(self):
        raise NotImplementedError

    def find_by_id(self, client_id):
        raise NotImplementedError

    def find_by_status(self, status):
        raise NotImplementedError

    def find_by_category(self, category_id):
        raise NotImplementedError

    def get_status(self, client_id):
        raise NotImplementedError

    def count(self):
        raise NotImplementedError

    def count_by_status(self):
        raise NotImplementedError

    def add(self, client):
        raise NotImplementedError

    def update(self, client_id, changes):
        raise NotImplementedError

    def delete(self, client_id):
        raise NotImplementedError


class TaskRepository:
    """Define el contrato para operaciones de datos de tareas."""
    def get_all(self):
        raise NotImplementedError

    def find_by_id(self, task_id):
        raise NotImplementedError

    def find_by_client(self, client_id):
        raise NotImplementedError

    def find_by_status(self, status):
        raise NotImplementedError

    def find_by_assignee(self, email):
        raise NotImplementedError

    def count_by_status(self, status):
        raise NotImplementedError

    def count_pending_by_assignee(self, email):
        raise NotImplementedError

    def add(self, task):
        raise NotImplementedError

    def update(self, task_id, changes):
        raise NotImplementedError

    def delete(self, task_id):
        raise NotImplementedError


class StatusHistoryRepository:
    """Define el contrato para el historial de estados de clientes (solo se añaden filas)."""
    def find_by_client_id(self, client_id):
        raise NotImplementedError

    def add(self, entry):
        raise NotImplementedError

    def delete_by_client_id(self, client_id):
        raise NotImplementedError


class UserRepository:
    """Define el contrato para operaciones de datos de usuario."""
    def find_by_id(self, user_id):
        raise NotImplementedError

    def find_by_username(self, username):
        raise NotImplementedError

    def find_by_email(self, email):
        raise NotImplementedError

    def find_by_username_or_email(self, username_or_email):
        raise NotImplementedError

    def add(self, user):
        raise NotImplementedError


class MotivationalPhraseRepository:
    """Define el contrato para la frase motivacional de cada usuario."""
    def find_by_email(self, email):
        raise NotImplementedError

    def upsert(self, email, phrase, updated_at):
        raise NotImplementedError

# -----------------------------------------------
# IMPLEMENTACIONES MONGODB
# -----------------------------------------------


class MongoCollectionRepository:
    """Operaciones comunes sobre una colección cuyos _id son ObjectId."""
    collection_name = None

    def __init__(self, db):
        self.db = db
        self.collection = db[self.collection_name]

    def _find(self, query):
        return [document_to_dict(doc) for doc in self.collection.find(query).sort(NEWEST_FIRST)]

    def find_by_id(self, entity_id):
        oid = to_object_id(entity_id)
        if oid is None:
            return None
        return document_to_dict(self.collection.find_one({"_id": oid}))

    def add(self, document):
        document = dict(document)
        result = self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        return document_to_dict(document)

    def update(self, entity_id, changes):
        oid = to_object_id(entity_id)
        if oid is None:
            return None
        if not changes:
            return self.find_by_id(oid)
        updated = self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        return document_to_dict(updated)

    def delete(self, entity_id):
        oid = to_object_id(entity_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count == 1


class MongoCategoryRepository(MongoCollectionRepository, CategoryRepository):
    collection_name = "categories"

    def get_all(self):
        return [document_to_dict(doc) for doc in self.collection.find().sort([("createdAt", ASCENDING), ("_id", ASCENDING)])]


class MongoClientRepository(MongoCollectionRepository, ClientRepository):
    collection_name = "clients"

    def get_all(self):
        return self._find({})

    def find_by_status(self, status):
        return self._find({"status": status})

    def find_by_category(self, category_id):
        return self._find({"categoryId": category_id})

    def get_status(self, client_id):
        oid = to_object_id(client_id)
        if oid is None:
            return None
        document = self.collection.find_one({"_id": oid}, {"status": 1})
        return document.get("status") if document else None

    def count(self):
        return self.collection.count_documents({})

    def count_by_status(self):
        counts = {}
        for row in self.collection.aggregate([{"$group": {"_id": "$status", "count": {"$sum": 1}}}]):
            counts[row["_id"]] = row["count"]
        return counts


class MongoTaskRepository(MongoCollectionRepository, TaskRepository):
    collection_name = "tasks"

    def get_all(self):
        return self._find({})

    def find_by_client(self, client_id):
        return self._find({"clientId": client_id})

    def find_by_status(self, status):
        return self._find({"status": status})

    def find_by_assignee(self, email):
        return self._find({"assignedTo": email})

    def count_by_status(self, status):
        return self.collection.count_documents({"status": status})

    def count_pending_by_assignee(self, email):
        return self.collection.count_documents(
            {"assignedTo": email, "status": TaskStatus.PENDIENTE.value}
        )


class MongoStatusHistoryRepository(MongoCollectionRepository, StatusHistoryRepository):
    collection_name = "client_status_history"

    def find_by_client_id(self, client_id):
        cursor = self.collection.find({"clientId": client_id}).sort(
            [("changedAt", DESCENDING), ("_id", DESCENDING)]
        )
        return [document_to_dict(doc) for doc in cursor]

    def delete_by_client_id(self, client_id):
        return self.collection.delete_many({"clientId": client_id}).deleted_count


class MongoUserRepository(UserRepository):
    """Los usuarios tienen id entero secuencial, obtenido de la colección 'counters'."""

    def __init__(self, db):
        self.db = db
        self.collection = db.users

    def _next_id(self):
        counter = self.db.counters.find_one_and_update(
            {"_id": "users"},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return counter["seq"]

    def find_by_id(self, user_id):
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            return None
        return document_to_dict(self.collection.find_one({"_id": user_id}))

    def find_by_username(self, username):
        return document_to_dict(self.collection.find_one({"username": username}))

    def find_by_email(self, email):
        return document_to_dict(self.collection.find_one({"email": email}))

    def find_by_username_or_email(self, username_or_email):
        return document_to_dict(self.collection.find_one(
            {"$or": [{"username": username_or_email}, {"email": username_or_email}]}
        ))

    def add(self, user):
        document = dict(user)
        document["_id"] = self._next_id()
        self.collection.insert_one(document)
        return document_to_dict(document)


class MongoMotivationalPhraseRepository(MotivationalPhraseRepository):

    def __init__(self, db):
        self.db = db
        self.collection = db.motivational_phrases

    def find_by_email(self, email):
        return _phrase_to_dict(self.collection.find_one({"userEmail": email}))

    def upsert(self, email, phrase, updated_at):
        document = self.collection.find_one_and_update(
            {"userEmail": email},
            {"$set": {"phrase": phrase, "updatedAt": updated_at}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return _phrase_to_dict(document)


def _phrase_to_dict(document):
    data = document_to_dict(document)
    if data is not None:
        data.pop("id", None)
    return data


def ensure_indexes(db):
    """Índices únicos que respaldan las invariantes de usuarios y frases."""
    db.users.create_index("username", unique=True)
    db.users.create_index("email", unique=True)
    db.motivational_phrases.create_index("userEmail", unique=True)
    db.clients.create_index([("createdAt", DESCENDING)])
    db.tasks.create_index("assignedTo")
    db.client_status_history.create_index("clientId")
