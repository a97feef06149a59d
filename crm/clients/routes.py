from flask import jsonify, request
from flask_login import login_required, current_user
import logging

from crm import get_storage
from crm.clients import clients_bp
from crm.clients.forms import ClientForm, StatusHistoryForm
from crm.exceptions import NotFoundError
from crm.forms import validate_json

logger = logging.getLogger(__name__)


@clients_bp.route('', methods=['GET'])
@login_required
def list_clients():
    storage = get_storage()
    status = request.args.get('status')
    category = request.args.get('category')

    if status:
        clients = storage.get_clients_by_status(status)
    elif category:
        clients = storage.get_clients_by_category(category)
    else:
        clients = storage.get_clients()
    return jsonify(clients)


@clients_bp.route('/<string:client_id>', methods=['GET'])
@login_required
def get_client(client_id):
    client = get_storage().get_client(client_id)
    if client is None:
        raise NotFoundError("Cliente no encontrado")
    return jsonify(client)


@clients_bp.route('', methods=['POST'])
@login_required
def create_client():
    data = validate_json(ClientForm, "Datos de cliente inválidos")
    client = get_storage().create_client(data)
    logger.info(f"Usuario {current_user.username} creó el cliente {client['id']}.")
    return jsonify(client), 201


@clients_bp.route('/<string:client_id>', methods=['PUT'])
@login_required
def update_client(client_id):
    data = validate_json(ClientForm, "Datos de cliente inválidos", partial=True)
    client = get_storage().update_client(client_id, data)
    if client is None:
        raise NotFoundError("Cliente no encontrado")
    return jsonify(client)


@clients_bp.route('/<string:client_id>', methods=['DELETE'])
@login_required
def delete_client(client_id):
    if not get_storage().delete_client(client_id):
        raise NotFoundError("Cliente no encontrado")
    logger.info(f"Usuario {current_user.username} eliminó el cliente {client_id}.")
    return '', 204


@clients_bp.route('/<string:client_id>/history', methods=['GET'])
@login_required
def client_status_history(client_id):
    history = get_storage().get_client_status_history(client_id)
    if history is None:
        raise NotFoundError("Cliente no encontrado")
    return jsonify(history)


@clients_bp.route('/<string:client_id>/history', methods=['POST'])
@login_required
def create_status_history_entry(client_id):
    data = validate_json(StatusHistoryForm, "Datos de historial de estado inválidos")
    entry = get_storage().create_status_history_entry(client_id, data)
    if entry is None:
        raise NotFoundError("Cliente no encontrado")
    return jsonify(entry), 201
