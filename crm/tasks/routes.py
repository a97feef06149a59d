from flask import jsonify, request
from flask_login import login_required, current_user
import logging

from crm import get_storage
from crm.exceptions import NotFoundError
from crm.forms import validate_json
from crm.tasks import tasks_bp
from crm.tasks.forms import TaskForm

logger = logging.getLogger(__name__)


@tasks_bp.route('', methods=['GET'])
@login_required
def list_tasks():
    storage = get_storage()
    client = request.args.get('client')
    status = request.args.get('status')

    if request.args.get('pending') == 'true':
        tasks = storage.get_pending_tasks()
    elif client:
        tasks = storage.get_tasks_by_client(client)
    elif status:
        tasks = storage.get_tasks_by_status(status)
    else:
        tasks = storage.get_tasks()
    return jsonify(tasks)


@tasks_bp.route('/<string:task_id>', methods=['GET'])
@login_required
def get_task(task_id):
    task = get_storage().get_task(task_id)
    if task is None:
        raise NotFoundError("Tarea no encontrada")
    return jsonify(task)


@tasks_bp.route('', methods=['POST'])
@login_required
def create_task():
    data = validate_json(TaskForm, "Datos de tarea inválidos")
    task = get_storage().create_task(data)
    logger.info(f"Usuario {current_user.username} creó la tarea {task['id']}.")
    return jsonify(task), 201


@tasks_bp.route('/<string:task_id>', methods=['PUT'])
@login_required
def update_task(task_id):
    data = validate_json(TaskForm, "Datos de tarea inválidos", partial=True)
    task = get_storage().update_task(task_id, data)
    if task is None:
        raise NotFoundError("Tarea no encontrada")
    return jsonify(task)


@tasks_bp.route('/<string:task_id>', methods=['DELETE'])
@login_required
def delete_task(task_id):
    if not get_storage().delete_task(task_id):
        raise NotFoundError("Tarea no encontrada")
    logger.info(f"Usuario {current_user.username} eliminó la tarea {task_id}.")
    return '', 204
