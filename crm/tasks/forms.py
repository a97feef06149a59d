from wtforms.validators import DataRequired, Email, Length

from crm.forms import ApiForm, IsoDateTimeField, OptionalValue, TextField, one_of
from crm.models import TaskPriority, TaskStatus


class TaskForm(ApiForm):
    title = TextField('Título de la tarea', validators=[DataRequired(message="Este campo es obligatorio"), Length(max=200)])
    description = TextField('Descripción de la tarea', validators=[OptionalValue(), Length(max=2000)])
    clientId = TextField('Cliente', validators=[OptionalValue()])
    assignedTo = TextField('Asignada a', validators=[OptionalValue(), Email(message="Correo electrónico inválido.")])
    priority = TextField('Prioridad', validators=[OptionalValue(), one_of(TaskPriority)])
    status = TextField('Estado', validators=[OptionalValue(), one_of(TaskStatus)])
    dueDate = IsoDateTimeField('Fecha de vencimiento', validators=[OptionalValue()])
