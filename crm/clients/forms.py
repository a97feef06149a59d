from wtforms.validators import DataRequired, Email, Length

from crm.forms import ApiForm, OptionalValue, TextField, one_of
from crm.models import ContactChannel, PipelineStatus


class ClientForm(ApiForm):
    name = TextField('Nombre', validators=[DataRequired(message="Este campo es obligatorio"), Length(max=200)])
    company = TextField('Empresa', validators=[OptionalValue(), Length(max=200)])
    email = TextField('Correo Electrónico', validators=[DataRequired(message="Este campo es obligatorio"), Email(message="Correo electrónico inválido.")])
    phone = TextField('Teléfono', validators=[DataRequired(message="Este campo es obligatorio"), Length(max=50)])
    whatsapp = TextField('WhatsApp', validators=[OptionalValue(), Length(max=50)])
    channel = TextField('Canal', validators=[OptionalValue(), one_of(ContactChannel)])
    categoryId = TextField('Categoría', validators=[OptionalValue()])
    status = TextField('Estado', validators=[OptionalValue(), one_of(PipelineStatus)])
    notes = TextField('Notas', validators=[OptionalValue(), Length(max=2000)])


class StatusHistoryForm(ApiForm):
    newStatus = TextField('Nuevo estado', validators=[DataRequired(message="Este campo es obligatorio"), one_of(PipelineStatus)])
    previousStatus = TextField('Estado anterior', validators=[OptionalValue(), one_of(PipelineStatus)])
    notes = TextField('Notas', validators=[OptionalValue(), Length(max=500)])
