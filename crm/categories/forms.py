from wtforms.validators import DataRequired, Length, Regexp

from crm.forms import ApiForm, OptionalValue, TextField


class CategoryForm(ApiForm):
    name = TextField('Nombre', validators=[DataRequired(message="Este campo es obligatorio"), Length(max=100)])
    description = TextField('Descripción', validators=[OptionalValue(), Length(max=500)])
    color = TextField('Color', validators=[OptionalValue(), Regexp(r"^#[0-9A-Fa-f]{6}$", message="El color debe tener el formato #RRGGBB.")])
