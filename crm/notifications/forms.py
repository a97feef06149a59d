from wtforms.validators import DataRequired, Length

from crm.forms import ApiForm, TextField


class MotivationalPhraseForm(ApiForm):
    phrase = TextField('Frase motivacional', validators=[DataRequired(message="La frase es obligatoria"), Length(max=280)])
