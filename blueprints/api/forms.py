"""
Request validation forms for the JSON API, using Flask-WTF.
FlaskForm reads JSON request bodies, so each endpoint validates its
payload the same way a form post would be validated.
"""

from flask_wtf import FlaskForm
from wtforms import IntegerField, SelectField, StringField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional

from models.resource import VALID_CATEGORIES, VALID_STATUSES
from models.reservation import VALID_PRIORITIES

REQUIRED = 'Campo obrigatório'

PRIORITY_CHOICES = [(p, p) for p in VALID_PRIORITIES]


class AvailabilityForm(FlaskForm):
    """Availability check for one resource."""

    resource_id = IntegerField('Recurso', validators=[InputRequired(message=REQUIRED)])
    start_date = StringField('Início', validators=[DataRequired(message=REQUIRED)])
    end_date = StringField('Término', validators=[DataRequired(message=REQUIRED)])
    exclude_reservation_id = IntegerField('Ignorar reserva', validators=[Optional()])


class ReservationForm(FlaskForm):
    """Single-resource reservation request."""

    resource_id = IntegerField('Recurso', validators=[InputRequired(message=REQUIRED)])
    start_date = StringField('Início', validators=[DataRequired(message=REQUIRED)])
    end_date = StringField('Término', validators=[DataRequired(message=REQUIRED)])
    purpose = StringField('Finalidade', validators=[
        DataRequired(message=REQUIRED),
        Length(max=500)
    ])
    description = StringField('Descrição', validators=[Optional(), Length(max=2000)])
    priority = SelectField('Prioridade', choices=PRIORITY_CHOICES, default='normal')
    attendees = IntegerField('Participantes', validators=[Optional(), NumberRange(min=1)])
    requirements = StringField('Requisitos', validators=[Optional(), Length(max=2000)])


class PackageReservationForm(FlaskForm):
    """Package reservation request; the package comes from the URL."""

    start_date = StringField('Início', validators=[DataRequired(message=REQUIRED)])
    end_date = StringField('Término', validators=[DataRequired(message=REQUIRED)])
    purpose = StringField('Finalidade', validators=[
        DataRequired(message=REQUIRED),
        Length(max=500)
    ])
    description = StringField('Descrição', validators=[Optional(), Length(max=2000)])
    priority = SelectField('Prioridade', choices=PRIORITY_CHOICES, default='normal')


class StatusForm(FlaskForm):
    """Review decision; the lifecycle decides which targets are valid."""

    status = StringField('Status', validators=[DataRequired(message=REQUIRED)])
    comments = StringField('Comentários', validators=[Optional(), Length(max=2000)])


class ResourceForm(FlaskForm):
    """Resource create/update; specifications are read from the raw JSON body."""

    name = StringField('Nome', validators=[DataRequired(message=REQUIRED), Length(max=200)])
    category = SelectField('Categoria', choices=[(c, c) for c in VALID_CATEGORIES])
    status = SelectField('Status', choices=[(s, s) for s in VALID_STATUSES], default='available')
    quantity = IntegerField('Quantidade', default=1, validators=[
        NumberRange(min=0, message='A quantidade não pode ser negativa')
    ])
    description = StringField('Descrição', validators=[Optional(), Length(max=2000)])
    location = StringField('Localização', validators=[Optional(), Length(max=200)])
    image = StringField('Imagem', validators=[Optional(), Length(max=500)])


class PackageForm(FlaskForm):
    """Package create; resource_ids are read from the raw JSON body."""

    name = StringField('Nome', validators=[DataRequired(message=REQUIRED), Length(max=200)])
    description = StringField('Descrição', validators=[Optional(), Length(max=2000)])
    subject = StringField('Disciplina', validators=[Optional(), Length(max=200)])


class BookingSettingsForm(FlaskForm):
    """Booking policy settings (0 disables a rule)."""

    max_reservation_days = IntegerField('Antecedência máxima (dias)', validators=[
        Optional(), NumberRange(min=0)
    ])
    max_concurrent_reservations = IntegerField('Reservas simultâneas', validators=[
        Optional(), NumberRange(min=0)
    ])
