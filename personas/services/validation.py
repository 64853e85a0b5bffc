"""Form validation run before any request is sent."""

import calendar
from datetime import date

from personas.models.form import PersonForm
from personas.models.person import PersonKind

MIN_BIRTH_YEAR = 1900


def validate_birth_date(value: str, today: date | None = None) -> str | None:
    """Validate an AAAAMMDD birth date.

    Args:
        value: Date as typed, eight digits with no separators
        today: Reference date for the upper year bound (defaults to today)

    Returns:
        Error message, or None when the date is valid
    """
    today = today or date.today()
    value = value.strip()

    if value and not (value.isascii() and value.isdigit()):
        return "La fecha de nacimiento debe ser un número."
    if len(value) != 8:
        return "La fecha de nacimiento debe tener exactamente 8 dígitos."

    year = int(value[0:4])
    month = int(value[4:6])
    day = int(value[6:8])

    if year < MIN_BIRTH_YEAR or year > today.year:
        return "El año debe estar entre 1900 y el año actual."

    if month < 1 or month > 12:
        return "El mes debe estar entre 01 y 12."

    days_in_month = calendar.monthrange(year, month)[1]
    if day < 1 or day > days_in_month:
        return f"El día debe estar entre 01 y {days_in_month} para el mes {month}."

    return None


def validate_citizen(form: PersonForm) -> str | None:
    national_id = form.national_id.strip()
    if not (national_id.isascii() and national_id.isdigit()) or int(national_id) <= 0:
        return "El DNI debe ser mayor a 0."
    return None


def validate_foreigner(form: PersonForm) -> str | None:
    if not form.origin_country.strip():
        return "El pais de Origen no puede estar vacio."
    return None


def validate_person(form: PersonForm, today: date | None = None) -> str | None:
    """Check form data in display order and return the first error found."""
    if not form.first_name.strip():
        return "El nombre no puede estar vacío."
    if not form.last_name.strip():
        return "El apellido no puede estar vacío."

    birth_date_error = validate_birth_date(form.birth_date, today)
    if birth_date_error:
        return birth_date_error

    if form.variant_inputs == PersonKind.CITIZEN:
        return validate_citizen(form)
    if form.variant_inputs == PersonKind.FOREIGNER:
        return validate_foreigner(form)
    return "Tipo seleccionado no válido. Por favor, seleccione 'ciudadano' o 'extranjero'."
