"""ABM form state models."""

from enum import StrEnum

from pydantic import BaseModel

from personas.models.person import Citizen, Foreigner, PersonKind, PersonRecord, build_person


class FormMode(StrEnum):
    """Which ABM action the form is configured for."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


FORM_TITLES: dict[FormMode, str] = {
    FormMode.CREATE: "Alta",
    FormMode.UPDATE: "Modificación",
    FormMode.DELETE: "Eliminacion",
}


class PersonForm(BaseModel):
    """Raw form field values plus the field visibility/enablement flags.

    Field values are kept as the user typed them; ``validate_person`` decides
    whether they can become a record.
    """

    mode: FormMode
    id: int | None = None
    first_name: str = ""
    last_name: str = ""
    birth_date: str = ""
    national_id: str = ""
    origin_country: str = ""
    kind: str = ""

    @property
    def title(self) -> str:
        return FORM_TITLES[self.mode]

    @property
    def id_visible(self) -> bool:
        """The id field is hidden while creating; the server assigns it."""
        return self.mode != FormMode.CREATE

    @property
    def kind_locked(self) -> bool:
        """A record cannot change variant once it exists."""
        return self.mode != FormMode.CREATE

    @property
    def fields_disabled(self) -> bool:
        return self.mode == FormMode.DELETE

    @property
    def variant_inputs(self) -> PersonKind | None:
        """Variant-specific input group to show for the selected kind."""
        try:
            return PersonKind(self.kind)
        except ValueError:
            return None

    @property
    def national_id_value(self) -> int:
        """National id as an integer, 0 when it is not a whole number."""
        try:
            return int(self.national_id.strip())
        except ValueError:
            return 0

    @classmethod
    def empty(cls, mode: FormMode = FormMode.CREATE) -> "PersonForm":
        return cls(mode=mode)

    @classmethod
    def from_record(cls, mode: FormMode, record: PersonRecord) -> "PersonForm":
        """Pre-fill a form from an existing record."""
        form = cls(
            mode=mode,
            id=record.id,
            first_name=record.first_name,
            last_name=record.last_name,
            birth_date=record.birth_date,
            kind=record.kind,
        )
        if isinstance(record, Citizen):
            form.national_id = str(record.national_id)
        elif isinstance(record, Foreigner):
            form.origin_country = record.origin_country
        return form

    def to_record(self) -> PersonRecord:
        """Build the record the form describes. Call only after validation."""
        fields = {
            "id": self.id if self.mode != FormMode.CREATE else None,
            "first_name": self.first_name.strip(),
            "last_name": self.last_name.strip(),
            "birth_date": self.birth_date.strip(),
        }
        if self.variant_inputs == PersonKind.CITIZEN:
            fields["national_id"] = self.national_id_value
        else:
            fields["origin_country"] = self.origin_country.strip()
        return build_person(self.kind, **fields)
