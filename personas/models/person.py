"""Person record models: citizens and foreigners."""

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from personas.utils.logging import get_logger

logger = get_logger(__name__)


class PersonKind(StrEnum):
    """Record variant tag."""

    CITIZEN = "citizen"
    FOREIGNER = "foreigner"


class Person(BaseModel):
    """Fields shared by every person record.

    Attribute names are Python-side; the API uses the Spanish aliases.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int | None = None
    first_name: str = Field(alias="nombre")
    last_name: str = Field(alias="apellido")
    birth_date: str = Field(alias="fechaNacimiento")

    @field_validator("birth_date", mode="before")
    @classmethod
    def coerce_birth_date(cls, v: Any) -> Any:
        """Accept birth dates sent as numbers (19900101)."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class Citizen(Person):
    """Person identified by a national id (DNI)."""

    kind: Literal[PersonKind.CITIZEN] = Field(default=PersonKind.CITIZEN, exclude=True)
    national_id: int = Field(alias="dni")


class Foreigner(Person):
    """Person identified by country of origin."""

    kind: Literal[PersonKind.FOREIGNER] = Field(default=PersonKind.FOREIGNER, exclude=True)
    origin_country: str = Field(alias="paisOrigen")


PersonRecord = Citizen | Foreigner

_VARIANTS: dict[PersonKind, type[Citizen] | type[Foreigner]] = {
    PersonKind.CITIZEN: Citizen,
    PersonKind.FOREIGNER: Foreigner,
}


def build_person(kind: PersonKind | str, **fields: Any) -> PersonRecord:
    """Construct a record of the given variant.

    Raises:
        ValueError: If ``kind`` is not a known variant
        pydantic.ValidationError: If the fields do not fit the variant
    """
    try:
        variant = _VARIANTS[PersonKind(kind)]
    except ValueError as e:
        raise ValueError(f"Unknown person kind: {kind!r}") from e
    return variant(**fields)


def to_api(record: PersonRecord, include_id: bool = True) -> dict[str, Any]:
    """Serialize a record to the API's JSON mapping.

    Base fields are merged with the variant field; ``kind`` is never sent.
    """
    exclude = None if include_id else {"id"}
    return record.model_dump(by_alias=True, exclude=exclude)


def from_api(item: Any) -> PersonRecord | None:
    """Decode one API item into a record.

    The API carries no type tag, so the variant is inferred:

    1. ``paisOrigen`` present and not null -> Foreigner (wins if ``dni`` is
       also present)
    2. ``dni`` present and not null -> Citizen
    3. otherwise the item is not a person record and ``None`` is returned.

    Items whose fields fail validation are logged and skipped.
    """
    if not isinstance(item, dict):
        logger.warning(f"Skipping non-object item in person list: {item!r}")
        return None

    if item.get("paisOrigen") is not None:
        variant: type[Citizen] | type[Foreigner] = Foreigner
    elif item.get("dni") is not None:
        variant = Citizen
    else:
        return None

    try:
        return variant.model_validate(item)
    except PydanticValidationError as e:
        logger.warning(f"Skipping malformed {variant.__name__} item {item.get('id')!r}: {e}")
        return None


def describe(record: PersonRecord) -> str:
    """Return a one-line, human-readable description of the record."""
    base = (
        f"ID: {record.id}, Nombre: {record.first_name}, Apellido: {record.last_name}, "
        f"Fecha de nacimiento: {record.birth_date}"
    )
    if isinstance(record, Citizen):
        return f"{base}, DNI: {record.national_id}"
    return f"{base}, País de Origen: {record.origin_country}"
