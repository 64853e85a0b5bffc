"""Filtering and sorting of person lists for display."""

import unicodedata
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from personas.models.person import Citizen, Foreigner, PersonKind, PersonRecord


class PersonFilter(StrEnum):
    """Filter criteria offered by the UI."""

    ALL = "all"
    CITIZEN = PersonKind.CITIZEN.value
    FOREIGNER = PersonKind.FOREIGNER.value


class SortColumn(StrEnum):
    """Columns the table can be sorted by."""

    ID = "id"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    BIRTH_DATE = "birth_date"
    NATIONAL_ID = "national_id"
    ORIGIN_COUNTRY = "origin_country"


NUMERIC_COLUMNS = frozenset({SortColumn.ID, SortColumn.NATIONAL_ID})


@dataclass
class SortState:
    """Direction the next sort will use; flipped after every sort."""

    ascending: bool = True

    def toggle(self) -> None:
        self.ascending = not self.ascending


def filter_persons(records: Iterable[PersonRecord], criterion: str) -> list[PersonRecord]:
    """Keep only the variant named by ``criterion``.

    Unknown criteria (including ``all``) leave the list unfiltered.
    """
    if criterion == PersonFilter.CITIZEN:
        return [record for record in records if isinstance(record, Citizen)]
    if criterion == PersonFilter.FOREIGNER:
        return [record for record in records if isinstance(record, Foreigner)]
    return list(records)


def column_value(record: PersonRecord, column: SortColumn) -> int | str:
    """Value of ``column`` for ordering; absent variant fields sort as 0 or ""."""
    value = getattr(record, column.value, None)
    if column in NUMERIC_COLUMNS:
        return value or 0
    return value or ""


def collation_key(text: str) -> tuple[str, str]:
    """Ordering key that ignores accents and case except to break ties.

    "Álvaro" sorts next to "alvaro", the same on every host regardless of
    its locale settings.
    """
    folded = text.casefold()
    base = "".join(char for char in unicodedata.normalize("NFKD", folded) if not unicodedata.combining(char))
    return base, folded


def _sort_key(column: SortColumn) -> Callable[[PersonRecord], Any]:
    if column in NUMERIC_COLUMNS:
        return lambda record: column_value(record, column)
    return lambda record: collation_key(str(column_value(record, column)))


def sort_persons(records: Iterable[PersonRecord], column: SortColumn | str, state: SortState) -> list[PersonRecord]:
    """Return ``records`` stably sorted by ``column`` in the state's direction.

    The state is toggled afterwards, so consecutive calls alternate between
    ascending and descending.

    Raises:
        ValueError: If ``column`` is not a sortable column
    """
    column = SortColumn(column)
    result = sorted(records, key=_sort_key(column), reverse=not state.ascending)
    state.toggle()
    return result
