"""Table rows and column visibility for the person list."""

from rich.table import Table

from personas.models.person import Citizen, Foreigner, PersonRecord
from personas.services.listing import PersonFilter, SortColumn

NOT_APPLICABLE = "N/A"

COLUMN_HEADERS: dict[SortColumn, str] = {
    SortColumn.ID: "ID",
    SortColumn.FIRST_NAME: "Nombre",
    SortColumn.LAST_NAME: "Apellido",
    SortColumn.BIRTH_DATE: "Fecha Nacimiento",
    SortColumn.NATIONAL_ID: "DNI",
    SortColumn.ORIGIN_COUNTRY: "País Origen",
}

# Column that makes no sense under each filter
FILTER_LOCKED_COLUMNS: dict[str, SortColumn] = {
    PersonFilter.CITIZEN: SortColumn.ORIGIN_COUNTRY,
    PersonFilter.FOREIGNER: SortColumn.NATIONAL_ID,
}


def build_row(record: PersonRecord) -> dict[SortColumn, str]:
    """Cell text for each column; the other variant's field shows N/A."""
    row = {
        SortColumn.ID: str(record.id) if record.id is not None else "",
        SortColumn.FIRST_NAME: record.first_name,
        SortColumn.LAST_NAME: record.last_name,
        SortColumn.BIRTH_DATE: record.birth_date,
        SortColumn.NATIONAL_ID: NOT_APPLICABLE,
        SortColumn.ORIGIN_COUNTRY: NOT_APPLICABLE,
    }
    if isinstance(record, Citizen):
        row[SortColumn.NATIONAL_ID] = str(record.national_id)
    elif isinstance(record, Foreigner):
        row[SortColumn.ORIGIN_COUNTRY] = record.origin_country
    return row


def build_rows(records: list[PersonRecord]) -> list[dict[SortColumn, str]]:
    return [build_row(record) for record in records]


class ColumnVisibility:
    """Per-column show/hide toggles.

    The active filter can lock a column hidden: the origin country under the
    citizen filter and the DNI under the foreigner filter.
    """

    def __init__(self):
        self.visible: dict[SortColumn, bool] = dict.fromkeys(SortColumn, True)
        self.locked: SortColumn | None = None

    def toggle(self, column: SortColumn | str) -> bool:
        """Flip a column's visibility.

        Returns:
            False if the column is locked by the active filter, True otherwise
        """
        column = SortColumn(column)
        if column == self.locked:
            return False
        self.visible[column] = not self.visible[column]
        return True

    def apply_filter(self, criterion: str) -> None:
        if self.locked is not None:
            self.visible[self.locked] = True
        self.locked = FILTER_LOCKED_COLUMNS.get(criterion)
        if self.locked is not None:
            self.visible[self.locked] = False

    def columns(self) -> list[SortColumn]:
        """Visible columns in display order."""
        return [column for column in SortColumn if self.visible[column]]


def render_table(records: list[PersonRecord], visibility: ColumnVisibility, title: str | None = None) -> Table:
    """Build a rich table of the records restricted to the visible columns."""
    columns = visibility.columns()
    table = Table(title=title, header_style="bold cyan", show_lines=False)
    for column in columns:
        table.add_column(COLUMN_HEADERS[column], justify="right" if column == SortColumn.ID else "left")

    for row in build_rows(records):
        table.add_row(*(row[column] for column in columns))
    return table
