"""In-memory store mirroring the remote person collection."""

from personas.models.person import PersonRecord
from personas.utils.logging import get_logger

logger = get_logger(__name__)


class PersonStore:
    """Ordered list of records, the client-side cache of the remote collection.

    Replaced wholesale on load, appended to on create, replaced by index on
    update and filtered on delete. Records are matched by ``id``.
    """

    def __init__(self, records: list[PersonRecord] | None = None):
        self._records: list[PersonRecord] = []
        if records:
            self.replace_all(records)

    def __len__(self) -> int:
        return len(self._records)

    def all(self) -> list[PersonRecord]:
        """Return a copy of the records in store order."""
        return list(self._records)

    def get(self, person_id: int) -> PersonRecord | None:
        for record in self._records:
            if record.id == person_id:
                return record
        return None

    def replace_all(self, records: list[PersonRecord]) -> None:
        """Replace the whole collection, e.g. after a fresh load.

        Later records repeating an id already seen are dropped.
        """
        seen: set[int] = set()
        kept: list[PersonRecord] = []
        for record in records:
            if record.id is not None:
                if record.id in seen:
                    logger.warning(f"Dropping duplicate person id {record.id}")
                    continue
                seen.add(record.id)
            kept.append(record)
        self._records = kept
        logger.debug(f"Store replaced with {len(self._records)} records")

    def add(self, record: PersonRecord) -> None:
        """Append a record the server has acknowledged."""
        if record.id is not None and self.get(record.id) is not None:
            raise ValueError(f"Person {record.id} is already in the store")
        self._records.append(record)

    def update(self, record: PersonRecord) -> bool:
        """Replace the record with the same id.

        Returns:
            True if a record was replaced, False if the id is unknown
        """
        for index, existing in enumerate(self._records):
            if existing.id == record.id:
                self._records[index] = record
                return True
        logger.warning(f"Update for unknown person id {record.id} ignored")
        return False

    def remove(self, person_id: int) -> bool:
        """Drop the record with the given id.

        Returns:
            True if a record was removed, False if the id is unknown
        """
        before = len(self._records)
        self._records = [record for record in self._records if record.id != person_id]
        return len(self._records) < before
