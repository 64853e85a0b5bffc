"""ABM (alta/baja/modificación) controller tying store, gateway, form and table together."""

import asyncio
from collections.abc import Callable
from datetime import date
from enum import StrEnum
from typing import Any, Protocol

from personas.models.errors import ValidationError
from personas.models.form import FormMode, PersonForm
from personas.models.person import PersonRecord
from personas.services.gateway import PersonGateway
from personas.services.listing import PersonFilter, SortColumn, SortState, filter_persons, sort_persons
from personas.services.store import PersonStore
from personas.services.validation import validate_person
from personas.ui.table import ColumnVisibility
from personas.utils.logging import get_logger

logger = get_logger(__name__)

CREATED_MESSAGE = "Agregado correctamente."
UPDATED_MESSAGE = "Datos actualizados correctamente."
DELETED_MESSAGE = "Elemento eliminado correctamente."
MISSING_PERSON_MESSAGE = "La persona seleccionada ya no existe. Recargue la lista."
DUPLICATE_ID_MESSAGE = "El servidor devolvió un ID que ya está en la lista. Recargue la lista."


class ControllerState(StrEnum):
    IDLE = "idle"
    FORM_OPEN = "form_open"
    SUBMITTING = "submitting"


class PersonView(Protocol):
    """Presentation surface driven by the controller."""

    def render_table(self, records: list[PersonRecord], columns: ColumnVisibility) -> None: ...

    def show_form(self, form: PersonForm) -> None: ...

    def hide_form(self) -> None: ...


class ABMController:
    """Single-instance controller for the person list and its ABM form.

    State moves ``idle -> form_open -> submitting`` and back to ``idle`` on
    success or to ``form_open`` on failure. Only one form can be open and
    store mutations are serialized behind one lock.
    """

    def __init__(
        self,
        gateway: PersonGateway,
        view: PersonView,
        store: PersonStore | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.gateway = gateway
        self.notifier = gateway.notifier
        self.view = view
        self.store = store or PersonStore()
        self.today = today

        self.state = ControllerState.IDLE
        self.form: PersonForm | None = None
        self.active_filter: str = PersonFilter.ALL
        self.sort_state = SortState()
        self.columns = ColumnVisibility()
        self.displayed: list[PersonRecord] = []
        self._lock = asyncio.Lock()

    async def load(self) -> bool:
        """Replace the store with the server's collection and re-render."""
        async with self._lock:
            result = await self.gateway.load()
            if not result.ok:
                return False
            self.store.replace_all(result.value or [])
        logger.info(f"Loaded {len(self.store)} persons")
        self.refresh()
        return True

    def refresh(self, records: list[PersonRecord] | None = None) -> None:
        """Render ``records``, or the store under the active filter."""
        if records is None:
            records = filter_persons(self.store.all(), self.active_filter)
        self.displayed = records
        self.view.render_table(self.displayed, self.columns)

    def set_filter(self, criterion: str) -> None:
        self.active_filter = criterion
        self.columns.apply_filter(criterion)
        self.refresh()

    def sort(self, column: SortColumn | str) -> None:
        """Show the filtered store sorted by ``column``; direction alternates per call."""
        visible = filter_persons(self.store.all(), self.active_filter)
        self.refresh(sort_persons(visible, column, self.sort_state))

    def toggle_column(self, column: SortColumn | str) -> bool:
        changed = self.columns.toggle(column)
        if changed:
            self.view.render_table(self.displayed, self.columns)
        return changed

    def open_form(self, mode: FormMode, record: PersonRecord | None = None) -> PersonForm:
        """Open the form configured for ``mode``.

        Update and delete need the selected record to pre-fill the form.
        """
        if self.state == ControllerState.SUBMITTING:
            raise RuntimeError("Cannot open a form while a request is in progress")
        if mode == FormMode.CREATE:
            form = PersonForm.empty(mode)
        elif record is None:
            raise ValueError(f"A record is required to open the {mode} form")
        else:
            form = PersonForm.from_record(mode, record)

        self.form = form
        self.state = ControllerState.FORM_OPEN
        self.view.show_form(form)
        return form

    def close_form(self) -> None:
        if self.state == ControllerState.SUBMITTING:
            raise RuntimeError("Cannot close the form while a request is in progress")
        self.form = None
        self.state = ControllerState.IDLE
        self.view.hide_form()

    async def confirm(self, edited: PersonForm | None = None) -> bool:
        """Commit the open form: create, update or delete depending on its mode.

        Args:
            edited: Field values entered by the user; defaults to the open form

        Returns:
            True if the action succeeded and the form was closed
        """
        if self.state != ControllerState.FORM_OPEN or self.form is None:
            raise RuntimeError("There is no open form to confirm")

        form = self._apply_locks(edited or self.form)
        self.form = form

        if form.mode != FormMode.DELETE:
            message = validate_person(form, self.today())
            if message:
                error = ValidationError(message)
                logger.info(f"Form rejected: {error}")
                self.notifier.error(error.user_message)
                return False

        self.state = ControllerState.SUBMITTING
        try:
            async with self._lock:
                ok = await self._dispatch(form)
        finally:
            self.state = ControllerState.FORM_OPEN

        if ok:
            self.refresh()
            self.close_form()
        return ok

    def _apply_locks(self, edited: PersonForm) -> PersonForm:
        """Keep the fields the current mode does not allow editing."""
        opened = self.form
        if opened is None:
            return edited
        if opened.fields_disabled:
            return opened
        update: dict[str, Any] = {"mode": opened.mode}
        if opened.id_visible:
            update["id"] = opened.id
        if opened.kind_locked:
            update["kind"] = opened.kind
        return edited.model_copy(update=update)

    async def _dispatch(self, form: PersonForm) -> bool:
        if form.mode == FormMode.CREATE:
            return await self._create(form)
        if form.mode == FormMode.UPDATE:
            return await self._update(form)
        return await self._delete(form)

    async def _create(self, form: PersonForm) -> bool:
        result = await self.gateway.create(form.to_record())
        if not result.ok or result.value is None:
            return False
        try:
            self.store.add(result.value)
        except ValueError as e:
            logger.error(f"Server assigned an id already in use: {e}")
            self.notifier.error(DUPLICATE_ID_MESSAGE)
            return False
        self.notifier.info(CREATED_MESSAGE)
        return True

    async def _update(self, form: PersonForm) -> bool:
        record = form.to_record()
        if record.id is None or self.store.get(record.id) is None:
            self.notifier.error(MISSING_PERSON_MESSAGE)
            return False

        result = await self.gateway.update(record)
        if not result.ok:
            return False
        self.store.update(record)
        self.notifier.info(result.value or UPDATED_MESSAGE)
        return True

    async def _delete(self, form: PersonForm) -> bool:
        if form.id is None:
            self.notifier.error(MISSING_PERSON_MESSAGE)
            return False

        result = await self.gateway.delete(form.id)
        if not result.ok:
            return False
        self.store.remove(form.id)
        self.notifier.info(DELETED_MESSAGE)
        return True
