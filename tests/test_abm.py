"""Tests for the ABM controller workflow."""

from datetime import date

import pytest
import pytest_asyncio

from personas.models.form import FormMode
from personas.models.person import Citizen, Foreigner
from personas.services.abm import (
    CREATED_MESSAGE,
    DELETED_MESSAGE,
    MISSING_PERSON_MESSAGE,
    ABMController,
    ControllerState,
)
from personas.services.gateway import DELETE_FAILED_MESSAGE, PersonGateway
from personas.services.listing import PersonFilter, SortColumn
from personas.ui.table import NOT_APPLICABLE, build_row
from tests.fakes import FakePersonsApi, make_client


@pytest.fixture
def api(api_data):
    return FakePersonsApi(api_data)


@pytest.fixture
def controller(api, busy, notifier, view):
    gateway = PersonGateway(make_client(api), busy, notifier)
    return ABMController(gateway, view, today=lambda: date(2024, 6, 15))


@pytest_asyncio.fixture
async def loaded(controller):
    await controller.load()
    return controller


class TestLoad:
    """Tests for loading the list."""

    @pytest.mark.asyncio
    async def test_single_citizen_scenario(self, busy, notifier, view):
        """Test that a one-citizen response fills the store and shows N/A for the country."""
        api = FakePersonsApi(
            [{"id": 1, "nombre": "Ana", "apellido": "Diaz", "fechaNacimiento": "19900101", "dni": 123}]
        )
        controller = ABMController(PersonGateway(make_client(api), busy, notifier), view)

        assert await controller.load()

        records = controller.store.all()
        assert len(records) == 1
        assert isinstance(records[0], Citizen)
        assert records[0].national_id == 123
        assert view.tables[-1] == records
        assert build_row(records[0])[SortColumn.ORIGIN_COUNTRY] == NOT_APPLICABLE

    @pytest.mark.asyncio
    async def test_failed_load_keeps_store(self, loaded, api, notifier):
        """Test that a failed reload leaves the current store alone."""
        api.fail_with["GET"] = 404

        assert not await loaded.load()
        assert len(loaded.store) == 3
        assert notifier.errors


class TestListing:
    """Tests for filter, sort and column toggles."""

    @pytest.mark.asyncio
    async def test_filter_renders_subset(self, loaded, view):
        """Test that the filter restricts the rendered rows."""
        loaded.set_filter(PersonFilter.FOREIGNER)

        assert [record.id for record in view.tables[-1]] == [2]
        assert loaded.columns.locked == SortColumn.NATIONAL_ID

    @pytest.mark.asyncio
    async def test_sort_respects_filter_and_alternates(self, loaded, view):
        """Test that sorting works on the filtered list and flips direction."""
        loaded.set_filter(PersonFilter.CITIZEN)
        loaded.sort(SortColumn.ID)
        assert [record.id for record in view.tables[-1]] == [1, 3]
        loaded.sort(SortColumn.ID)
        assert [record.id for record in view.tables[-1]] == [3, 1]

    @pytest.mark.asyncio
    async def test_toggle_locked_column(self, loaded):
        """Test that a column locked by the filter cannot be shown."""
        loaded.set_filter(PersonFilter.CITIZEN)

        assert not loaded.toggle_column(SortColumn.ORIGIN_COUNTRY)
        assert loaded.toggle_column(SortColumn.BIRTH_DATE)
        assert SortColumn.BIRTH_DATE not in loaded.columns.columns()


class TestCreate:
    """Tests for the create flow."""

    @pytest.mark.asyncio
    async def test_create_adds_record(self, loaded, api, notifier, view):
        """Test that a valid create adds the server-confirmed record and closes the form."""
        form = loaded.open_form(FormMode.CREATE)
        edited = form.model_copy(
            update={
                "first_name": "Dora",
                "last_name": "Paz",
                "birth_date": "19700505",
                "kind": "foreigner",
                "origin_country": "Uruguay",
            }
        )

        assert await loaded.confirm(edited)

        created = loaded.store.get(100)
        assert isinstance(created, Foreigner)
        assert created.origin_country == "Uruguay"
        assert notifier.infos == [CREATED_MESSAGE]
        assert loaded.state == ControllerState.IDLE
        assert not view.form_visible
        assert created in view.tables[-1]

    @pytest.mark.asyncio
    async def test_empty_name_blocks_request(self, loaded, api, notifier, view):
        """Test that validation stops the create before any request."""
        requests_before = len(api.requests)
        form = loaded.open_form(FormMode.CREATE)
        edited = form.model_copy(
            update={"first_name": "", "last_name": "Paz", "birth_date": "19700505", "kind": "citizen"}
        )

        assert not await loaded.confirm(edited)

        assert len(api.requests) == requests_before
        assert notifier.errors == ["El nombre no puede estar vacío."]
        assert loaded.state == ControllerState.FORM_OPEN
        assert view.form_visible
        assert len(loaded.store) == 3

    @pytest.mark.asyncio
    async def test_failed_create_adds_nothing(self, loaded, api, notifier):
        """Test that no record is stored when the server rejects the create."""
        api.fail_with["POST"] = 500
        form = loaded.open_form(FormMode.CREATE)
        edited = form.model_copy(
            update={
                "first_name": "Dora",
                "last_name": "Paz",
                "birth_date": "19700505",
                "kind": "citizen",
                "national_id": "77",
            }
        )

        assert not await loaded.confirm(edited)
        assert len(loaded.store) == 3
        assert loaded.state == ControllerState.FORM_OPEN


class TestUpdate:
    """Tests for the update flow."""

    @pytest.mark.asyncio
    async def test_update_replaces_in_place(self, loaded, api, notifier):
        """Test that update replaces the record at the same position."""
        form = loaded.open_form(FormMode.UPDATE, loaded.store.get(3))
        edited = form.model_copy(update={"last_name": "Zamora"})

        assert await loaded.confirm(edited)

        assert [record.id for record in loaded.store.all()] == [1, 2, 3]
        assert loaded.store.get(3).last_name == "Zamora"
        assert notifier.infos == ["Registro modificado"]
        assert api.methods()[-1] == "PUT"

    @pytest.mark.asyncio
    async def test_update_cannot_change_kind_or_id(self, loaded):
        """Test that the kind and id stay as opened during update."""
        form = loaded.open_form(FormMode.UPDATE, loaded.store.get(1))
        edited = form.model_copy(update={"id": 99, "kind": "foreigner", "origin_country": "Peru"})

        assert await loaded.confirm(edited)

        updated = loaded.store.get(1)
        assert isinstance(updated, Citizen)
        assert loaded.store.get(99) is None

    @pytest.mark.asyncio
    async def test_update_of_removed_record(self, loaded, api, notifier):
        """Test that updating a record no longer in the store does not call the API."""
        form = loaded.open_form(FormMode.UPDATE, loaded.store.get(2))
        loaded.store.remove(2)
        requests_before = len(api.requests)

        assert not await loaded.confirm(form)
        assert notifier.errors == [MISSING_PERSON_MESSAGE]
        assert len(api.requests) == requests_before


class TestDelete:
    """Tests for the delete flow."""

    @pytest.mark.asyncio
    async def test_delete_removes_record(self, loaded, notifier, view):
        """Test that a confirmed delete removes the record and re-renders."""
        loaded.open_form(FormMode.DELETE, loaded.store.get(2))

        assert await loaded.confirm()

        assert loaded.store.get(2) is None
        assert [record.id for record in view.tables[-1]] == [1, 3]
        assert notifier.infos == [DELETED_MESSAGE]
        assert not view.form_visible

    @pytest.mark.asyncio
    async def test_delete_ignores_edits(self, loaded, api):
        """Test that the disabled delete form always sends the opened id."""
        form = loaded.open_form(FormMode.DELETE, loaded.store.get(2))

        assert await loaded.confirm(form.model_copy(update={"id": 1}))
        assert loaded.store.get(1) is not None
        assert loaded.store.get(2) is None

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_store_and_form(self, loaded, api, notifier, view):
        """Test that a non-2xx delete changes nothing and keeps the form open."""
        api.fail_with["DELETE"] = 500
        loaded.open_form(FormMode.DELETE, loaded.store.get(2))
        tables_before = len(view.tables)

        assert not await loaded.confirm()

        assert len(loaded.store) == 3
        assert notifier.errors == [DELETE_FAILED_MESSAGE]
        assert loaded.state == ControllerState.FORM_OPEN
        assert view.form_visible
        assert len(view.tables) == tables_before


class TestFormState:
    """Tests for form open/close rules."""

    @pytest.mark.asyncio
    async def test_confirm_without_form(self, controller):
        """Test that confirming with no open form is an error."""
        with pytest.raises(RuntimeError):
            await controller.confirm()

    def test_update_needs_record(self, controller):
        """Test that update and delete forms need a record."""
        with pytest.raises(ValueError):
            controller.open_form(FormMode.UPDATE)

    def test_close_form(self, controller, view):
        """Test that closing returns to idle and hides the form."""
        controller.open_form(FormMode.CREATE)
        assert view.form_visible

        controller.close_form()
        assert controller.state == ControllerState.IDLE
        assert controller.form is None
        assert not view.form_visible

    def test_cannot_open_while_submitting(self, controller):
        """Test that a second form cannot open during a request."""
        controller.state = ControllerState.SUBMITTING
        with pytest.raises(RuntimeError):
            controller.open_form(FormMode.CREATE)
