"""Remote gateway: API calls wrapped with busy indicator, notifications and logging."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from personas.clients.persons_api import PersonsApiClient
from personas.models.errors import ABMError, DecodeError, TransportError
from personas.models.person import PersonRecord
from personas.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

LOAD_TRANSPORT_MESSAGE = "No se pudo cargar la lista de personas. Intente nuevamente."
LOAD_DECODE_MESSAGE = "No se pudieron cargar los datos."
CREATE_FAILED_MESSAGE = "No se pudo realizar la operación. Por favor, intenta de nuevo."
UPDATE_FAILED_MESSAGE = "No se pudo realizar la modificación: {detail}"
DELETE_FAILED_MESSAGE = "No se pudo realizar la operación"


def update_failed_message(error: ABMError) -> str:
    """Update failure text with a short cause appended."""
    status_code = getattr(error, "status_code", None)
    if status_code is not None:
        detail = f"No se pudo modificar (HTTP {status_code})."
    elif isinstance(error, TransportError):
        detail = "Sin conexión con el servidor."
    else:
        detail = "No se pudo modificar."
    return UPDATE_FAILED_MESSAGE.format(detail=detail)


class BusyIndicator(Protocol):
    """Spinner shown while a request is in flight."""

    def show(self) -> None: ...

    def hide(self) -> None: ...


class Notifier(Protocol):
    """User-facing notifications."""

    def info(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


@dataclass
class GatewayResult(Generic[T]):
    """Outcome of a gateway call: a value on success, an error otherwise."""

    value: T | None = None
    error: ABMError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PersonGateway:
    """Runs API operations for the UI.

    Every call shows the busy indicator first and hides it on every exit
    path. Failures are logged, shown to the user and returned as a failed
    ``GatewayResult``; they are never raised to the caller. Cancellation is
    the exception and propagates after the indicator is hidden.
    """

    def __init__(self, client: PersonsApiClient, busy: BusyIndicator, notifier: Notifier):
        self.client = client
        self.busy = busy
        self.notifier = notifier

    async def load(self) -> GatewayResult[list[PersonRecord]]:
        logger.info("Loading persons")
        return await self._run(
            "load",
            self.client.load,
            lambda e: LOAD_DECODE_MESSAGE if isinstance(e, DecodeError) else LOAD_TRANSPORT_MESSAGE,
        )

    async def create(self, record: PersonRecord) -> GatewayResult[PersonRecord]:
        logger.info(f"Creating {record.kind} {record.first_name} {record.last_name}")
        return await self._run("create", lambda: self.client.create(record), lambda e: CREATE_FAILED_MESSAGE)

    async def update(self, record: PersonRecord) -> GatewayResult[str]:
        logger.info(f"Updating person {record.id}")
        return await self._run("update", lambda: self.client.update(record), update_failed_message)

    async def delete(self, person_id: int) -> GatewayResult[None]:
        logger.info(f"Deleting person {person_id}")
        return await self._run("delete", lambda: self.client.delete(person_id), lambda e: DELETE_FAILED_MESSAGE)

    async def _run(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
        user_message: Callable[[ABMError], str],
    ) -> GatewayResult[T]:
        self.busy.show()
        try:
            value = await call()
            logger.info(f"{operation} finished")
            return GatewayResult(value=value)
        except (TransportError, DecodeError) as e:
            e.user_message = user_message(e)
            logger.warning(f"{operation} failed: {e}")
            self.notifier.error(e.user_message)
            return GatewayResult(error=e)
        except Exception as e:
            error = TransportError(f"{operation} failed unexpectedly: {e}")
            error.user_message = user_message(error)
            logger.error(f"{operation} failed unexpectedly: {e}", exc_info=True)
            self.notifier.error(error.user_message)
            return GatewayResult(error=error)
        finally:
            self.busy.hide()
