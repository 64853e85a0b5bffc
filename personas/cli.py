#!/usr/bin/env python3
"""Interactive terminal ABM for citizen and foreigner records."""

import asyncio
import os
import sys

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from personas import __version__
from personas.clients.persons_api import PersonsApiClient
from personas.config import ApiConfig
from personas.models.form import FormMode, PersonForm
from personas.models.person import PersonKind
from personas.services.abm import ABMController
from personas.services.gateway import PersonGateway
from personas.services.listing import PersonFilter, SortColumn
from personas.ui.console import ConsoleBusyIndicator, ConsoleNotifier, ConsoleView
from personas.utils.logging import LogConfig, get_logger, setup_logging

logger = get_logger(__name__)

HELP_TEXT = """
[bold]Comandos:[/bold]
• /list - Mostrar la tabla con el filtro actual
• /filter all|citizen|foreigner - Filtrar por tipo
• /sort <columna> - Ordenar (alterna ascendente/descendente)
• /cols <columna> - Mostrar u ocultar una columna
• /add - Alta de una persona
• /edit <id> - Modificación
• /delete <id> - Eliminación
• /reload - Volver a cargar desde la API
• /help - Esta ayuda
• /quit - Salir

[bold]Columnas:[/bold] id, first_name, last_name, birth_date, national_id, origin_country
"""


class ABMCli:
    """Command loop over the ABM controller."""

    def __init__(self, controller: ABMController, console: Console):
        self.controller = controller
        self.console = console

    async def start(self) -> None:
        """Load the list and run the command loop until /quit."""
        self.console.print(
            Panel.fit(
                f"[bold blue]Personas ABM v{__version__}[/bold blue]\n"
                "Ciudadanos y extranjeros.\n"
                "Comandos: /help, /quit",
                border_style="blue",
            )
        )
        await self.controller.load()

        try:
            while True:
                line = (await self._ask("\n[bold cyan]abm[/bold cyan]")).strip()
                if not line:
                    continue
                command, _, argument = line.partition(" ")
                command = command.lower()
                argument = argument.strip()

                if command in ["/quit", "/exit"]:
                    break
                await self._handle(command, argument)
        except (KeyboardInterrupt, EOFError):
            pass
        finally:
            self.console.print("\n[yellow]Hasta luego.[/yellow]")

    async def _handle(self, command: str, argument: str) -> None:
        if command == "/help":
            self.console.print(Panel(HELP_TEXT.strip(), title="[cyan]Ayuda[/cyan]", border_style="cyan"))
        elif command == "/list":
            self.controller.refresh()
        elif command == "/reload":
            await self.controller.load()
        elif command == "/filter":
            self._filter(argument)
        elif command == "/sort":
            self._sort(argument)
        elif command == "/cols":
            self._toggle_column(argument)
        elif command == "/add":
            await self._run_form(FormMode.CREATE)
        elif command in ["/edit", "/delete"]:
            mode = FormMode.UPDATE if command == "/edit" else FormMode.DELETE
            await self._run_form(mode, argument)
        else:
            self.console.print(f"[red]Comando desconocido: {command}[/red] (use /help)")

    def _filter(self, argument: str) -> None:
        criterion = argument.lower() or PersonFilter.ALL
        if criterion not in list(PersonFilter):
            self.console.print(f"[yellow]Filtro '{criterion}' no reconocido, se muestran todos.[/yellow]")
        self.controller.set_filter(criterion)

    def _sort(self, argument: str) -> None:
        try:
            self.controller.sort(argument)
        except ValueError:
            self.console.print(f"[red]Columna no válida: {argument}[/red]")

    def _toggle_column(self, argument: str) -> None:
        try:
            changed = self.controller.toggle_column(argument)
        except ValueError:
            self.console.print(f"[red]Columna no válida: {argument}[/red]")
            return
        if not changed:
            self.console.print("[yellow]La columna está bloqueada por el filtro actual.[/yellow]")

    async def _run_form(self, mode: FormMode, argument: str = "") -> None:
        record = None
        if mode != FormMode.CREATE:
            try:
                record = self.controller.store.get(int(argument))
            except ValueError:
                self.console.print("[red]Indique el ID numérico de la persona.[/red]")
                return
            if record is None:
                self.console.print(f"[red]No existe una persona con ID {argument}.[/red]")
                return

        form = self.controller.open_form(mode, record)
        while True:
            if mode == FormMode.DELETE:
                if not await self._confirm("¿Eliminar esta persona?"):
                    break
                edited = form
            else:
                edited = await self._fill(form)
                if not await self._confirm("¿Aceptar?"):
                    break

            if await self.controller.confirm(edited):
                return
            form = self.controller.form or edited
            if not await self._confirm("¿Reintentar?"):
                break

        self.controller.close_form()

    async def _fill(self, form: PersonForm) -> PersonForm:
        """Prompt for every editable field, offering current values as defaults."""
        values = form.model_dump()
        if not form.kind_locked:
            values["kind"] = await self._ask(
                "Tipo", choices=[PersonKind.CITIZEN.value, PersonKind.FOREIGNER.value], default=form.kind or None
            )
        values["first_name"] = await self._ask("Nombre", default=form.first_name)
        values["last_name"] = await self._ask("Apellido", default=form.last_name)
        values["birth_date"] = await self._ask("Fecha de nacimiento (AAAAMMDD)", default=form.birth_date)
        if values["kind"] == PersonKind.CITIZEN:
            values["national_id"] = await self._ask("DNI", default=form.national_id)
        elif values["kind"] == PersonKind.FOREIGNER:
            values["origin_country"] = await self._ask("País de origen", default=form.origin_country)
        return PersonForm.model_validate(values)

    async def _ask(self, prompt: str, choices: list[str] | None = None, default: str | None = None) -> str:
        if default is None:
            return await asyncio.to_thread(Prompt.ask, prompt, console=self.console, choices=choices)
        return await asyncio.to_thread(Prompt.ask, prompt, console=self.console, choices=choices, default=default)

    async def _confirm(self, prompt: str) -> bool:
        return await asyncio.to_thread(Confirm.ask, prompt, console=self.console, default=True)


async def run(config: ApiConfig) -> None:
    console = Console()
    async with PersonsApiClient(config) as client:
        gateway = PersonGateway(client, ConsoleBusyIndicator(console), ConsoleNotifier(console))
        controller = ABMController(gateway, ConsoleView(console))
        await ABMCli(controller, console).start()


def main() -> None:
    """Main entry point for the ABM CLI."""
    setup_logging(LogConfig(level=os.getenv("LOG_LEVEL", "WARNING"), log_file=os.getenv("PERSONAS_LOG_FILE")))

    config = ApiConfig()
    if len(sys.argv) > 1:
        config.base_url = sys.argv[1]
    logger.info(f"Using persons API at {config.base_url}")

    try:
        asyncio.run(run(config))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
