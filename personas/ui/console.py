"""Rich-based terminal implementations of the busy indicator, notifier and view."""

from rich.console import Console
from rich.panel import Panel
from rich.status import Status

from personas.models.form import FormMode, PersonForm
from personas.models.person import PersonKind, PersonRecord
from personas.ui.table import ColumnVisibility, render_table

KIND_LABELS: dict[str, str] = {
    PersonKind.CITIZEN: "Ciudadano",
    PersonKind.FOREIGNER: "Extranjero",
}


class ConsoleBusyIndicator:
    """Spinner shown while a request is in flight."""

    def __init__(self, console: Console):
        self.console = console
        self._status: Status | None = None

    def show(self) -> None:
        if self._status is None:
            self._status = self.console.status("[dim]Cargando...[/dim]", spinner="dots")
            self._status.start()

    def hide(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None


class ConsoleNotifier:
    """Blocking-style notifications rendered as panels."""

    def __init__(self, console: Console):
        self.console = console

    def info(self, message: str) -> None:
        self.console.print(Panel(message, border_style="green", expand=False))

    def error(self, message: str) -> None:
        self.console.print(Panel(f"[red]{message}[/red]", title="[red]Error[/red]", border_style="red", expand=False))


class ConsoleView:
    """Prints the person table and the ABM form."""

    def __init__(self, console: Console):
        self.console = console
        self.form_visible = False

    def render_table(self, records: list[PersonRecord], columns: ColumnVisibility) -> None:
        self.console.print(render_table(records, columns, title=f"Personas ({len(records)})"))

    def show_form(self, form: PersonForm) -> None:
        self.form_visible = True
        lines = []
        if form.id_visible:
            lines.append(f"[bold]ID:[/bold] {form.id}")
        locked = " (bloqueado)" if form.kind_locked else ""
        lines.append(f"[bold]Tipo:[/bold] {KIND_LABELS.get(form.kind, '-')}{locked}")
        if form.mode != FormMode.CREATE:
            lines.append(f"[bold]Nombre:[/bold] {form.first_name}")
            lines.append(f"[bold]Apellido:[/bold] {form.last_name}")
            lines.append(f"[bold]Fecha de nacimiento:[/bold] {form.birth_date}")
            if form.variant_inputs == PersonKind.CITIZEN:
                lines.append(f"[bold]DNI:[/bold] {form.national_id}")
            elif form.variant_inputs == PersonKind.FOREIGNER:
                lines.append(f"[bold]País de origen:[/bold] {form.origin_country}")

        border = "red" if form.fields_disabled else "blue"
        self.console.print(Panel("\n".join(lines), title=f"[bold]{form.title}[/bold]", border_style=border))

    def hide_form(self) -> None:
        self.form_visible = False
