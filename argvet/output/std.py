from typing import TYPE_CHECKING, Optional

from attrs import define, field

from argvet.output._shared import long_id, usage_line
from argvet.utils import create_error_console_from_console

if TYPE_CHECKING:
    from rich.console import Console, RenderableType

    from argvet.argument import Argument
    from argvet.exceptions import ArgvetError
    from argvet.parser import Parser


def _panels(parser: "Parser") -> list[tuple[str, list["Argument"]]]:
    positionals, parameters = [], []
    for argument in parser.arguments:
        if argument.group is not None:
            continue
        (positionals if argument.positional else parameters).append(argument)

    panels = [("Arguments", positionals), ("Parameters", parameters)]
    for group in parser.groups:
        title = group.name or ("Exactly one of" if group.required else "At most one of")
        panels.append((title, list(group.arguments)))
    return [(title, arguments) for title, arguments in panels if arguments]


def _render_panel(title: str, arguments: list["Argument"]) -> "RenderableType":
    from rich import box
    from rich.panel import Panel
    from rich.table import Table
    from rich.text import Text

    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", no_wrap=True)
    table.add_column()
    for argument in arguments:
        description = Text(argument.help)
        if argument.required:
            description.append(" [required]", style="dim red")
        default = getattr(argument, "default", None)
        if isinstance(default, tuple):
            default = " ".join(str(d) for d in default) or None
        if argument.takes_value and default is not None:
            description.append(f" [default: {default}]", style="dim")
        table.add_row(Text(long_id(argument)), description)

    return Panel(table, title=title, box=box.ROUNDED, expand=True, title_align="left")


@define
class StdOutput:
    """Default formatter: usage and version on stdout, errors on stderr, rendered with Rich."""

    console: Optional["Console"] = field(default=None)
    """:class:`~rich.console.Console` for usage and version text. Created on first use if not provided."""

    error_console: Optional["Console"] = field(default=None)
    """:class:`~rich.console.Console` for errors. Defaults to a stderr console inheriting :attr:`console` settings."""

    error_title: str = field(default="Error", kw_only=True)
    """Title in the top-left corner of the error panel."""

    error_style: str = field(default="red", kw_only=True)
    """Rich style of the error panel border."""

    def _get_console(self) -> "Console":
        if self.console is None:
            from rich.console import Console

            self.console = Console()
        return self.console

    def _get_error_console(self) -> "Console":
        if self.error_console is None:
            self.error_console = create_error_console_from_console(self._get_console())
        return self.error_console

    def usage(self, parser: "Parser") -> None:
        from rich.text import Text

        console = self._get_console()
        console.print(Text.assemble(("Usage: ", "bold"), usage_line(parser)))
        if parser.help:
            console.print()
            console.print(Text(parser.help))
        for title, arguments in _panels(parser):
            console.print(_render_panel(title, arguments))

    def version(self, parser: "Parser") -> None:
        from rich.text import Text

        self._get_console().print(Text(f"{parser.name}  version: {parser.version}"))

    def failure(self, parser: "Parser", error: "ArgvetError") -> None:
        from rich import box
        from rich.panel import Panel
        from rich.text import Text

        console = self._get_error_console()
        console.print(
            Panel(
                Text(str(error), "default"),
                title=self.error_title,
                style=self.error_style,
                box=box.ROUNDED,
                expand=True,
                title_align="left",
            )
        )
        console.print(Text(f"Usage: {usage_line(parser)}"))
        if parser.help_switch is not None:
            console.print(
                Text(f"For complete usage and help type: {parser.name} {parser.help_switch.display_name}")
            )
