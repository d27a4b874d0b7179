r"""Bash completion script generator.

:class:`BashCompletionOutput` is an :class:`.Output` whose usage page is a bash completion
script instead of help text. Running the program with ``--help`` then prints a script that can be
``source``'d directly:

.. code-block:: console

    $ my-tool --help > /etc/bash_completion.d/my-tool

The generated script relies on the ``bash-completion`` package (``_init_completion``, ``_filedir``).

Structure
---------
* ``_<prog>_opts`` holds a ``case $prev in`` branch for every value-bearing option.
  Options with a closed set of choices complete from ``compgen -W``.
  Options whose metavar is ``file:<ext>`` complete files with that extension.
  Options whose metavar names a well known kind (``file``, ``directory``, ``host``, ``url``, ...)
  complete with the matching bash-completion helper.
* ``_<prog>`` completes option names when the current word starts with the flag prefix,
  and positional choices otherwise.
"""

import logging
import re
from typing import TYPE_CHECKING, Optional

from attrs import define, field

from argvet.output._shared import choices

if TYPE_CHECKING:
    from rich.console import Console

    from argvet.argument import Argument
    from argvet.exceptions import ArgvetError
    from argvet.parser import Parser

logger = logging.getLogger(__name__)

# metavar -> bash-completion helper invocation.
_COMMON = {
    "file": "_filedir",
    "filename": "_filedir",
    "path": "_filedir",
    "directory": "_filedir -d",
    "dir": "_filedir -d",
    "host": '_known_hosts_real -- "$cur"',
    "hostname": '_known_hosts_real -- "$cur"',
    "user": 'COMPREPLY=( $( compgen -u -- "$cur" ) )',
    "username": 'COMPREPLY=( $( compgen -u -- "$cur" ) )',
    "url": "COMPREPLY=( $( compgen -W 'http\\:// https\\:// ftp\\:// file\\://' -- \"$cur\" ) )",
}


def _escape_bash_choice(choice: str) -> str:
    r"""Escape a choice for inclusion in a single-quoted ``compgen -W`` word list.

    * ``:`` is backslash-escaped, since bash treats it as a word break.
    * ``'`` becomes ``'\''`` (close quote, escaped quote, open quote).
    """
    return _quote(choice.replace(":", "\\:"))


def _quote(text: str) -> str:
    return text.replace("'", "'\\''")


def _function_name(prog_name: str) -> str:
    return "_" + prog_name.replace("-", "_")


def _word_list(values) -> str:
    return " ".join(_escape_bash_choice(v) for v in values)


def _file_extension(metavar: str) -> str | None:
    """Extension from a ``file:<ext>`` metavar, e.g. ``"txt"`` for ``"file:txt"``."""
    kind, sep, extension = metavar.partition(":")
    if sep and extension and kind.lower() in ("file", "filename"):
        return extension
    return None


def _option_case(argument: "Argument") -> list[str]:
    lines = [f"\t\t{'|'.join(argument.names)})"]
    if values := choices(argument):
        lines.append(f"\t\t\tCOMPREPLY=( $( compgen -W '{_word_list(values)}' -- \"$cur\" ) )")
    elif (extension := _file_extension(argument.type_name)) is not None:
        lines.append(f"\t\t\t_filedir '{_quote(extension)}'")
    elif (helper := _COMMON.get(argument.type_name.lower())) is not None:
        lines.append(f"\t\t\t{helper}")
    lines.append("\t\t\treturn")
    lines.append("\t\t\t;;")
    return lines


def generate_completion_script(parser: "Parser", prog_name: str | None = None) -> str:
    """Generate a bash completion script for ``parser``.

    Parameters
    ----------
    parser : Parser
        The parser to generate completion for. Only registration data is read.
    prog_name : str | None
        Program name for completion function naming. Defaults to :attr:`.Parser.name`.
        Must be alphanumeric with hyphens/underscores.

    Returns
    -------
    str
        Complete bash completion script ready to source.

    Raises
    ------
    ValueError
        If prog_name contains invalid characters.
    """
    if prog_name is None:
        prog_name = parser.name
    if not prog_name or not re.match(r"^[a-zA-Z0-9_-]+$", prog_name):
        raise ValueError(f"Invalid prog_name: {prog_name!r}. Must be alphanumeric with hyphens/underscores.")

    fn = _function_name(prog_name)
    labeled = [a for a in parser.arguments if not a.positional]
    positional_choices = [v for a in parser.arguments if a.positional for v in choices(a)]
    logger.debug("Generating bash completion for %r with %d options.", prog_name, len(labeled))

    lines = [f"# Bash completion for {prog_name}", ""]
    if parser.version is not None:
        lines += [f"# {prog_name} version {parser.version}", ""]

    lines += [f"{fn}_opts()", "{", "\tcase $prev in"]
    for argument in labeled:
        if argument.takes_value:
            lines += _option_case(argument)
    lines += ["\tesac", "\treturn 1", "}", ""]

    option_names = _word_list(name for a in labeled for name in a.names)
    lines += [
        f"{fn}()",
        "{",
        "\tlocal cur prev words cword",
        "\t_init_completion || return",
        f"\t{fn}_opts && return",
        f'\tif [[ "$cur" == {parser.flag_prefix}* ]]; then',
        f"\t\tCOMPREPLY=( $( compgen -W '{option_names}' -- \"$cur\" ) )",
    ]
    if positional_choices:
        lines += [
            "\telse",
            f"\t\tCOMPREPLY=( $( compgen -W '{_word_list(positional_choices)}' -- \"$cur\" ) )",
        ]
    lines += [
        "\tfi",
        "} &&",
        f"complete -F {fn} {prog_name}",
    ]
    return "\n".join(lines) + "\n"


@define
class BashCompletionOutput:
    """Output that renders the usage page as a bash completion script.

    Version text is the bare version string; failures are the bare error message.
    Everything is written to stdout so it can be redirected into a completion file.
    """

    console: Optional["Console"] = field(default=None)

    def _get_console(self) -> "Console":
        if self.console is None:
            from rich.console import Console

            self.console = Console(highlight=False, markup=False, emoji=False)
        return self.console

    def _print(self, text: str) -> None:
        from rich.text import Text

        self._get_console().print(Text(text), end="", soft_wrap=True)

    def usage(self, parser: "Parser") -> None:
        self._print(generate_completion_script(parser))

    def version(self, parser: "Parser") -> None:
        self._print(f"{parser.version}\n")

    def failure(self, parser: "Parser", error: "ArgvetError") -> None:
        self._print(f"{error}\n")
