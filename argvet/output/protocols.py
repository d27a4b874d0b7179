from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from argvet.exceptions import ArgvetError
    from argvet.parser import Parser


@runtime_checkable
class Output(Protocol):
    """Protocol for output **formatters**.

    It's the formatter's job to turn the :class:`.Parser` registry into text on a display.
    Formatters only read the parser's introspection surface
    (:attr:`.Parser.arguments`, :attr:`.Parser.groups`, :attr:`.Parser.name`,
    :attr:`.Parser.version`, :attr:`.Parser.delimiter`); they never parse or validate.

    The parser calls these hooks synchronously; they may block on console I/O.
    """

    def usage(self, parser: "Parser") -> None:
        """Render the usage/help page. Called when the help switch is supplied."""
        ...

    def version(self, parser: "Parser") -> None:
        """Render the version string. Called when the version switch is supplied."""
        ...

    def failure(self, parser: "Parser", error: "ArgvetError") -> None:
        """Render a parse failure. Called once for every failed parse."""
        ...
