"""Output formatter that renders nothing."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from argvet.exceptions import ArgvetError
    from argvet.parser import Parser


class SilentOutput:
    """Dummy formatter that causes nothing to be printed.

    Useful when embedding a :class:`.Parser` or in tests; errors are still returned by :meth:`.Parser.parse`.
    """

    def usage(self, parser: "Parser") -> None:
        pass

    def version(self, parser: "Parser") -> None:
        pass

    def failure(self, parser: "Parser", error: "ArgvetError") -> None:
        pass
