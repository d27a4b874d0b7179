from attrs import define, evolve, field

from argvet.utils import frozen


@frozen(kw_only=True)
class Token:
    """Tracks how a user supplied a value to the parser."""

    keyword: str | None = None
    """The flag or name text that introduced the value (e.g. ``"--count"``); :obj:`None` for positionals."""

    value: str = ""
    """The raw, unconverted value text."""

    index: int = field(default=0, kw_only=True)
    """Position of the originating command-line token, counted from the first token after the program name."""

    def evolve(self, **kwargs) -> "Token":
        return evolve(self, **kwargs)


@define
class TokenStream:
    """Cursor over the command-line tokens of a single parse.

    ``position`` always points at the token currently being dispatched.
    Arguments that read their value from the following token advance the cursor with :meth:`take_next`.
    """

    tokens: list[str] = field(converter=list)
    position: int = 0

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.tokens)

    @property
    def current(self) -> str:
        return self.tokens[self.position]

    def advance(self) -> None:
        self.position += 1

    def take_next(self) -> str | None:
        """Consume and return the token after the current one.

        Returns :obj:`None`, without moving the cursor, if the stream has no further tokens.
        """
        if self.position + 1 >= len(self.tokens):
            return None
        self.position += 1
        return self.tokens[self.position]
