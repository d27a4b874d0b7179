"""Argument specifications.

Every kind of argument implements the same small contract used by :class:`.Parser`:

* :meth:`Argument.matches` - does a command-line token address this argument?
* :meth:`Argument.consume` - record one occurrence, reading a value if the kind takes one.
* :meth:`Argument.validate` - post-parse requiredness check.

``consume`` and ``validate`` report user-input problems by **returning** an :class:`.ArgvetError`
(or :obj:`None` on success); they never raise for bad input.
Malformed declarations raise :class:`.SpecificationError` immediately.
"""

from typing import TYPE_CHECKING, Any, ClassVar

from attrs import define, field

from argvet.convert import convert, type_name
from argvet.exceptions import (
    ArgvetError,
    ConversionError,
    DuplicateArgumentError,
    MissingValueError,
    RequiredArgumentMissingError,
    SpecificationError,
    UnknownArgumentError,
)
from argvet.token import Token, TokenStream
from argvet.utils import frozen, to_tuple_converter

if TYPE_CHECKING:
    from argvet.group import Group

__all__ = [
    "Argument",
    "MultiPositional",
    "MultiSwitch",
    "MultiValue",
    "Positional",
    "Switch",
    "Syntax",
    "Value",
]


@frozen(kw_only=True)
class Syntax:
    """Prefix and delimiter strings shared by a :class:`.Parser` and all of its arguments."""

    flag_prefix: str = "-"
    name_prefix: str = "--"
    delimiter: str = "="

    def split(self, token: str) -> tuple[str, str | None]:
        """Split ``token`` into its keyword and inline value (if a delimiter is present)."""
        if self.delimiter in token:
            keyword, value = token.split(self.delimiter, 1)
            return keyword, value
        return token, None


def _has_whitespace(s: str) -> bool:
    return any(c.isspace() for c in s)


@define(eq=False)
class Argument:
    """Common base of every argument kind.

    Identity is a single-character short ``flag`` and/or a multi-character long ``name``;
    both are given **without** prefixes (``"v"``, ``"verbose"``).
    """

    flag: str = ""
    """Single-character short flag, matched as ``-<flag>``."""

    name: str = ""
    """Long name, matched as ``--<name>``."""

    help: str = ""
    """Free-text description shown on the usage page."""

    required: bool = field(default=False, kw_only=True)
    """The argument must be supplied at least once."""

    tokens: list[Token] = field(factory=list, init=False)
    """Every :class:`.Token` consumed by this argument, in command-line order."""

    matched_count: int = field(default=0, init=False)
    """Number of times this argument was seen on the command line."""

    syntax: Syntax = field(factory=Syntax, init=False)
    """Bound by the owning :class:`.Parser` at registration time."""

    group: "Group | None" = field(default=None, init=False)
    """Constraint group this argument belongs to, if any. Set by the owning :class:`.Parser`."""

    takes_value: ClassVar[bool] = False
    multiple: ClassVar[bool] = False
    positional: ClassVar[bool] = False

    def __attrs_post_init__(self):
        if not self.flag and not self.name:
            raise SpecificationError(f"{type(self).__name__} requires a flag or a name.")
        if len(self.flag) > 1:
            raise SpecificationError(f"Flag {self.flag!r} must be a single character.")
        if len(self.name) == 1 and not self.positional:
            raise SpecificationError(f"Name {self.name!r} must be longer than one character; use a flag instead.")
        if _has_whitespace(self.flag) or _has_whitespace(self.name):
            raise SpecificationError(f"Argument identity {self.flag!r}/{self.name!r} cannot contain whitespace.")

    @property
    def names(self) -> tuple[str, ...]:
        """Prefixed command-line names, e.g. ``("-v", "--verbose")``."""
        names = []
        if self.flag:
            names.append(self.syntax.flag_prefix + self.flag)
        if self.name:
            names.append(self.syntax.name_prefix + self.name)
        return tuple(names)

    @property
    def display_name(self) -> str:
        """Name used in messages; the long name is preferred."""
        return self.names[-1]

    @property
    def type_name(self) -> str:
        return ""

    @property
    def is_set(self) -> bool:
        return self.matched_count > 0

    @property
    def value(self) -> Any:
        raise NotImplementedError

    def matches(self, token: str) -> bool:
        """Whether the flag or name portion of ``token`` (text before the delimiter) addresses this argument."""
        keyword, _ = self.syntax.split(token)
        return keyword in self.names

    def consume(self, keyword: str | None, inline: str | None, stream: TokenStream) -> ArgvetError | None:
        """Record one occurrence of this argument.

        Parameters
        ----------
        keyword: str | None
            The flag or name text that addressed this argument; :obj:`None` for positional tokens.
        inline: str | None
            Value attached to the keyword with the delimiter (or the positional token itself).
        stream: TokenStream
            Cursor positioned at the token being dispatched. May be advanced by one to read a value.

        Returns
        -------
        ArgvetError | None
            The problem with this occurrence, or :obj:`None` on success.
        """
        raise NotImplementedError

    def validate(self) -> ArgvetError | None:
        if self.required and not self.is_set:
            return RequiredArgumentMissingError(argument=self)
        return None


@define(eq=False)
class Switch(Argument):
    """Boolean presence switch; takes no value.

    Resolves to ``not default`` once matched, ``default`` otherwise.
    """

    default: bool = field(default=False, kw_only=True)

    @property
    def value(self) -> bool:
        return not self.default if self.is_set else self.default

    def _check_repeat(self, token: Token) -> ArgvetError | None:
        if self.is_set:
            return DuplicateArgumentError(argument=self, token=token)
        return None

    def consume(self, keyword, inline, stream):
        token = Token(keyword=keyword, index=stream.position)
        if inline is not None:
            return UnknownArgumentError(
                token=token.evolve(value=stream.current),
                reason=f'Switch "{keyword}" does not take a value.',
            )
        if error := self._check_repeat(token):
            return error
        self.tokens.append(token)
        self.matched_count += 1
        return None


@define(eq=False)
class MultiSwitch(Switch):
    """Repeatable switch that counts its occurrences (e.g. ``-vvv``)."""

    default: int = field(default=0, kw_only=True)  # pyright: ignore[reportIncompatibleVariableOverride]

    multiple: ClassVar[bool] = True

    @property
    def value(self) -> int:  # pyright: ignore[reportIncompatibleVariableOverride]
        return self.default + self.matched_count

    def _check_repeat(self, token):
        return None


@define(eq=False)
class Value(Argument):
    """Argument carrying a single value, e.g. ``--count=42`` or ``--count 42``."""

    type: Any = field(default=str, kw_only=True)
    """Converter applied to the value text. See :func:`.type_name` for the supported kinds."""

    default: Any = field(default=None, kw_only=True)
    """Value resolved when the argument is not supplied."""

    metavar: str | None = field(default=None, kw_only=True)
    """Short description of the value shown on the usage page; defaults to the type's name."""

    allow_overwrite: bool = field(default=False, kw_only=True)
    """A later occurrence replaces the earlier value instead of being a :class:`.DuplicateArgumentError`."""

    _values: list[Any] = field(factory=list, init=False)

    takes_value: ClassVar[bool] = True

    def __attrs_post_init__(self):
        super().__attrs_post_init__()
        if not callable(self.type):
            raise SpecificationError(f"type for {type(self).__name__} must be callable; got {self.type!r}.")

    @property
    def type_name(self) -> str:
        return self.metavar if self.metavar else type_name(self.type)

    @property
    def value(self) -> Any:
        return self._values[-1] if self._values else self.default

    def _read(self, keyword: str | None, inline: str | None, stream: TokenStream) -> Token | ArgvetError:
        index = stream.position
        if inline is None:
            inline = stream.take_next()
            if inline is None:
                return MissingValueError(argument=self, token=Token(keyword=keyword, index=index))
            index = stream.position
        return Token(keyword=keyword, value=inline, index=index)

    def consume(self, keyword, inline, stream):
        if self.is_set and not self.multiple and not self.allow_overwrite:
            return DuplicateArgumentError(argument=self, token=Token(keyword=keyword, index=stream.position))

        token = self._read(keyword, inline, stream)
        if isinstance(token, ArgvetError):
            return token

        try:
            value = convert(self.type, token)
        except ConversionError as e:
            e.argument = self
            return e

        if not self.multiple:
            self._values.clear()
        self._values.append(value)
        self.tokens.append(token)
        self.matched_count += 1
        return None


def _optional_tuple(value: Any) -> tuple[Any, ...] | None:
    return None if value is None else to_tuple_converter(value)


@define(eq=False)
class MultiValue(Value):
    """Repeatable value argument; each occurrence appends to :attr:`values`."""

    default: tuple[Any, ...] | None = field(default=None, kw_only=True, converter=_optional_tuple)  # pyright: ignore[reportIncompatibleVariableOverride]
    """Values resolved when the argument is not supplied. A single value counts as one element."""

    multiple: ClassVar[bool] = True

    @property
    def values(self) -> list[Any]:
        """Resolved values in command-line order."""
        if self._values:
            return list(self._values)
        return list(self.default or ())

    @property
    def value(self) -> list[Any]:
        return self.values


@define(eq=False, init=False)
class Positional(Value):
    """Value bound by position rather than by flag or name.

    Positionals are filled in registration order; they are required by default.
    """

    positional: ClassVar[bool] = True

    def __init__(self, name: str, help: str = "", *, required: bool = True, **kwargs):
        self.__attrs_init__(name=name, help=help, required=required, **kwargs)  # pyright: ignore[reportAttributeAccessIssue]

    def __attrs_post_init__(self):
        super().__attrs_post_init__()
        if self.flag:
            raise SpecificationError(f"Positional argument {self.name!r} cannot have a flag.")
        if not self.name:
            raise SpecificationError("Positional argument requires a name.")

    @property
    def names(self) -> tuple[str, ...]:
        return ()

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def is_filled(self) -> bool:
        return self.is_set

    def matches(self, token):
        return False


@define(eq=False, init=False)
class MultiPositional(MultiValue):
    """Collects every remaining positional token.

    At most one may be registered per parser, and it must be the last positional.
    """

    positional: ClassVar[bool] = True

    def __init__(self, name: str, help: str = "", *, required: bool = True, **kwargs):
        self.__attrs_init__(name=name, help=help, required=required, **kwargs)  # pyright: ignore[reportAttributeAccessIssue]

    def __attrs_post_init__(self):
        super().__attrs_post_init__()
        if self.flag:
            raise SpecificationError(f"Positional argument {self.name!r} cannot have a flag.")
        if not self.name:
            raise SpecificationError("Positional argument requires a name.")

    @property
    def names(self) -> tuple[str, ...]:
        return ()

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def is_filled(self) -> bool:
        return False

    def matches(self, token):
        return False
