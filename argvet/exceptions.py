from collections.abc import Sequence
from typing import TYPE_CHECKING, Optional

from attrs import define, field

from argvet.token import Token

if TYPE_CHECKING:
    from argvet.argument import Argument
    from argvet.group import Group


__all__ = [
    "ArgvetError",
    "ConversionError",
    "DuplicateArgumentError",
    "MissingValueError",
    "MutuallyExclusiveViolationError",
    "RegistrationConflictError",
    "RequiredArgumentMissingError",
    "RequiredExclusiveGroupUnsatisfiedError",
    "SpecificationError",
    "UnexpectedArgumentError",
    "UnknownArgumentError",
]


class RegistrationConflictError(Exception):
    """An argument or group clashes with something already registered to the parser."""

    # This doesn't derive from ArgvetError since this is a developer error
    # rather than a user-input error.


class SpecificationError(Exception):
    """An argument or parser was declared with an invalid configuration."""


def _keyword(argument: "Argument") -> str:
    """Name the argument the way the user typed it, falling back to its declared name."""
    for token in argument.tokens:
        if token.keyword:
            return token.keyword
    return argument.display_name


@define
class ArgvetError(Exception):
    """Root exception for parse-time errors.

    Parse-time errors are returned (not raised) by :meth:`.Parser.parse`;
    they are only raised by the host-facing :meth:`.Parser.__call__`.
    """

    msg: str | None = None
    """
    If set, override automatic message generation.
    """

    argument: Optional["Argument"] = field(default=None, kw_only=True)
    """
    :class:`.Argument` involved in the error, if any.
    """

    token: Token | None = field(default=None, kw_only=True)
    """
    Offending :class:`.Token`, if any.
    """

    input_tokens: list[str] | None = field(default=None, kw_only=True)
    """
    The command-line tokens that were initially fed into the :class:`.Parser`.
    """

    def __str__(self):
        if self.msg is not None:
            return self.msg
        return self._message()

    def _message(self) -> str:
        return ""


@define(kw_only=True)
class UnknownArgumentError(ArgvetError):
    """Flag-shaped token that does not match any registered argument.

    A nearest-neighbor suggestion may be appended.
    """

    candidates: Sequence[str] = ()
    """Names of every registered labeled argument, used for suggestions."""

    reason: str = ""
    """Additional explanation, e.g. why a bundle of short flags could not be expanded."""

    def _message(self):
        assert self.token is not None
        response = f'Unknown argument: "{self.token.value}".'
        if self.reason:
            response += f" {self.reason}"
        elif self.candidates:
            import difflib

            keyword = self.token.keyword or self.token.value
            close_matches = difflib.get_close_matches(keyword, list(self.candidates), n=1, cutoff=0.6)
            if close_matches:
                response += f' Did you mean "{close_matches[0]}"?'
        return response


@define(kw_only=True)
class MissingValueError(ArgvetError):
    """A value-bearing argument was supplied without a value."""

    def _message(self):
        assert self.argument is not None
        keyword = self.token.keyword if self.token and self.token.keyword else self.argument.display_name
        return f'Argument "{keyword}" requires a value.'


@define(kw_only=True)
class ConversionError(ArgvetError):
    """A token could not be converted to the argument's declared type."""

    type_name: str = ""
    """Human readable name of the intended type, e.g. ``"integer"``."""

    def _message(self):
        assert self.token is not None
        target = self.type_name or "the expected type"
        if self.argument is None:
            return f'Unable to convert "{self.token.value}" into {target}.'
        keyword = self.token.keyword or self.argument.display_name
        return f'Invalid value for "{keyword}": unable to convert "{self.token.value}" into {target}.'


@define(kw_only=True)
class DuplicateArgumentError(ArgvetError):
    """A single-value argument was supplied more than once."""

    def _message(self):
        assert self.argument is not None
        keyword = self.token.keyword if self.token and self.token.keyword else self.argument.display_name
        return f'Argument "{keyword}" specified multiple times.'


@define(kw_only=True)
class RequiredArgumentMissingError(ArgvetError):
    """A required argument was not provided."""

    def _message(self):
        assert self.argument is not None
        return f'Required argument "{self.argument.display_name}" was not provided.'


@define(kw_only=True)
class UnexpectedArgumentError(ArgvetError):
    """A positional token was supplied but no positional argument can accept it."""

    def _message(self):
        assert self.token is not None
        return f'Unexpected argument: "{self.token.value}".'


@define(kw_only=True)
class MutuallyExclusiveViolationError(ArgvetError):
    """More than one member of an exclusive group was supplied."""

    group: Optional["Group"] = None
    """The violated :class:`.Group`."""

    arguments: tuple["Argument", ...] = ()
    """Every member of the group that was supplied, in registration order."""

    def _message(self):
        offenders = "{" + ", ".join(_keyword(a) for a in self.arguments) + "}"
        return f"Mutually exclusive arguments: {offenders}."


@define(kw_only=True)
class RequiredExclusiveGroupUnsatisfiedError(ArgvetError):
    """No member of a required exclusive group was supplied."""

    group: Optional["Group"] = None
    """The unsatisfied :class:`.Group`."""

    @property
    def arguments(self) -> tuple["Argument", ...]:
        """Every member of the group; each is an acceptable alternative."""
        return self.group.arguments if self.group is not None else ()

    def _message(self):
        alternatives = "{" + ", ".join(a.display_name for a in self.arguments) + "}"
        return f"Exactly one of the following arguments is required: {alternatives}."
