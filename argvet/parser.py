import logging
import shlex
import sys
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any, Literal, TypeVar

from attrs import define, field, setters

from argvet.argument import Argument, Switch, Syntax
from argvet.exceptions import (
    ArgvetError,
    RegistrationConflictError,
    SpecificationError,
    UnexpectedArgumentError,
    UnknownArgumentError,
)
from argvet.group import Group
from argvet.output.protocols import Output
from argvet.output.std import StdOutput
from argvet.token import Token, TokenStream
from argvet.utils import frozen, is_number, program_name

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=Argument)


class State(Enum):
    """Lifecycle of a :class:`Parser`. A parser parses exactly once."""

    IDLE = "idle"
    SCANNING = "scanning"
    MATCHING = "matching"
    DISPATCHING = "dispatching"
    VALIDATING = "validating"
    DONE = "done"
    FAILED = "failed"


@frozen(kw_only=True)
class ParseResult:
    """Outcome of :meth:`Parser.parse`."""

    error: ArgvetError | None = None
    """The single error that stopped the parse, if any."""

    requested: Literal["usage", "version"] | None = None
    """Set if the help or version switch was supplied; parsing stopped after rendering it."""

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        """Raise :attr:`error` if the parse failed."""
        if self.error is not None:
            raise self.error


def normalize_tokens(tokens: None | str | Iterable[str]) -> list[str]:
    if tokens is None:
        tokens = sys.argv[1:]  # Remove the executable
    elif isinstance(tokens, str):
        tokens = shlex.split(tokens)
    else:
        tokens = list(tokens)
    return tokens


def _single_character(instance, attribute, value: str):
    if len(value) != 1:
        raise SpecificationError(f"{attribute.name} must be a single character; got {value!r}.")


def _non_empty_prefix(instance, attribute, value: str):
    if not value or any(c.isspace() for c in value):
        raise SpecificationError(f"{attribute.name} must be a non-empty string without whitespace; got {value!r}.")


@define
class Parser:
    """Owns argument specifications and constraint groups, and parses a command line against them.

    .. code-block:: python

        from argvet import Parser, Switch, Value

        parser = Parser("demo", version="1.0")
        count = parser.add(Value("c", "count", "Number of repetitions.", type=int, default=1))
        verbose = parser.add(Switch("v", "verbose", "Print more."))

        result = parser.parse(["--count=3", "-v"])
        assert result.ok and count.value == 3 and verbose.value

    A parser is single-use: construct a fresh parser (and fresh arguments) for every parse.
    """

    name: str = field(factory=program_name, on_setattr=setters.frozen)
    """Program name shown on the usage page. Defaults to the basename of ``sys.argv[0]``."""

    version: str | None = field(default=None, kw_only=True, on_setattr=setters.frozen)
    """Version string. If provided, a ``--version`` switch is registered."""

    help: str = field(default="", kw_only=True)
    """Description shown on the usage page."""

    delimiter: str = field(default="=", kw_only=True, validator=_single_character, on_setattr=setters.frozen)
    """Character separating a flag or name from an inline value."""

    flag_prefix: str = field(default="-", kw_only=True, validator=_non_empty_prefix, on_setattr=setters.frozen)
    """Prefix of single-character flags."""

    name_prefix: str = field(default="--", kw_only=True, validator=_non_empty_prefix, on_setattr=setters.frozen)
    """Prefix of long names."""

    end_of_options_delimiter: str = field(default="--", kw_only=True, on_setattr=setters.frozen)
    """Every token after this one is positional. Set to an empty string to disable."""

    add_help: bool = field(default=True, kw_only=True, on_setattr=setters.frozen)
    """Register the ``-h/--help`` switch."""

    output: Output = field(factory=StdOutput, kw_only=True)
    """Formatter invoked for usage, version and failures."""

    exit_on_error: bool = field(default=True, kw_only=True)
    """Default for :meth:`__call__`: exit with status 1 on failure instead of raising."""

    _arguments: list[Argument] = field(factory=list, init=False)
    _groups: list[Group] = field(factory=list, init=False)
    _state: State = field(default=State.IDLE, init=False)
    _requested: Literal["usage", "version"] | None = field(default=None, init=False)
    _help_switch: Switch | None = field(default=None, init=False)
    _version_switch: Switch | None = field(default=None, init=False)

    def __attrs_post_init__(self):
        if self.delimiter.isspace() or self.delimiter in self.flag_prefix + self.name_prefix:
            raise SpecificationError(f"Delimiter {self.delimiter!r} cannot be whitespace or part of a prefix.")
        if self.add_help:
            self._help_switch = self.add(Switch("h", "help", "Displays usage information and exits."))
        if self.version is not None:
            self._version_switch = self.add(Switch("", "version", "Displays version information and exits."))

    ###################
    # Introspection   #
    ###################
    @property
    def syntax(self) -> Syntax:
        return Syntax(flag_prefix=self.flag_prefix, name_prefix=self.name_prefix, delimiter=self.delimiter)

    @property
    def arguments(self) -> tuple[Argument, ...]:
        """All registered arguments, in registration order."""
        return tuple(self._arguments)

    @property
    def groups(self) -> tuple[Group, ...]:
        """All registered constraint groups, in registration order."""
        return tuple(self._groups)

    @property
    def state(self) -> State:
        return self._state

    @property
    def help_switch(self) -> Switch | None:
        return self._help_switch

    @property
    def version_switch(self) -> Switch | None:
        return self._version_switch

    def values(self) -> dict[str, Any]:
        """Resolved value of every user-registered argument, keyed by its :attr:`.Argument.display_name`."""
        return {
            argument.display_name: argument.value
            for argument in self._arguments
            if argument is not self._help_switch and argument is not self._version_switch
        }

    ###################
    # Registration    #
    ###################
    def _check_mutable(self):
        if self._state is not State.IDLE:
            raise RuntimeError("Cannot modify a Parser after parsing; construct a fresh Parser.")

    def _check_identity(self, argument: Argument):
        syntax = self.syntax
        for part in (argument.flag, argument.name):
            if part and self.delimiter in part:
                raise SpecificationError(f"Argument identity {part!r} cannot contain the delimiter {self.delimiter!r}.")
        if argument.flag and argument.flag in syntax.flag_prefix + syntax.name_prefix:
            raise SpecificationError(f"Flag {argument.flag!r} cannot be a prefix character.")
        if argument.name and (
            argument.name.startswith(syntax.flag_prefix) or argument.name.startswith(syntax.name_prefix)
        ):
            raise SpecificationError(f"Name {argument.name!r} must be given without a prefix.")

    def _identity_keys(self, argument: Argument) -> set[tuple[str, str]]:
        if argument.positional:
            return {("positional", argument.name)}
        syntax = self.syntax
        keys = set()
        if argument.flag:
            keys.add(("keyword", syntax.flag_prefix + argument.flag))
        if argument.name:
            keys.add(("keyword", syntax.name_prefix + argument.name))
        return keys

    def _check_registrable(self, arguments: Sequence[Argument]):
        """Raise if any of ``arguments`` cannot be registered; the registry is not modified."""
        taken = {key: existing for existing in self._arguments for key in self._identity_keys(existing)}
        positionals = [a for a in self._arguments if a.positional]

        for argument in arguments:
            if not isinstance(argument, Argument):
                raise TypeError(f"Expected an Argument; got {argument!r}.")
            if any(argument is existing for existing in self._arguments):
                raise RegistrationConflictError(f'Argument "{argument.display_name}" is already registered.')
            if argument.tokens or argument.group is not None:
                raise RegistrationConflictError(f'Argument "{argument.display_name}" belongs to another parser.')
            self._check_identity(argument)

            for key in self._identity_keys(argument):
                if key in taken:
                    raise RegistrationConflictError(
                        f'Argument identity "{key[1]}" is already registered by "{taken[key].display_name}".'
                    )
                taken[key] = argument

            if argument.positional:
                if any(p.multiple for p in positionals):
                    raise SpecificationError(
                        f'Cannot register positional "{argument.name}" after a positional that collects all remaining tokens.'
                    )
                if argument.required and any(not p.required for p in positionals):
                    raise SpecificationError(
                        f'Cannot register required positional "{argument.name}" after an optional positional.'
                    )
                positionals.append(argument)

    def _register(self, argument: Argument):
        argument.syntax = self.syntax
        self._arguments.append(argument)
        logger.debug("Registered %s %r.", type(argument).__name__, argument.display_name)

    def add(self, argument: A) -> A:
        """Register an argument.

        Raises
        ------
        RegistrationConflictError
            The argument's flag or name is already registered.
        SpecificationError
            The argument cannot be registered with this parser's syntax or positional ordering.

        Returns
        -------
        Argument
            The registered ``argument``, for convenient assignment.
        """
        self._check_mutable()
        self._check_registrable([argument])
        self._register(argument)
        return argument

    def _check_groupable(self, group: Group, pending: Sequence[Argument] = ()):
        """Raise if ``group`` cannot be registered once ``pending`` arguments are; nothing is modified."""
        if not isinstance(group, Group):
            raise TypeError(f"Expected a Group; got {group!r}.")
        if any(group is existing for existing in self._groups):
            raise RegistrationConflictError("Group is already registered.")
        known = [*self._arguments, *pending]
        for argument in group.arguments:
            if not any(argument is registered for registered in known):
                raise RegistrationConflictError(
                    f'Argument "{argument.display_name}" must be registered before it is grouped.'
                )
            if argument.group is not None:
                raise RegistrationConflictError(f'Argument "{argument.display_name}" already belongs to a group.')
            if argument is self._help_switch or argument is self._version_switch:
                raise RegistrationConflictError(f'Argument "{argument.display_name}" cannot be grouped.')

    def add_group(self, group: Group) -> Group:
        """Register a constraint group over previously registered arguments.

        Raises
        ------
        RegistrationConflictError
            A member is not registered with this parser, or already belongs to another group.
        """
        self._check_mutable()
        self._check_groupable(group)
        for argument in group.arguments:
            argument.group = group
        self._groups.append(group)
        return group

    def xor(self, *arguments: Argument, required: bool = True, name: str = "") -> Group:
        """Register ``arguments`` (those not yet registered) and group them as mutually exclusive.

        By default exactly one of them must be supplied.
        """
        self._check_mutable()
        new = [a for a in arguments if not any(a is registered for registered in self._arguments)]
        group = Group(arguments, required=required, name=name)
        self._check_registrable(new)
        self._check_groupable(group, pending=new)
        for argument in new:
            self._register(argument)
        return self.add_group(group)

    ###################
    # Parsing         #
    ###################
    def _candidates(self) -> list[str]:
        return [n for argument in self._arguments for n in argument.names]

    def _find(self, text: str) -> Argument | None:
        # Identities are unique, so registration order only matters if two arguments could match.
        for argument in self._arguments:
            if argument.matches(text):
                return argument
        return None

    def _is_flag_shaped(self, text: str) -> bool:
        if text == self.flag_prefix:
            return False
        if not (text.startswith(self.flag_prefix) or text.startswith(self.name_prefix)):
            return False
        if is_number(text) and self._find(text) is None:
            return False
        return True

    def _consume(self, argument: Argument, keyword: str | None, inline: str | None, stream: TokenStream):
        self._state = State.DISPATCHING
        logger.debug("Dispatching token %d %r to %r.", stream.position, stream.current, argument.display_name)
        error = argument.consume(keyword, inline, stream)
        if error is None:
            if argument is self._help_switch:
                self._requested = "usage"
            elif argument is self._version_switch:
                self._requested = "version"
        return error

    def _dispatch_positional(self, stream: TokenStream) -> ArgvetError | None:
        for argument in self._arguments:
            if argument.positional and not argument.is_filled:  # pyright: ignore[reportAttributeAccessIssue]
                return self._consume(argument, None, stream.current, stream)
        return UnexpectedArgumentError(token=Token(value=stream.current, index=stream.position))

    def _dispatch_flag(self, stream: TokenStream) -> ArgvetError | None:
        syntax = self.syntax
        text = stream.current
        keyword, inline = syntax.split(text)

        if (argument := self._find(text)) is not None:
            return self._consume(argument, keyword, inline, stream)

        unknown = UnknownArgumentError(
            token=Token(keyword=keyword, value=text, index=stream.position),
            candidates=self._candidates(),
        )

        # Combined short flags: "-abc" -> "-a", "-b", "-c".
        # Length has to be greater than prefix + 1 character to be exploded.
        if self.name_prefix != self.flag_prefix and keyword.startswith(self.name_prefix):
            return unknown
        if not keyword.startswith(self.flag_prefix):
            return unknown
        chars = keyword[len(self.flag_prefix) :]
        if len(chars) < 2:
            return unknown

        resolved = []
        for position, char in enumerate(chars):
            flag = self.flag_prefix + char
            argument = self._find(flag)
            if argument is None:
                return unknown
            if argument.takes_value and position != len(chars) - 1:
                unknown.reason = f'"{flag}" requires a value and must be the last flag of a combined group.'
                return unknown
            resolved.append((flag, argument))

        for position, (flag, argument) in enumerate(resolved):
            last = position == len(resolved) - 1
            if error := self._consume(argument, flag, inline if last else None, stream):
                return error
            if self._requested:
                break
        return None

    def _scan(self, stream: TokenStream) -> ArgvetError | None:
        end_of_options = False
        while not stream.exhausted:
            text = stream.current
            if not end_of_options and self.end_of_options_delimiter and text == self.end_of_options_delimiter:
                logger.debug("End of options at token %d.", stream.position)
                end_of_options = True
                stream.advance()
                continue

            self._state = State.MATCHING
            if not end_of_options and self._is_flag_shaped(text):
                error = self._dispatch_flag(stream)
            else:
                error = self._dispatch_positional(stream)

            if error is not None:
                return error
            if self._requested:
                return None
            self._state = State.SCANNING
            stream.advance()
        return None

    def _validate(self) -> ArgvetError | None:
        # Stop at the first failure: arguments in registration order, then groups.
        for argument in self._arguments:
            if (error := argument.validate()) is not None:
                return error
        for group in self._groups:
            if (error := group.evaluate()) is not None:
                return error
        return None

    def parse(self, tokens: None | str | Iterable[str] = None) -> ParseResult:
        """Parse command-line tokens into the registered arguments.

        User-input problems never raise; they are returned in the :class:`ParseResult` after
        :meth:`.Output.failure` has been called.

        Parameters
        ----------
        tokens: None | str | Iterable[str]
            Either a string, or a list of strings to launch a command.
            Defaults to ``sys.argv[1:]``.

        Returns
        -------
        ParseResult
            On success, every argument's resolved value is stable and may be read.
        """
        if self._state is not State.IDLE:
            raise RuntimeError("A Parser can only parse once; construct a fresh Parser.")

        tokens = normalize_tokens(tokens)
        logger.debug("Parsing %r.", tokens)
        self._state = State.SCANNING
        error = self._scan(TokenStream(tokens))

        if error is None and self._requested is None:
            self._state = State.VALIDATING
            error = self._validate()

        if error is not None:
            error.input_tokens = tokens
            self._state = State.FAILED
            logger.debug("Parse failed: %s", error)
            self.output.failure(self, error)
            return ParseResult(error=error)

        self._state = State.DONE
        if self._requested == "usage":
            self.output.usage(self)
        elif self._requested == "version":
            self.output.version(self)
        return ParseResult(requested=self._requested)

    def __call__(
        self,
        tokens: None | str | Iterable[str] = None,
        *,
        exit_on_error: bool | None = None,
    ) -> ParseResult:
        """Host entry point: parse, then exit or raise on failure.

        Exits with status 0 after rendering usage or version text.

        Parameters
        ----------
        tokens: None | str | Iterable[str]
            Defaults to ``sys.argv[1:]``.
        exit_on_error: bool | None
            If there is an error parsing the CLI tokens, invoke ``sys.exit(1)``.
            Otherwise, continue to raise the exception.
            If :obj:`None`, inherits from :attr:`Parser.exit_on_error`.
        """
        result = self.parse(tokens)
        if result.requested is not None:
            sys.exit(0)
        if result.error is not None:
            if self.exit_on_error if exit_on_error is None else exit_on_error:
                sys.exit(1)
            raise result.error
        return result
