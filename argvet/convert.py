from collections.abc import Callable, Iterable
from enum import Enum
from functools import partial
from inspect import isclass
from typing import Any

from attrs import field

from argvet.exceptions import ConversionError
from argvet.token import Token
from argvet.utils import frozen, is_float_text, is_integer_text, to_tuple_converter

__all__ = [
    "Choices",
    "convert",
    "type_name",
]


def _unique_values(instance, attribute, value: tuple[str, ...]):
    if not value:
        raise ValueError("Choices requires at least one allowed value.")
    for v in value:
        if not isinstance(v, str):
            raise TypeError(f"Choices values must be strings; got {v!r}.")
    if len(set(value)) != len(value):
        raise ValueError(f"Choices values must be unique; got {list(value)!r}.")


@frozen
class Choices:
    """A closed enumeration of allowed strings.

    Tokens are checked by exact match; no prefix or case-insensitive matching is performed.

    .. code-block:: python

        from argvet import Choices, Value

        mode = Value("m", "mode", "Run mode.", type=Choices("fast", "safe"))
    """

    values: tuple[str, ...] = field(converter=to_tuple_converter, validator=_unique_values)

    def __init__(self, *values: str | Iterable[str]):
        if len(values) == 1 and not isinstance(values[0], str):
            values = tuple(values[0])
        self.__attrs_init__(values)  # pyright: ignore[reportAttributeAccessIssue]

    def __call__(self, text: str) -> str:
        if text in self.values:
            return text
        raise ValueError(f"{text!r} is not one of {self.name}.")

    def __contains__(self, text: object) -> bool:
        return text in self.values

    def __iter__(self):
        return iter(self.values)

    @property
    def name(self) -> str:
        return "|".join(self.values)


def _int(s: str) -> int:
    if not is_integer_text(s):
        raise ValueError(s)
    return int(s)


def _float(s: str) -> float:
    if not is_float_text(s):
        raise ValueError(s)
    return float(s)


def _str(s: str) -> str:
    return s


def _bool(s: str) -> bool:
    s = s.lower()
    if s in {"no", "n", "0", "false", "f"}:
        return False
    elif s in {"yes", "y", "1", "true", "t"}:
        return True
    else:
        # Be conservative when coercing strings into boolean.
        raise ValueError(s)


def _enum(type_: type[Enum], s: str) -> Enum:
    try:
        return type_.__members__[s]
    except KeyError:
        raise ValueError(s) from None


_converters: dict[Any, Callable[[str], Any]] = {
    int: _int,
    float: _float,
    str: _str,
    bool: _bool,
}

_type_names: dict[Any, str] = {
    int: "integer",
    float: "float",
    str: "string",
    bool: "boolean",
}


def type_name(type_: Any) -> str:
    """Human readable name of a converter, used in error messages and usage text.

    Parameters
    ----------
    type_: Any
        ``int``, ``float``, ``str``, ``bool``, a :class:`Choices`, an :class:`~enum.Enum` subclass,
        or any callable accepting a single string.

    Returns
    -------
    str
        e.g. ``"integer"`` or ``"fast|safe"``.
    """
    if isclass(type_) and type_ in _type_names:
        return _type_names[type_]
    if isinstance(type_, Choices):
        return type_.name
    if isclass(type_) and issubclass(type_, Enum):
        return "|".join(type_.__members__)
    return getattr(type_, "__name__", type(type_).__name__)


def convert(type_: Any, token: Token | str) -> Any:
    """Convert a single token into ``type_``.

    This is a pure function; it has no side effects.

    Parameters
    ----------
    type_: Any
        Target type. See :func:`type_name` for the supported kinds.
    token: Token | str
        The token (or raw text) to convert.

    Raises
    ------
    ConversionError
        The token's text does not satisfy the target type's grammar.

    Returns
    -------
    Any
        The converted value.
    """
    if isinstance(token, str):
        token = Token(value=token)

    if isclass(type_) and type_ in _converters:
        converter = _converters[type_]
    elif isclass(type_) and issubclass(type_, Enum):
        converter = partial(_enum, type_)
    elif callable(type_):
        converter = type_
    else:
        raise TypeError(f"Cannot convert tokens into {type_!r}; it is not callable.")

    try:
        return converter(token.value)
    except (ValueError, TypeError) as e:
        raise ConversionError(token=token, type_name=type_name(type_)) from e
