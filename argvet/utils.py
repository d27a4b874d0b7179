"""To prevent circular dependencies, this module should never import anything else from argvet."""

import functools
import os
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

# https://threeofwands.com/attra-iv-zero-overhead-frozen-attrs-classes/
if TYPE_CHECKING:
    from attrs import frozen
    from rich.console import Console
else:
    from attrs import define

    frozen = functools.partial(define, unsafe_hash=True)


_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def is_iterable(obj) -> bool:
    if isinstance(obj, list | tuple | set | dict):  # Fast path for common types
        return True
    return not isinstance(obj, str) and isinstance(obj, Iterable)


def to_tuple_converter(value: None | Any | Iterable[Any]) -> tuple[Any, ...]:
    """Convert a single element or an iterable of elements into a tuple.

    Intended to be used in an ``attrs.Field``. If :obj:`None` is provided, returns an empty tuple.

    Parameters
    ----------
    value: Any | Iterable[Any] | None
        An element, an iterable of elements, or None.

    Returns
    -------
    tuple[Any, ...]: A tuple containing the elements.
    """
    if value is None:
        return ()
    elif is_iterable(value):
        return tuple(value)
    else:
        return (value,)


def is_integer_text(text: str) -> bool:
    """Locale-independent integer grammar: optional sign followed by ASCII digits."""
    return _INTEGER_PATTERN.fullmatch(text) is not None


def is_float_text(text: str) -> bool:
    """Locale-independent float grammar: optional sign, digits, optional decimal point and exponent."""
    return _FLOAT_PATTERN.fullmatch(text) is not None


def is_number(token: str) -> bool:
    """Checks if a token looks like a (possibly negative) number.

    Used to keep tokens such as ``"-2"`` or ``"-1.5e3"`` from being interpreted as options.

    Parameters
    ----------
    token: str
        String to interpret.

    Returns
    -------
    bool
        Whether or not the ``token`` is number-like.
    """
    return is_float_text(token)


def program_name(argv0: str | None = None) -> str:
    """Derive the program name from ``argv[0]``.

    Only the basename is kept, so ``/usr/local/bin/tool`` becomes ``tool``.
    """
    if argv0 is None:
        import sys

        argv0 = sys.argv[0] if sys.argv and sys.argv[0] else "program"
    return os.path.basename(argv0.rstrip("/")) or argv0


def create_error_console_from_console(console: "Console") -> "Console":
    """Create an error console (stderr=True) that inherits settings from a source console.

    Parameters
    ----------
    console : Console
        Source Rich Console to copy settings from.

    Returns
    -------
    Console
        New Rich Console with stderr=True and inherited settings.
    """
    from rich.console import Console

    color_system = console.color_system or "auto"

    return Console(
        stderr=True,
        color_system=color_system,  # type: ignore[arg-type]
        force_terminal=getattr(console, "_force_terminal", None),
        force_jupyter=console.is_jupyter or None,
        force_interactive=console.is_interactive or None,
        soft_wrap=console.soft_wrap,
        width=console._width,
        height=getattr(console, "_height", None),
        tab_size=console.tab_size,
        markup=getattr(console, "_markup", True),
        emoji=getattr(console, "_emoji", True),
        highlight=getattr(console, "_highlight", True),
        no_color=console.no_color,
        legacy_windows=console.legacy_windows,
        safe_box=console.safe_box,
    )
