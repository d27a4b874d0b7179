"""Usage-text building blocks shared by the output formatters."""

from enum import Enum
from inspect import isclass
from typing import TYPE_CHECKING

from argvet.convert import Choices

if TYPE_CHECKING:
    from argvet.argument import Argument
    from argvet.group import Group
    from argvet.parser import Parser


def short_id(argument: "Argument") -> str:
    """Compact form used on the usage line, e.g. ``-c <integer>`` or ``<file> ...``.

    Optional arguments are wrapped in brackets by :func:`usage_line`, not here.
    """
    if argument.positional:
        text = f"<{argument.name}>"
    else:
        text = argument.names[0]
        if argument.takes_value:
            text += f" <{argument.type_name}>"
    if argument.multiple:
        text += " ..."
    return text


def long_id(argument: "Argument") -> str:
    """Full form used in the argument table, e.g. ``-c, --count <integer>``."""
    if argument.positional:
        text = f"<{argument.name}>"
        if argument.type_name != "string":
            text += f" ({argument.type_name})"
    else:
        text = ", ".join(argument.names)
        if argument.takes_value:
            text += f" <{argument.type_name}>"
    if argument.multiple:
        text += " ..."
    return text


def _group_id(group: "Group") -> str:
    text = "{" + " | ".join(short_id(a) for a in group.arguments) + "}"
    return text if group.required else f"[{text}]"


def usage_line(parser: "Parser") -> str:
    """One-line synopsis: program name followed by every argument in registration order.

    Members of a constraint group are rendered together, at the position of the group's first member.
    """
    parts = [parser.name]
    seen_groups = []
    for argument in parser.arguments:
        if argument.group is not None:
            if any(argument.group is g for g in seen_groups):
                continue
            seen_groups.append(argument.group)
            parts.append(_group_id(argument.group))
        elif argument.required:
            parts.append(short_id(argument))
        else:
            parts.append(f"[{short_id(argument)}]")
    return " ".join(parts)


def choices(argument: "Argument") -> tuple[str, ...]:
    """Allowed values of a value-bearing argument with a closed set of choices; empty otherwise."""
    type_ = getattr(argument, "type", None)
    if isinstance(type_, Choices):
        return type_.values
    if isclass(type_) and issubclass(type_, Enum):
        return tuple(type_.__members__)
    return ()
