from typing import TYPE_CHECKING

from attrs import define, field

from argvet.exceptions import (
    ArgvetError,
    MutuallyExclusiveViolationError,
    RequiredExclusiveGroupUnsatisfiedError,
    SpecificationError,
)
from argvet.utils import to_tuple_converter

if TYPE_CHECKING:
    from argvet.argument import Argument


def _validate_members(instance, attribute, value: tuple["Argument", ...]):
    from argvet.argument import Argument

    if len(value) < 2:
        raise SpecificationError("A group requires at least two arguments.")
    for argument in value:
        if not isinstance(argument, Argument):
            raise TypeError(f"Group members must be Argument instances; got {argument!r}.")
        if argument.required:
            raise SpecificationError(
                f'Argument "{argument.display_name}" is required on its own; use Group(..., required=True) instead.'
            )
    if len({id(a) for a in value}) != len(value):
        raise SpecificationError("A group cannot contain the same argument twice.")


@define(eq=False, frozen=True)
class Group:
    """Mutual-exclusion constraint over previously registered arguments.

    At most one member may be supplied.
    If ``required`` is :obj:`True`, exactly one member must be supplied.

    .. code-block:: python

        from argvet import Group, Parser, Switch

        parser = Parser("demo")
        a = parser.add(Switch("A", "alpha"))
        b = parser.add(Switch("B", "beta"))
        parser.add_group(Group([a, b], required=True))
    """

    arguments: tuple["Argument", ...] = field(converter=to_tuple_converter, validator=_validate_members)
    """Member arguments, in declaration order. The group does not own them."""

    required: bool = field(default=False, kw_only=True)
    """Exactly one member must be supplied (instead of at most one)."""

    name: str = field(default="", kw_only=True)
    """Optional title used on the usage page."""

    @property
    def matched(self) -> tuple["Argument", ...]:
        """Members that were supplied on the command line, in declaration order."""
        return tuple(a for a in self.arguments if a.is_set)

    def evaluate(self) -> ArgvetError | None:
        """Check the group once all tokens have been consumed.

        Returns
        -------
        ArgvetError | None
            :class:`.MutuallyExclusiveViolationError` naming every supplied member,
            :class:`.RequiredExclusiveGroupUnsatisfiedError` naming every member,
            or :obj:`None` if the constraint holds.
        """
        matched = self.matched
        if len(matched) > 1:
            return MutuallyExclusiveViolationError(group=self, arguments=matched)
        if self.required and not matched:
            return RequiredExclusiveGroupUnsatisfiedError(group=self)
        return None
