__version__ = "0.1.0"

__all__ = [
    "Argument",
    "ArgvetError",
    "BashCompletionOutput",
    "Choices",
    "ConversionError",
    "DuplicateArgumentError",
    "Group",
    "MissingValueError",
    "MultiPositional",
    "MultiSwitch",
    "MultiValue",
    "MutuallyExclusiveViolationError",
    "Output",
    "ParseResult",
    "Parser",
    "Positional",
    "RegistrationConflictError",
    "RequiredArgumentMissingError",
    "RequiredExclusiveGroupUnsatisfiedError",
    "SilentOutput",
    "SpecificationError",
    "State",
    "StdOutput",
    "Switch",
    "Token",
    "UnexpectedArgumentError",
    "UnknownArgumentError",
    "Value",
    "convert",
]

from argvet.argument import (
    Argument,
    MultiPositional,
    MultiSwitch,
    MultiValue,
    Positional,
    Switch,
    Value,
)
from argvet.completion import BashCompletionOutput
from argvet.convert import Choices, convert
from argvet.exceptions import (
    ArgvetError,
    ConversionError,
    DuplicateArgumentError,
    MissingValueError,
    MutuallyExclusiveViolationError,
    RegistrationConflictError,
    RequiredArgumentMissingError,
    RequiredExclusiveGroupUnsatisfiedError,
    SpecificationError,
    UnexpectedArgumentError,
    UnknownArgumentError,
)
from argvet.group import Group
from argvet.output import Output, SilentOutput, StdOutput
from argvet.parser import ParseResult, Parser, State
from argvet.token import Token
