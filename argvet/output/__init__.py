__all__ = [
    "Output",
    "SilentOutput",
    "StdOutput",
]

from argvet.output.protocols import Output
from argvet.output.silent import SilentOutput
from argvet.output.std import StdOutput
