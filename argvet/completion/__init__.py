"""Shell completion generation for argvet parsers."""

from argvet.completion.bash import BashCompletionOutput, generate_completion_script

__all__ = [
    "BashCompletionOutput",
    "generate_completion_script",
]
