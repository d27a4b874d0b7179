import pytest
from rich.console import Console

from argvet import Parser, SilentOutput


@pytest.fixture
def parser():
    return Parser("prog", output=SilentOutput(), exit_on_error=False)


@pytest.fixture
def console():
    return Console(width=70, force_terminal=True, highlight=False, color_system=None, legacy_windows=False)
