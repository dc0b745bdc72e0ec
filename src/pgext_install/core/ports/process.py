from collections.abc import Sequence
from typing import Protocol

from pgext_install.models import CommandResult


class CommandRunner(Protocol):
    def __call__(self, args: Sequence[str], timeout: float | None = None) -> CommandResult: ...
