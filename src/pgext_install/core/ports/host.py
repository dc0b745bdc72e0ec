from pathlib import Path
from typing import Protocol


class HostLayoutProvider(Protocol):
    def server_include_dir(self) -> Path: ...

    def shared_module_dir(self) -> Path: ...

    def shared_data_dir(self) -> Path: ...
