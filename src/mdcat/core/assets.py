"""Local asset references usable by the display layer"""

import os
from pathlib import Path
from urllib.parse import quote


class AssetResolver:
    """Turns a filesystem path into a `scheme://host/<encoded path>` reference."""

    def __init__(self, scheme: str = "asset", host: str = "localhost") -> None:
        self.scheme = scheme
        self.host = host

    def resolve(self, path: Path) -> str:
        absolute = os.path.abspath(path)
        return f"{self.scheme}://{self.host}/{quote(absolute, safe='')}"

    def is_resolved(self, src: str) -> bool:
        """True for references this resolver already produced."""
        return src.startswith(f"{self.scheme}:")
