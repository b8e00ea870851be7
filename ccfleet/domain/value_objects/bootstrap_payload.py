"""
Bootstrap Payload Value Object

Architectural Intent:
- Opaque, immutable user-data blob forwarded to every connector instance
- The provisioning core never parses it; it only builds or forwards it
"""

import base64
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping


@dataclass(frozen=True)
class BootstrapPayload:
    data: bytes = b""

    def __post_init__(self) -> None:
        if not isinstance(self.data, bytes):
            raise TypeError("Bootstrap payload must be bytes")

    @staticmethod
    def from_file(path: str) -> "BootstrapPayload":
        return BootstrapPayload(Path(path).read_bytes())

    @staticmethod
    def from_parameters(
        parameters: Mapping[str, str], section: str = "CONNECTOR"
    ) -> "BootstrapPayload":
        """Render runtime registration parameters as an INI-style section."""
        lines = [f"[{section}]"]
        lines.extend(f"{key}={parameters[key]}" for key in sorted(parameters))
        return BootstrapPayload(("\n".join(lines) + "\n").encode("utf-8"))

    def encoded(self) -> str:
        """Base64 form expected by launch template user data."""
        return base64.b64encode(self.data).decode("ascii")

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"BootstrapPayload({len(self.data)} bytes)"
