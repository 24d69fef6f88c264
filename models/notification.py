from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4


@dataclass(frozen=True)
class Notification:
    """Toast-style message shown to the user until dismissed."""

    title: str
    description: str
    variant: str = "default"
    id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"
