from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BrowseEntry:
    is_dir: bool
    uri: str
    title: str

    def as_row(self) -> list:
        return [self.is_dir, self.uri, self.title]
