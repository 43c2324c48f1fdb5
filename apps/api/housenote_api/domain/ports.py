from __future__ import annotations

from typing import BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class NotFoundResolver(Protocol):
    def try_resolve(self, requested: str) -> BinaryIO | None:
        ...


@runtime_checkable
class MarkdownRenderer(Protocol):
    def render(self, markdown_text: str) -> str:
        ...
