from __future__ import annotations

from typing import BinaryIO, Iterable

from .domain.ports import NotFoundResolver


class ResolverChain:
    """Resolvers tried in order for a cache path that has no file; the first hit wins."""

    def __init__(self, resolvers: Iterable[NotFoundResolver]) -> None:
        self.resolvers = list(resolvers)

    def try_resolve(self, requested: str) -> BinaryIO | None:
        for resolver in self.resolvers:
            found = resolver.try_resolve(requested)
            if found is not None:
                return found
        return None
