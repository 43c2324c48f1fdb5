from __future__ import annotations

from typing import Sequence

import markdown

from .domain.exceptions import RenderFailure

DEFAULT_EXTENSIONS: tuple[str, ...] = ("fenced_code",)


class PythonMarkdownRenderer:
    """Markdown to HTML fragment, with fenced code blocks on by default.

    Raw inline HTML, including tag names with dashes or underscores, passes
    through untouched.
    """

    def __init__(self, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> None:
        self.extensions = list(extensions)

    def render(self, markdown_text: str) -> str:
        try:
            # A fresh Markdown instance per call: instances keep state and are not thread safe.
            return markdown.markdown(markdown_text, extensions=self.extensions)
        except Exception as e:
            raise RenderFailure("markdown_render_failed") from e
