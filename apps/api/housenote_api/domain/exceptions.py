from __future__ import annotations


class HouseNoteError(Exception):
    pass


class PathError(ValueError):
    pass


class NotFoundError(HouseNoteError):
    pass


class RenderFailure(HouseNoteError):
    pass


class WriteFailure(HouseNoteError):
    """Publish could not store the note. The message is returned to the client as-is."""


class InvalidPath(WriteFailure):
    pass


class BrowseOverflow(HouseNoteError):
    pass
