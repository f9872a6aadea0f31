# infrastructure/errors.py
"""
❌ ERRORS

Exceptions raised by the storage layer.
The webhook catches them at the top level and only logs them.
"""


class InfoStoreError(Exception):
    """Base error of the shop-info storage."""


class MirrorReadError(InfoStoreError):
    """The remote mirror could not be read."""

    def __init__(self, status: int, detail: str = ""):
        self.status = status
        self.detail = detail
        super().__init__(f"GitHub read failed: {status} {detail}".strip())


class MirrorWriteError(InfoStoreError):
    """The remote mirror refused the new content."""

    def __init__(self, status: int, detail: str = ""):
        self.status = status
        self.detail = detail
        super().__init__(f"GitHub write failed: {status} - {detail}")
