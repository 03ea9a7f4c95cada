"""Build errors raised by the module parser, transformer and graph builder.

Every error carries the path of the module whose processing failed. None of
them is caught inside the core: the first one aborts the build.
"""

from __future__ import annotations


class BundleError(Exception):
    """Base class for failures tied to one module path."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message

    def location(self) -> str:
        return self.path


class ReadError(BundleError):
    """A module path could not be opened, read or decoded as UTF-8.

    A specifier that resolves to a missing file surfaces here too.
    """


class ModuleSyntaxError(BundleError):
    """A module's source could not be parsed."""

    def __init__(
        self,
        path: str,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(path, message)
        self.line = line
        self.column = column

    def location(self) -> str:
        if self.line is None:
            return self.path
        return f"{self.path}:{self.line}:{self.column}"


class TransformError(ModuleSyntaxError):
    """The module uses a construct the transformer cannot rewrite."""


__all__ = ["BundleError", "ModuleSyntaxError", "ReadError", "TransformError"]
