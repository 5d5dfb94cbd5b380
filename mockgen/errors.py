from __future__ import annotations


class SwiftSyntaxError(ValueError):
    """Raised when tree-sitter-swift reports an ERROR or MISSING node in the source."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class UnsupportedDeclarationKind(ValueError):
    """
    A marker was attached to a declaration that is not a protocol,
    class/struct or standalone function (enum, extension, var, ...).
    Aborts generation for that one annotation only.
    """

    def __init__(self, kind: str, name: str = "", line: int | None = None) -> None:
        self.kind = kind
        self.name = name
        self.line = line
        label = f"'{name}' " if name else ""
        super().__init__(f"Unsupported declaration kind for mock generation: {label}({kind})")
