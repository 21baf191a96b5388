"""Exception hierarchy for getset_codegen.

Every detectable problem is fatal for the type being generated: there is no
recovery path and no partial output. Messages follow one shape: what went
wrong, where (type/field context plus the offending annotation), and how to
fix it.

Hierarchy:
    GetsetError
    ├── AnnotationSyntaxError   — attribute text could not be tokenized/parsed
    ├── InvalidAttributeError   — unknown directive label
    ├── InvalidSkipError        — unknown skip target
    ├── InvalidVisibilityError  — bad `pub` argument
    ├── TypeLevelSkipError      — `skip` used on the type-wide annotation
    ├── UnsupportedShapeError   — the type is not a single-shape record
    ├── MissingFieldNameError   — a field with directives has no name
    └── TypeDefinitionError     — malformed YAML type definition
"""

from __future__ import annotations


class GetsetError(Exception):
    """Base class for all generation failures."""


class AnnotationSyntaxError(GetsetError):
    """Raised when attribute text is not a comma-separated list of meta items."""


class InvalidAttributeError(GetsetError):
    """Raised for a directive label outside skip/get_ref/get_copy/get_mut/set/set_with."""


class InvalidSkipError(GetsetError):
    """Raised for a `skip(...)` argument that is not one of the five mode labels."""


class InvalidVisibilityError(GetsetError):
    """Raised for a `pub` argument other than bare `pub` or pub = "crate"|"super"|"self"."""


class TypeLevelSkipError(GetsetError):
    """Raised when the type-wide annotation contains `skip`.

    Type-wide defaults cannot themselves be conditionally suppressed; skip
    belongs on the individual fields that should not inherit a default.
    """


class UnsupportedShapeError(GetsetError):
    """Raised when generation is requested for an enum or union."""


class MissingFieldNameError(GetsetError):
    """Raised when a tuple-struct field resolves to at least one directive."""


class TypeDefinitionError(GetsetError):
    """Raised when a YAML type definition is malformed or missing required keys."""
