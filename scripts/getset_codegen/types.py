"""Type definitions for the getset code generator.

All enums are str Enums so annotation labels and visibility tokens compare
equal to their source spelling. All dataclasses are frozen: a type
definition is immutable input, and every intermediate value (parsed
annotation, resolved directives, method descriptors) is built once per
generation pass and discarded.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ─── Enums ────────────────────────────────────────────────────────────────────


class Mode(str, Enum):
    """The five accessor/mutator shapes.

    Values are the annotation labels that request each shape.
    """

    GET_REF = "get_ref"
    GET_COPY = "get_copy"
    GET_MUT = "get_mut"
    SET = "set"
    SET_WITH = "set_with"

    @property
    def prefix(self) -> str:
        return _AFFIXES[self][0]

    @property
    def suffix(self) -> str:
        return _AFFIXES[self][1]

    @property
    def is_getter(self) -> bool:
        """True for the two read-only accessors that exclude each other."""
        return self in REF_OR_COPY


# (prefix, suffix) per mode.
_AFFIXES: dict[Mode, tuple[str, str]] = {
    Mode.GET_REF: ("", ""),
    Mode.GET_COPY: ("", ""),
    Mode.GET_MUT: ("", "_mut"),
    Mode.SET: ("set_", ""),
    Mode.SET_WITH: ("with_", ""),
}

REF_OR_COPY: frozenset[Mode] = frozenset({Mode.GET_REF, Mode.GET_COPY})

ALL_MODES: frozenset[Mode] = frozenset(Mode)


class Visibility(str, Enum):
    """Visibility requested by a directive.

    Values are the rendered Rust tokens, except INHERITED which defers to the
    field's own declared visibility.
    """

    PUBLIC = "pub"
    RESTRICTED_TO_DEFINING_UNIT = "pub(crate)"
    RESTRICTED_TO_SUPER = "pub(super)"  # only with distinct_super_visibility
    RESTRICTED_TO_PARENT = "pub(self)"
    INHERITED = "inherited"


class TypeShape(str, Enum):
    STRUCT = "struct"
    ENUM = "enum"
    UNION = "union"


class GenericKind(str, Enum):
    LIFETIME = "lifetime"
    TYPE = "type"
    CONST = "const"


class Receiver(str, Enum):
    """How a generated method takes `self`."""

    SHARED = "&self"
    EXCLUSIVE = "&mut self"
    OWNED = "mut self"


# ─── Annotation tree ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MetaItem:
    """One labeled node of an attribute tree.

    `get_copy(pub, const)` is MetaItem("get_copy", nested=(MetaItem("pub"),
    MetaItem("const"))); `pub = "crate"` is MetaItem("pub", value="crate",
    quoted=True).

    nested is None when the label has no parentheses and () when it has
    empty ones; the two mean different things for `skip`.
    """

    path: str
    value: str | None = None
    quoted: bool = False
    nested: tuple[MetaItem, ...] | None = None

    @property
    def is_bare(self) -> bool:
        return self.value is None and self.nested is None

    def __str__(self) -> str:
        if self.nested is not None:
            return f"{self.path}({render_meta(self.nested)})"
        if self.value is not None:
            literal = f'"{_escape(self.value)}"' if self.quoted else self.value
            return f"{self.path} = {literal}"
        return self.path


def render_meta(items: tuple[MetaItem, ...]) -> str:
    """Render items back to attribute text, e.g. 'get_ref, set(pub = "crate")'."""
    return ", ".join(str(item) for item in items)


def render_attribute(items: tuple[MetaItem, ...] | None) -> str:
    """Render an annotation block as it would appear on the Rust item."""
    return f"#[getset2({render_meta(items or ())})]"


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


# ─── Directives ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Directive:
    """One requested accessor/mutator for a field.

    visibility and is_const are None when the annotation did not set them.
    """

    mode: Mode
    visibility: Visibility | None = None
    is_const: bool | None = None

    @property
    def resolved_visibility(self) -> Visibility:
        return self.visibility if self.visibility is not None else Visibility.INHERITED


@dataclass(frozen=True)
class ParsedAnnotation:
    """Result of parsing one annotation block: explicit directives plus skip set."""

    directives: tuple[Directive, ...] = ()
    skip: frozenset[Mode] = frozenset()


# ─── Type definition input ────────────────────────────────────────────────────


@dataclass(frozen=True)
class Field:
    """One field of the annotated type.

    visibility is the field's declared visibility token ("" for private,
    "pub", "pub(crate)", "pub(in crate::a)", ...). docs holds doc attribute
    values verbatim, i.e. the text after `///` including its leading space.
    annotation is None when the field carries no annotation block.
    """

    name: str | None
    ty: str
    visibility: str = ""
    docs: tuple[str, ...] = ()
    annotation: tuple[MetaItem, ...] | None = None


@dataclass(frozen=True)
class GenericParam:
    """A generic parameter of the annotated type.

    name includes the leading apostrophe for lifetimes. bounds holds the text
    after `:` (the parameter's type for const generics).
    """

    name: str
    kind: GenericKind = GenericKind.TYPE
    bounds: str | None = None
    default: str | None = None

    def impl_form(self) -> str:
        """Parameter as written in `impl<...>`: bounds kept, default dropped."""
        if self.kind == GenericKind.CONST:
            return f"const {self.name}: {self.bounds}"
        if self.bounds:
            return f"{self.name}: {self.bounds}"
        return self.name

    def type_form(self) -> str:
        """Parameter as written after the type name: bare name."""
        return self.name


@dataclass(frozen=True)
class TypeDef:
    """One annotated type definition, as handed over by the host pipeline."""

    name: str
    fields: tuple[Field, ...] = ()
    shape: TypeShape = TypeShape.STRUCT
    generics: tuple[GenericParam, ...] = ()
    where_predicates: tuple[str, ...] = ()
    annotation: tuple[MetaItem, ...] | None = None


# ─── Synthesis output ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MethodSignature:
    """Signature and body of one generated method."""

    receiver: Receiver
    parameter: str | None
    returns: str
    body: tuple[str, ...]


@dataclass(frozen=True)
class MethodDescriptor:
    """One generated method, ready to render."""

    name: str
    mode: Mode
    visibility: Visibility
    is_const: bool
    field: Field

    @property
    def visibility_token(self) -> str:
        """Rendered visibility; the field's own when the directive inherits it."""
        if self.visibility == Visibility.INHERITED:
            return self.field.visibility
        return self.visibility.value
