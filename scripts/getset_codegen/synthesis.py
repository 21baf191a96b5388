"""Method synthesizer and whole-type driver.

Maps each resolved directive of each field to a MethodDescriptor (name,
signature, body) and renders the type's implementation block with Jinja2.

Public API:
    method_name(field_name, mode)         → str
    synthesize(field, directive)          → MethodDescriptor
    signature_for(descriptor)             → MethodSignature
    implement(field, defaults, ...)       → list[MethodDescriptor]
    produce(typedef, config)              → GeneratedImpl
    generate(typedef, config)             → str  (rendered impl block)

Design notes:
- Every branch on Mode is exhaustive and ends in an unreachable raise.
- produce() builds all descriptors for every field before anything is
  rendered, so a failing field aborts the whole type with no output.
"""

from __future__ import annotations

import logging
import pathlib
from dataclasses import dataclass

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from getset_codegen.config import DEFAULT_CONFIG, GeneratorConfig
from getset_codegen.directives import build_global_defaults
from getset_codegen.errors import MissingFieldNameError, UnsupportedShapeError
from getset_codegen.resolver import resolve_field
from getset_codegen.types import (
    Directive,
    Field,
    MethodDescriptor,
    MethodSignature,
    Mode,
    Receiver,
    TypeDef,
    TypeShape,
)

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = pathlib.Path(__file__).parent / "templates"
_TEMPLATE_NAME = "impl_block.rs.j2"

RAW_PREFIX = "r#"


# ─── Naming ───────────────────────────────────────────────────────────────────


def unraw(name: str) -> str:
    """Strip the raw-identifier escape: 'r#type' → 'type'."""
    return name[len(RAW_PREFIX):] if name.startswith(RAW_PREFIX) else name


def method_name(field_name: str, mode: Mode) -> str:
    """Name of the method generated for field_name in mode.

    Plain getters reuse the field name as written (a raw identifier stays
    raw so the method name is still legal). Affixed names use the unescaped
    field name: r#type → set_type, type_mut.
    """
    if not mode.prefix and not mode.suffix:
        return field_name
    return f"{mode.prefix}{unraw(field_name)}{mode.suffix}"


# ─── Descriptors ──────────────────────────────────────────────────────────────


def synthesize(field: Field, directive: Directive, *, context: str = "") -> MethodDescriptor:
    """Build the descriptor for one resolved directive of one field.

    Raises
    ------
    MissingFieldNameError
        If the field has no name (tuple-struct field).
    """
    if field.name is None:
        raise MissingFieldNameError(
            f"Expected the field to have a name: a {field.ty} field of "
            f"{context or 'the type'} requests `{directive.mode.value}`. "
            f"Accessors can only be generated for named fields. "
            f"Fix: use a struct with named fields or remove the annotation."
        )
    return MethodDescriptor(
        name=method_name(field.name, directive.mode),
        mode=directive.mode,
        visibility=directive.resolved_visibility,
        is_const=bool(directive.is_const),
        field=field,
    )


def signature_for(descriptor: MethodDescriptor) -> MethodSignature:
    """Receiver, parameter, return type and body statements for a descriptor."""
    ty = descriptor.field.ty
    target = f"self.{descriptor.field.name}"
    mode = descriptor.mode
    if mode == Mode.GET_REF:
        return MethodSignature(Receiver.SHARED, None, f"&{ty}", (f"&{target}",))
    if mode == Mode.GET_COPY:
        return MethodSignature(Receiver.SHARED, None, ty, (target,))
    if mode == Mode.GET_MUT:
        return MethodSignature(Receiver.EXCLUSIVE, None, f"&mut {ty}", (f"&mut {target}",))
    if mode == Mode.SET:
        return MethodSignature(
            Receiver.EXCLUSIVE, f"val: {ty}", "&mut Self", (f"{target} = val;", "self")
        )
    if mode == Mode.SET_WITH:
        return MethodSignature(
            Receiver.OWNED, f"val: {ty}", "Self", (f"{target} = val;", "self")
        )
    raise AssertionError(f"unhandled mode {mode!r}")


def render_head(descriptor: MethodDescriptor) -> str:
    """The `pub const fn name(&self, ...) -> T` line, without the brace."""
    sig = signature_for(descriptor)
    params = sig.receiver.value if sig.parameter is None else f"{sig.receiver.value}, {sig.parameter}"
    qualifiers = [descriptor.visibility_token, "const" if descriptor.is_const else ""]
    lead = " ".join(q for q in qualifiers if q)
    head = f"fn {descriptor.name}({params}) -> {sig.returns}"
    return f"{lead} {head}" if lead else head


def implement(
    field: Field,
    global_defaults: tuple[Directive, ...],
    *,
    context: str = "",
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> list[MethodDescriptor]:
    """Descriptors for every resolved directive of one field, in order."""
    where = f"{context}.{field.name or '<unnamed>'}" if context else None
    directives = resolve_field(field, global_defaults, context=where, config=config)
    return [synthesize(field, d, context=context) for d in directives]


# ─── Whole type ───────────────────────────────────────────────────────────────


def split_for_impl(typedef: TypeDef) -> tuple[str, str, tuple[str, ...]]:
    """Return (impl generics, type generics, where predicates) for the impl header."""
    if not typedef.generics:
        return "", "", typedef.where_predicates
    impl_generics = "<" + ", ".join(p.impl_form() for p in typedef.generics) + ">"
    ty_generics = "<" + ", ".join(p.type_form() for p in typedef.generics) + ">"
    return impl_generics, ty_generics, typedef.where_predicates


@dataclass(frozen=True)
class GeneratedImpl:
    """All methods generated for one type, plus what is needed to render them."""

    typedef: TypeDef
    methods: tuple[MethodDescriptor, ...]
    config: GeneratorConfig = DEFAULT_CONFIG

    def render(self) -> str:
        return render_impl(self)


def produce(typedef: TypeDef, config: GeneratorConfig = DEFAULT_CONFIG) -> GeneratedImpl:
    """Run the engine over a whole type definition.

    Raises
    ------
    UnsupportedShapeError
        If the type is an enum or union.
    GetsetError
        Any annotation error on the type or one of its fields.
    """
    if typedef.shape != TypeShape.STRUCT:
        raise UnsupportedShapeError(
            f"#[derive(Getset2)] is only defined for structs, but {typedef.name} "
            f"is a {typedef.shape.value}. "
            f"This facility supports only single-shape record types. "
            f"Fix: remove the derive from {typedef.name}."
        )
    defaults = build_global_defaults(
        typedef.annotation, context=typedef.name, config=config
    )
    methods: list[MethodDescriptor] = []
    for field in typedef.fields:
        methods.extend(implement(field, defaults, context=typedef.name, config=config))
    logger.debug("Generated %d method(s) for %s", len(methods), typedef.name)
    return GeneratedImpl(typedef=typedef, methods=tuple(methods), config=config)


def generate(typedef: TypeDef, config: GeneratorConfig = DEFAULT_CONFIG) -> str:
    """Render the implementation block for typedef."""
    return produce(typedef, config).render()


# ─── Rendering ────────────────────────────────────────────────────────────────


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _doc_lines(docs: tuple[str, ...]) -> list[str]:
    # each rendered line must stay behind its own `///`
    return [line for doc in docs for line in (doc.splitlines() or [""])]


def render_impl(generated: GeneratedImpl) -> str:
    """Render a GeneratedImpl as one Rust `impl` block."""
    impl_generics, ty_generics, where_predicates = split_for_impl(generated.typedef)
    methods = [
        {
            "docs": _doc_lines(d.field.docs),
            "head": render_head(d),
            "body": signature_for(d).body,
        }
        for d in generated.methods
    ]
    template = _environment().get_template(_TEMPLATE_NAME)
    return template.render(
        type_name=generated.typedef.name,
        impl_generics=impl_generics,
        ty_generics=ty_generics,
        where_predicates=where_predicates,
        methods=methods,
        inline=generated.config.inline,
    )
