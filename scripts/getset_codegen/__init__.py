"""getset_codegen — accessor/mutator synthesis for annotated Rust record types.

Given a struct definition whose fields carry `#[getset2(...)]` directives,
the engine resolves each field's directives against the type-wide defaults
and emits one `impl` block of getters and setters.

Public API (re-exported from submodules):

Enums (from types.py):
    Mode        — get_ref, get_copy, get_mut, set, set_with
    Visibility  — pub, pub(crate), pub(super), pub(self), inherited
    TypeShape   — struct, enum, union
    GenericKind — lifetime, type, const
    Receiver    — &self, &mut self, mut self

Frozen Dataclasses (from types.py):
    MetaItem          — one labeled node of an attribute tree
    Directive         — one requested accessor/mutator
    ParsedAnnotation  — explicit directives + skip set of one annotation block
    Field             — one field of the annotated type
    GenericParam      — one generic parameter
    TypeDef           — the annotated type
    MethodSignature   — receiver, parameter, return type, body
    MethodDescriptor  — one generated method

Configuration (from config.py):
    GeneratorConfig   — inline / distinct_super_visibility / inherit_unannotated

Errors (from errors.py):
    GetsetError and its subclasses, one per error kind.

Engine:
    parse_meta(text)                       — attribute text → MetaItems (meta.py)
    parse_annotation(items)                — MetaItems → ParsedAnnotation (directives.py)
    build_global_defaults(items)           — type annotation → defaults (directives.py)
    resolve_field(field, defaults)         — final directives of a field (resolver.py)
    synthesize(field, directive)           — MethodDescriptor (synthesis.py)
    produce(typedef) / generate(typedef)   — whole type (synthesis.py)

I/O (from loader.py, gen_impls.py):
    load_types(path)                       — YAML → TypeDefs
    generate_impls(input, target, ...)     — load, render, splice between markers, diff
    update_target(types, target, ...)      — splice already-loaded types
"""

from getset_codegen.config import DEFAULT_CONFIG, GeneratorConfig
from getset_codegen.directives import build_global_defaults, parse_annotation
from getset_codegen.errors import (
    AnnotationSyntaxError,
    GetsetError,
    InvalidAttributeError,
    InvalidSkipError,
    InvalidVisibilityError,
    MissingFieldNameError,
    TypeDefinitionError,
    TypeLevelSkipError,
    UnsupportedShapeError,
)
from getset_codegen.gen_impls import (
    GENERATED_BEGIN,
    GENERATED_END,
    MarkerError,
    generate_impls,
    render_types,
    update_target,
)
from getset_codegen.loader import load_types, loads_types
from getset_codegen.meta import parse_meta
from getset_codegen.resolver import resolve_field
from getset_codegen.synthesis import (
    GeneratedImpl,
    generate,
    method_name,
    produce,
    signature_for,
    synthesize,
)
from getset_codegen.types import (
    ALL_MODES,
    Directive,
    Field,
    GenericKind,
    GenericParam,
    MetaItem,
    MethodDescriptor,
    MethodSignature,
    Mode,
    ParsedAnnotation,
    Receiver,
    TypeDef,
    TypeShape,
    Visibility,
)

__all__ = [
    # Enums
    "Mode",
    "Visibility",
    "TypeShape",
    "GenericKind",
    "Receiver",
    "ALL_MODES",
    # Dataclasses
    "MetaItem",
    "Directive",
    "ParsedAnnotation",
    "Field",
    "GenericParam",
    "TypeDef",
    "MethodSignature",
    "MethodDescriptor",
    "GeneratedImpl",
    # Config
    "GeneratorConfig",
    "DEFAULT_CONFIG",
    # Errors
    "GetsetError",
    "AnnotationSyntaxError",
    "InvalidAttributeError",
    "InvalidSkipError",
    "InvalidVisibilityError",
    "TypeLevelSkipError",
    "UnsupportedShapeError",
    "MissingFieldNameError",
    "TypeDefinitionError",
    "MarkerError",
    # Engine
    "parse_meta",
    "parse_annotation",
    "build_global_defaults",
    "resolve_field",
    "method_name",
    "synthesize",
    "signature_for",
    "produce",
    "generate",
    # I/O
    "load_types",
    "loads_types",
    "generate_impls",
    "render_types",
    "update_target",
    "GENERATED_BEGIN",
    "GENERATED_END",
]
