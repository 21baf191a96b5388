"""Field directive resolver.

Merges one field's explicit directives with the type-wide defaults:

1. Parse the field annotation (explicit directives + skip set).
2. Note whether the field explicitly asked for a ref or copy getter.
3. Fold the defaults in order, appending a default unless its mode is
   skipped, already present, or it is a ref/copy getter and the field chose
   its own.

Visibility is left unset here; MethodDescriptor resolves unset visibility to
the field's declared one at render time.
"""

from __future__ import annotations

import functools
import logging

from getset_codegen.config import DEFAULT_CONFIG, GeneratorConfig
from getset_codegen.directives import parse_annotation
from getset_codegen.types import Directive, Field, ParsedAnnotation

logger = logging.getLogger(__name__)


def _inherit(
    acc: tuple[Directive, ...],
    default: Directive,
    *,
    parsed: ParsedAnnotation,
    had_ref_or_copy: bool,
) -> tuple[Directive, ...]:
    if default.mode in parsed.skip:
        return acc
    if any(d.mode == default.mode for d in acc):
        return acc
    if default.mode.is_getter and had_ref_or_copy:
        return acc
    return acc + (default,)


def resolve_field(
    field: Field,
    global_defaults: tuple[Directive, ...],
    *,
    context: str | None = None,
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> tuple[Directive, ...]:
    """Return the field's final, ordered directive list.

    Explicit field directives come first, in annotation order, followed by
    inherited defaults in their declaration order.
    """
    if field.annotation is None and not config.inherit_unannotated:
        return ()

    where = context or (field.name or "<unnamed field>")
    parsed = parse_annotation(field.annotation, context=where, config=config)
    had_ref_or_copy = any(d.mode.is_getter for d in parsed.directives)

    step = functools.partial(_inherit, parsed=parsed, had_ref_or_copy=had_ref_or_copy)
    resolved = functools.reduce(step, global_defaults, parsed.directives)
    logger.debug("Resolved %s: %s", where, [d.mode.value for d in resolved])
    return resolved
