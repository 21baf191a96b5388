"""Directive grammar parser and type-wide defaults builder.

Public API:
    parse_annotation(items, ...)      → ParsedAnnotation
    build_global_defaults(items, ...) → tuple[Directive, ...]

Design notes:
- The parser is a fold over the annotation's items with an explicit
  accumulator (_ParseState); no state survives between calls.
- Duplicate get_ref/get_copy directives in one field annotation are dropped
  silently (first seen wins). Unknown labels, unknown skip targets and bad
  visibility arguments are fatal. The two paths stay separate.
- The annotation tree is whatever meta.parse_meta (or the YAML loader)
  produced; this module never looks at attribute text.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, replace
from typing import Sequence

from getset_codegen.config import DEFAULT_CONFIG, GeneratorConfig
from getset_codegen.errors import (
    InvalidAttributeError,
    InvalidSkipError,
    InvalidVisibilityError,
    TypeLevelSkipError,
)
from getset_codegen.types import (
    ALL_MODES,
    Directive,
    MetaItem,
    Mode,
    ParsedAnnotation,
    Visibility,
    render_attribute,
)

logger = logging.getLogger(__name__)

SKIP_LABEL = "skip"
CONST_LABEL = "const"
PUB_LABEL = "pub"

_VALID_LABELS: tuple[str, ...] = (SKIP_LABEL, *(m.value for m in Mode))


# ─── Fold accumulator ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class _ParseState:
    directives: tuple[Directive, ...] = ()
    skip: frozenset[Mode] = frozenset()
    had_ref_or_copy: bool = False


@dataclass(frozen=True)
class _Site:
    """Where an annotation came from; used only in error messages."""

    context: str
    block: tuple[MetaItem, ...]

    def describe(self) -> str:
        return f"{render_attribute(self.block)} on {self.context}"


# ─── Item handlers ────────────────────────────────────────────────────────────


def _parse_skip(item: MetaItem, site: _Site) -> frozenset[Mode]:
    """Modes named by one `skip` item; bare `skip` names all of them."""
    if item.value is not None:
        raise InvalidAttributeError(
            f"Invalid attribute `{item}` in {site.describe()}. "
            f"`skip` takes no value; it is written `skip` or `skip(get_ref, set, ...)`. "
            f"Fix: remove the `= ...` part."
        )
    if item.nested is None:
        return ALL_MODES
    modes: set[Mode] = set()
    for target in item.nested:
        mode = _mode_for(target.path)
        if mode is None or not target.is_bare:
            raise InvalidSkipError(
                f"The `skip` in the attributes is invalid: `{target}` in {site.describe()}. "
                f"skip(...) only accepts the mode names {[m.value for m in Mode]}. "
                f"Fix: correct the name or drop it from the skip list."
            )
        modes.add(mode)
    return frozenset(modes)


def _parse_visibility(
    arg: MetaItem, site: _Site, config: GeneratorConfig
) -> Visibility:
    if arg.is_bare:
        return Visibility.PUBLIC
    if arg.nested is not None or not arg.quoted:
        raise InvalidVisibilityError(
            f"Invalid visibility found: `{arg}` in {site.describe()}. "
            f"A restricted visibility is written as a string: "
            f'pub = "crate", pub = "super" or pub = "self". '
            f"Fix: rewrite the argument in that form."
        )
    value = arg.value
    if value == "crate":
        return Visibility.RESTRICTED_TO_DEFINING_UNIT
    if value == "super":
        if config.distinct_super_visibility:
            return Visibility.RESTRICTED_TO_SUPER
        logger.warning(
            'pub = "super" on %s is emitted as pub(crate); '
            "enable distinct_super_visibility to emit pub(super)",
            site.context,
        )
        return Visibility.RESTRICTED_TO_DEFINING_UNIT
    if value == "self":
        return Visibility.RESTRICTED_TO_PARENT
    raise InvalidVisibilityError(
        f'Invalid visibility found: pub = "{value}" in {site.describe()}. '
        f'Accepted values are "crate", "super" and "self"; bare `pub` means public. '
        f"Fix: use one of the accepted values."
    )


def _parse_directive(
    mode: Mode, args: Sequence[MetaItem], site: _Site, config: GeneratorConfig
) -> Directive:
    """Build a Directive from a mode label's nested arguments.

    Labels other than `pub` and bare `const` are ignored. When `pub` is
    repeated the last one wins.
    """
    visibility: Visibility | None = None
    is_const: bool | None = None
    for arg in args:
        if arg.path == PUB_LABEL:
            visibility = _parse_visibility(arg, site, config)
        elif arg.path == CONST_LABEL and arg.is_bare:
            is_const = True
    return Directive(mode=mode, visibility=visibility, is_const=is_const)


def _mode_for(label: str) -> Mode | None:
    try:
        return Mode(label)
    except ValueError:
        return None


def _apply_item(
    state: _ParseState,
    item: MetaItem,
    *,
    site: _Site,
    config: GeneratorConfig,
    exclusive_getters: bool,
) -> _ParseState:
    if item.path == SKIP_LABEL:
        return replace(state, skip=state.skip | _parse_skip(item, site))

    mode = _mode_for(item.path)
    if mode is None or item.value is not None:
        raise InvalidAttributeError(
            f"Invalid attribute `{item}` in {site.describe()}. "
            f"Recognized directives are {list(_VALID_LABELS)}, each optionally "
            f"followed by (pub, const) style arguments. "
            f"Fix: correct or remove the directive."
        )

    if mode.is_getter and exclusive_getters and state.had_ref_or_copy:
        logger.debug("Ignoring %s on %s: a ref/copy getter was already requested",
                     mode.value, site.context)
        return state

    directive = _parse_directive(mode, item.nested or (), site, config)
    return replace(
        state,
        directives=state.directives + (directive,),
        had_ref_or_copy=state.had_ref_or_copy or mode.is_getter,
    )


# ─── Public API ───────────────────────────────────────────────────────────────


def parse_annotation(
    items: Sequence[MetaItem] | None,
    *,
    context: str = "<annotation>",
    config: GeneratorConfig = DEFAULT_CONFIG,
    exclusive_getters: bool = True,
) -> ParsedAnnotation:
    """Decode one annotation block into explicit directives and a skip set.

    Parameters
    ----------
    items:
        The block's top-level items; None or () for an empty block.
    context:
        Human-readable location ("Foo.bar") used in error messages.
    config:
        Generator configuration (visibility collapsing).
    exclusive_getters:
        When True (field annotations), only the first get_ref/get_copy is
        kept. The type-wide builder passes False and applies its own rule.

    Raises
    ------
    InvalidAttributeError, InvalidSkipError, InvalidVisibilityError
    """
    block = tuple(items or ())
    site = _Site(context=context, block=block)
    step = functools.partial(
        _apply_item, site=site, config=config, exclusive_getters=exclusive_getters
    )
    state = functools.reduce(step, block, _ParseState())
    directives = tuple(d for d in state.directives if d.mode not in state.skip)
    return ParsedAnnotation(directives=directives, skip=state.skip)


def build_global_defaults(
    items: Sequence[MetaItem] | None,
    *,
    context: str = "<type>",
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> tuple[Directive, ...]:
    """Decode the type-level annotation into the type-wide default directives.

    get_copy beats get_ref here regardless of order: if any get_copy default
    is present, every get_ref default is dropped.

    Raises
    ------
    TypeLevelSkipError
        If the block names any mode in `skip`.
    """
    if items is None:
        return ()
    parsed = parse_annotation(
        items, context=context, config=config, exclusive_getters=False
    )
    if parsed.skip:
        raise TypeLevelSkipError(
            f"The attribute of the structure does not support `skip`: "
            f"{render_attribute(tuple(items))} on {context}. "
            f"Type-wide defaults cannot be skipped at the type level. "
            f"Fix: move `skip(...)` onto the fields that should not inherit the default."
        )
    defaults = parsed.directives
    if any(d.mode == Mode.GET_COPY for d in defaults):
        defaults = tuple(d for d in defaults if d.mode != Mode.GET_REF)
    logger.debug("Type-wide defaults for %s: %s",
                 context, [d.mode.value for d in defaults])
    return defaults
