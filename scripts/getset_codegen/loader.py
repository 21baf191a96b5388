"""YAML type definition loader.

Reads the type definitions the generator runs over:

    types:
      - name: Foo
        kind: struct                       # struct | enum | union
        generics: ["T: Copy + Clone + Default"]
        where: ["T: Copy + Clone + Default"]
        getset: "get_ref, set_with"
        fields:
          - name: private
            type: T
            vis: ""
            doc: ["Doc comments are supported!"]
            getset: "set, get_mut, skip(get_ref)"

A `getset` value is either attribute text (parsed by meta.parse_meta) or a
tree: a list of bare labels and one-key mappings, where a list value is the
nested items, a scalar is `label = value` and null is a bare label:

    getset:
      - get_copy: [pub, const]
      - set: [{pub: crate}]
      - skip

Doc lines are written as they read after `/// `; the loader restores the
leading space rustdoc keeps, so they render back verbatim. `doc` may also
be a single (block) string; every entry is split on newlines so each line
becomes its own `///` comment.

Raises TypeDefinitionError on any structural problem. No partial results.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from getset_codegen.errors import TypeDefinitionError
from getset_codegen.meta import parse_meta
from getset_codegen.types import (
    Field,
    GenericKind,
    GenericParam,
    MetaItem,
    TypeDef,
    TypeShape,
)


# ─── Internal helpers ─────────────────────────────────────────────────────────


def _require(mapping: dict, key: str, context: str, source: str) -> Any:
    """Return mapping[key] or raise TypeDefinitionError with actionable message."""
    value = mapping.get(key)
    if value is None or (isinstance(value, str) and value.strip() == ""):
        raise TypeDefinitionError(
            f"Missing required key '{key}' on {context} in {source}. "
            f"Fix: add `{key}:` to the definition."
        )
    return value


def _as_list(value: Any, key: str, context: str, source: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeDefinitionError(
            f"Expected a list for '{key}' on {context} in {source}, "
            f"got {type(value).__name__}. "
            f"Fix: write `{key}:` as a YAML sequence."
        )
    return value


def _split_top_level(text: str, sep: str) -> tuple[str, str | None]:
    """Split at the first sep not nested inside <...>, (...) or [...]."""
    depth = 0
    for i, ch in enumerate(text):
        if ch in "<([":
            depth += 1
        elif ch == ">" and text[i - 1 : i] == "-":
            continue  # `->` in Fn bounds
        elif ch in ">)]":
            depth -= 1
        elif ch == sep and depth == 0:
            return text[:i].strip(), text[i + 1 :].strip()
    return text.strip(), None


def parse_generic(text: str) -> GenericParam:
    """Parse one generic parameter: "'a", "T: Bound = Default", "const N: usize"."""
    head, default = _split_top_level(text, "=")
    if head.startswith("const "):
        name, ty = _split_top_level(head[len("const ") :], ":")
        return GenericParam(name=name, kind=GenericKind.CONST, bounds=ty, default=default)
    name, bounds = _split_top_level(head, ":")
    kind = GenericKind.LIFETIME if name.startswith("'") else GenericKind.TYPE
    return GenericParam(name=name, kind=kind, bounds=bounds or None, default=default)


def _tree_item(node: Any, context: str, source: str) -> MetaItem:
    if isinstance(node, str):
        return MetaItem(node)
    if isinstance(node, dict) and len(node) == 1:
        (label, value), = node.items()
        if value is None:
            return MetaItem(str(label))
        if isinstance(value, list):
            return MetaItem(
                str(label), nested=tuple(_tree_item(v, context, source) for v in value)
            )
        if isinstance(value, str):
            return MetaItem(str(label), value=value, quoted=True)
        if isinstance(value, bool):
            return MetaItem(str(label), value="true" if value else "false")
        if isinstance(value, (int, float)):
            return MetaItem(str(label), value=str(value))
    raise TypeDefinitionError(
        f"Unreadable getset item {node!r} on {context} in {source}. "
        f"Items are bare labels or one-key mappings like {{get_copy: [pub]}}. "
        f"Fix: rewrite the item or use attribute text instead."
    )


def parse_annotation_value(value: Any, context: str, source: str) -> tuple[MetaItem, ...] | None:
    """Turn a `getset:` value (text or tree) into MetaItems; absent key → None."""
    if value is None:
        return None
    if isinstance(value, str):
        return parse_meta(value)
    if isinstance(value, list):
        return tuple(_tree_item(node, context, source) for node in value)
    raise TypeDefinitionError(
        f"Unreadable getset value {value!r} on {context} in {source}. "
        f"Fix: use attribute text or a list of items."
    )


def _doc_lines(value: Any, context: str, source: str) -> tuple[str, ...]:
    """One entry per rendered `///` line; multi-line entries are split."""
    entries = [value] if isinstance(value, str) else _as_list(value, "doc", context, source)
    lines = [line for entry in entries for line in (str(entry).splitlines() or [""])]
    return tuple(f" {line}" if line else "" for line in lines)


def _parse_field(raw: Any, index: int, type_name: str, source: str) -> Field:
    context = f"field #{index} of {type_name}"
    if not isinstance(raw, dict):
        raise TypeDefinitionError(
            f"Expected a mapping for {context} in {source}, got {type(raw).__name__}. "
            f"Fix: write the field as `- name: ...` / `type: ...`."
        )
    name = raw.get("name")
    if name is not None:
        context = f"{type_name}.{name}"
    return Field(
        name=str(name) if name is not None else None,
        ty=str(_require(raw, "type", context, source)),
        visibility=str(raw.get("vis") or ""),
        docs=_doc_lines(raw.get("doc"), context, source),
        annotation=parse_annotation_value(raw.get("getset"), context, source),
    )


def _parse_type(raw: Any, source: str) -> TypeDef:
    if not isinstance(raw, dict):
        raise TypeDefinitionError(
            f"Expected a mapping for each entry of 'types' in {source}. "
            f"Fix: write each type as `- name: ...`."
        )
    name = str(_require(raw, "name", "<type>", source))
    kind = raw.get("kind", TypeShape.STRUCT.value)
    try:
        shape = TypeShape(kind)
    except ValueError as e:
        raise TypeDefinitionError(
            f"Unknown kind '{kind}' on type {name} in {source}. "
            f"Valid values: {[s.value for s in TypeShape]}. "
            f"Fix: correct the 'kind' value."
        ) from e
    generics = tuple(
        parse_generic(str(g)) for g in _as_list(raw.get("generics"), "generics", name, source)
    )
    where = tuple(
        str(p).strip().rstrip(",") for p in _as_list(raw.get("where"), "where", name, source)
    )
    fields = tuple(
        _parse_field(f, i, name, source)
        for i, f in enumerate(_as_list(raw.get("fields"), "fields", name, source))
    )
    return TypeDef(
        name=name,
        fields=fields,
        shape=shape,
        generics=generics,
        where_predicates=where,
        annotation=parse_annotation_value(raw.get("getset"), name, source),
    )


# ─── Public API ───────────────────────────────────────────────────────────────


def loads_types(text: str, source: str = "<string>") -> tuple[TypeDef, ...]:
    """Parse YAML text into TypeDefs."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise TypeDefinitionError(f"YAML parse error in {source}: {e}") from e
    if not isinstance(data, dict) or "types" not in data:
        raise TypeDefinitionError(
            f"Missing top-level 'types' list in {source}. "
            f"Fix: put the type definitions under `types:`."
        )
    return tuple(_parse_type(t, source) for t in _as_list(data["types"], "types", source, source))


def load_types(path: Path | str) -> tuple[TypeDef, ...]:
    """Read and parse a YAML type definition file.

    Raises
    ------
    FileNotFoundError
        If path does not exist.
    TypeDefinitionError
        If the YAML or any type definition is malformed.
    AnnotationSyntaxError
        If a `getset:` attribute text cannot be parsed.
    """
    path = Path(path)
    return loads_types(path.read_text(encoding="utf-8"), str(path))
