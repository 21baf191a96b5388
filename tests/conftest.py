"""Shared pytest fixtures and helpers for the getset_codegen test suite.

Module-level helpers (import directly):
    _field(name, annotation, ...) — build a Field, parsing attribute text.
    _struct(*fields, annotation, ...) — build a struct TypeDef.

Module-level fixtures (import directly):
    _SCENARIO_FIXTURE — ScenarioFixture singleton (loaded once).

pytest fixtures:
    foo_yaml          — path of the Foo example type definition.
    foo_expected      — expected rendering of the Foo example.
    scenario_fixture  — ScenarioFixture singleton.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from getset_codegen.meta import parse_meta
from getset_codegen.types import Field, TypeDef, TypeShape

# Import after production imports so pythonpath=tests resolves fixtures/
from fixtures.fixture_loader import ScenarioFixture

FIXTURES_DIR = Path(__file__).parent / "fixtures"

_SCENARIO_FIXTURE = ScenarioFixture()


# ─── Module-Level Helpers ─────────────────────────────────────────────────────


def _field(
    name: str | None = "x",
    annotation: str | None = None,
    *,
    ty: str = "i32",
    vis: str = "",
    docs: tuple[str, ...] = (),
) -> Field:
    """Return a Field; annotation is attribute text, None for no block."""
    return Field(
        name=name,
        ty=ty,
        visibility=vis,
        docs=docs,
        annotation=None if annotation is None else parse_meta(annotation),
    )


def _struct(
    *fields: Field,
    annotation: str | None = None,
    name: str = "S",
    shape: TypeShape = TypeShape.STRUCT,
) -> TypeDef:
    """Return a TypeDef; annotation is the type-level attribute text."""
    return TypeDef(
        name=name,
        fields=fields,
        shape=shape,
        annotation=None if annotation is None else parse_meta(annotation),
    )


# ─── pytest Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def foo_yaml() -> Path:
    return FIXTURES_DIR / "foo.yaml"


@pytest.fixture
def foo_expected() -> str:
    return (FIXTURES_DIR / "foo_expected.rs").read_text(encoding="utf-8")


@pytest.fixture
def scenario_fixture() -> ScenarioFixture:
    return _SCENARIO_FIXTURE
