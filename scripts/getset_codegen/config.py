"""Generator configuration.

Priority (highest → lowest):
    1. Explicit CLI flag (see gen_impls.parse_args)
    2. Environment variable (GETSET_INLINE, GETSET_DISTINCT_SUPER,
       GETSET_INHERIT_UNANNOTATED)
    3. Built-in default
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


@dataclass(frozen=True)
class GeneratorConfig:
    """Knobs that change what the engine emits.

    inline:
        Mark every generated method `#[inline(always)]`.
    distinct_super_visibility:
        Render `pub = "super"` as `pub(super)` instead of collapsing it onto
        `pub(crate)`.
    inherit_unannotated:
        Apply type-wide defaults to fields that carry no annotation block.
        Off by default: a field without a block produces no methods. An
        empty block (`#[getset2()]`) is enough to opt it in.
    """

    inline: bool = True
    distinct_super_visibility: bool = False
    inherit_unannotated: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GeneratorConfig:
        env = os.environ if environ is None else environ
        return cls(
            inline=_flag(env, "GETSET_INLINE", cls.inline),
            distinct_super_visibility=_flag(
                env, "GETSET_DISTINCT_SUPER", cls.distinct_super_visibility
            ),
            inherit_unannotated=_flag(
                env, "GETSET_INHERIT_UNANNOTATED", cls.inherit_unannotated
            ),
        )


DEFAULT_CONFIG = GeneratorConfig()


def _flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(
        f"Invalid boolean for {name}: {raw!r}. "
        f"Expected one of {sorted(_TRUE | _FALSE - {''})}. "
        f"Fix: set {name} to 1/0 or true/false, or unset it."
    )
