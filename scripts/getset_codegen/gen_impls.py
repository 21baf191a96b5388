"""Accessor impl generator: YAML type definitions → Rust impl blocks.

Renders one `impl` block per type in the input file and either prints them
or splices them into a Rust source file between a marker pair:

    // BEGIN GENERATED FROM getset-codegen
    (any existing content here will be replaced)
    // END GENERATED FROM getset-codegen

A target without both markers raises MarkerError. Pass ``init=True``
(CLI: --init) to append an empty marker pair at the end of the file
first.

Usage (CLI)
-----------
    python -m getset_codegen.gen_impls types.yaml               # print to stdout
    python -m getset_codegen.gen_impls types.yaml -o src/foo.rs  # splice + diff
    python -m getset_codegen.gen_impls types.yaml -o src/foo.rs --check

Public API
----------
- GENERATED_BEGIN   : str — exact begin-marker literal
- GENERATED_END     : str — exact end-marker literal
- MarkerError       : exception raised when markers are absent/malformed
- render_types()    : render impl blocks for several TypeDefs
- update_target()   : splice loaded types into a target file + diff + write
- generate_impls()  : load, render and optionally update a target
- main()            : CLI entry point
"""

from __future__ import annotations

import argparse
import difflib
import logging
import pathlib
import sys
from typing import Sequence

from getset_codegen.config import GeneratorConfig
from getset_codegen.errors import AnnotationSyntaxError, GetsetError, TypeDefinitionError
from getset_codegen.loader import load_types
from getset_codegen.synthesis import generate
from getset_codegen.types import TypeDef

logger = logging.getLogger(__name__)

# ─── Marker constants ─────────────────────────────────────────────────────────

GENERATED_BEGIN = "// BEGIN GENERATED FROM getset-codegen"
GENERATED_END = "// END GENERATED FROM getset-codegen"


# ─── Error type ───────────────────────────────────────────────────────────────


class MarkerError(ValueError):
    """The target file has no usable generated region.

    Only the lines between the two markers are rewritten; the generator
    will not guess where a region should go in a file without them.
    """


# ─── Marker parsing ───────────────────────────────────────────────────────────


def _find_marker_positions(
    lines: Sequence[str],
    target_path: pathlib.Path,
) -> tuple[int, int]:
    """Line indices of the single BEGIN and END marker; MarkerError otherwise."""
    begins = [i for i, line in enumerate(lines) if line.strip() == GENERATED_BEGIN]
    ends = [i for i, line in enumerate(lines) if line.strip() == GENERATED_END]
    where = f"generated region of {target_path}"

    if not begins and not ends:
        raise MarkerError(
            f"Missing markers in {target_path}: no generated region found. "
            f"Fix: add '{GENERATED_BEGIN}' followed by '{GENERATED_END}' where "
            "the impl blocks belong, or re-run with --init to append them."
        )
    for name, found in (("BEGIN", begins), ("END", ends)):
        if len(found) > 1:
            lines_at = ", ".join(str(i + 1) for i in found)
            raise MarkerError(
                f"Malformed {where}: duplicate {name} marker (lines {lines_at}). "
                f"Fix: keep one {name} marker and delete the others."
            )
    if not begins or not ends:
        present, absent = ("END", "BEGIN") if not begins else ("BEGIN", "END")
        line_no = (ends or begins)[0] + 1
        raise MarkerError(
            f"Malformed {where}: {present} marker on line {line_no} but the "
            f"{absent} marker is missing. "
            f"Fix: add the {absent} marker {'above' if absent == 'BEGIN' else 'below'} it."
        )
    (begin_idx,), (end_idx,) = begins, ends
    if end_idx < begin_idx:
        raise MarkerError(
            f"Malformed {where}: END marker (line {end_idx + 1}) appears before "
            f"BEGIN marker (line {begin_idx + 1}). "
            "Fix: swap the two markers."
        )
    return begin_idx, end_idx


def _has_markers(content: str) -> bool:
    return GENERATED_BEGIN in content and GENERATED_END in content


# ─── Rendering ────────────────────────────────────────────────────────────────


def render_types(types: Sequence[TypeDef], config: GeneratorConfig | None = None) -> str:
    """Render the impl block of every type, separated by blank lines.

    Every type is generated before anything is returned; one failing type
    fails the whole call.
    """
    config = config or GeneratorConfig()
    return "\n".join(generate(t, config) for t in types)


def splice(old_content: str, generated: str, target_path: pathlib.Path) -> str:
    """Replace the marker region of old_content with generated (markers kept)."""
    old_lines = old_content.splitlines(keepends=True)
    begin_idx, end_idx = _find_marker_positions(old_lines, target_path)
    if not generated.endswith("\n"):
        generated += "\n"
    prefix = "".join(old_lines[: begin_idx + 1])
    if not prefix.endswith("\n"):
        prefix += "\n"
    end_line = old_lines[end_idx]
    suffix = "".join(old_lines[end_idx + 1 :])
    return prefix + generated + end_line + suffix


def update_target(
    types: Sequence[TypeDef],
    target_path: pathlib.Path | str,
    *,
    config: GeneratorConfig | None = None,
    diff: bool = True,
    write: bool = True,
    init: bool = False,
) -> str:
    """Splice the impl blocks of already-loaded types into target_path.

    Returns the complete new target content. Nothing is written if any type
    fails to generate or the markers are malformed.
    """
    generated = render_types(types, config)
    target_path = pathlib.Path(target_path)
    old_content = target_path.read_text(encoding="utf-8")
    base_content = old_content
    if init and not _has_markers(base_content):
        if base_content:
            base_content = base_content.rstrip("\n") + "\n\n"
        base_content += f"{GENERATED_BEGIN}\n{GENERATED_END}\n"

    new_content = splice(base_content, generated, target_path)

    if diff and new_content != old_content:
        diff_lines = difflib.unified_diff(
            old_content.splitlines(keepends=True),
            new_content.splitlines(keepends=True),
            fromfile=str(target_path),
            tofile=str(target_path) + " (generated)",
        )
        print("".join(diff_lines), end="")

    if write and new_content != old_content:
        target_path.write_text(new_content, encoding="utf-8")
        logger.info("Updated %s (%d type(s))", target_path, len(types))
    return new_content


def generate_impls(
    input_path: pathlib.Path | str,
    target_path: pathlib.Path | str | None = None,
    *,
    config: GeneratorConfig | None = None,
    diff: bool = True,
    write: bool = True,
    init: bool = False,
) -> str:
    """Generate impl blocks for every type in input_path.

    Parameters
    ----------
    input_path:
        YAML type definition file (see loader).
    target_path:
        Rust file holding the marker pair. When None, the rendered impl
        blocks are returned and nothing is read or written.
    config:
        Generator configuration; defaults to GeneratorConfig().
    diff:
        If True (default), print a unified diff of old vs new target content
        to stdout. No diff printed when there are no changes.
    write:
        If True (default), write the new content to target_path. Set False
        for dry runs and --check.
    init:
        If True, append the marker pair to a target that lacks it.

    Returns
    -------
    str
        The rendered impl blocks (no target) or the complete new target
        content (with target).

    Raises
    ------
    MarkerError
        If target_path lacks a well-formed marker pair and init is False.
    TypeDefinitionError, AnnotationSyntaxError
        If input_path cannot be loaded.
    GetsetError
        If any type fails to generate; the target is left untouched.
    FileNotFoundError
        If input_path or target_path does not exist.
    """
    types = load_types(input_path)
    if target_path is None:
        return render_types(types, config)
    return update_target(
        types, target_path, config=config, diff=diff, write=write, init=init
    )


# ─── CLI ──────────────────────────────────────────────────────────────────────


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments.

    Generator flags override the GETSET_* environment variables, which
    override the built-in defaults (see config.GeneratorConfig).
    """
    parser = argparse.ArgumentParser(
        prog="getset-gen",
        description="Generate Rust accessor/mutator impl blocks from annotated type definitions.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Environment variables:\n"
            "  GETSET_INLINE               emit #[inline(always)] (default: 1)\n"
            "  GETSET_DISTINCT_SUPER       render pub = \"super\" as pub(super) (default: 0)\n"
            "  GETSET_INHERIT_UNANNOTATED  apply type-wide defaults to unannotated fields (default: 0)\n"
        ),
    )
    parser.add_argument("input", type=pathlib.Path, help="YAML type definition file")
    parser.add_argument(
        "-o", "--output", type=pathlib.Path, default=None, metavar="FILE",
        help="Rust file with generated-region markers (default: print to stdout)",
    )
    parser.add_argument("--init", action="store_true",
                        help="append the marker pair to FILE if it has none")
    parser.add_argument("--check", action="store_true",
                        help="exit 1 if FILE is out of date; never write")
    parser.add_argument("--no-diff", dest="diff", action="store_false",
                        help="do not print a unified diff")
    parser.add_argument("--no-inline", dest="inline", action="store_const", const=False,
                        default=None, help="omit #[inline(always)]")
    parser.add_argument("--distinct-super", dest="distinct_super", action="store_const",
                        const=True, default=None,
                        help='render pub = "super" as pub(super) instead of pub(crate)')
    annotated = parser.add_mutually_exclusive_group()
    annotated.add_argument("--inherit-unannotated", dest="inherit_unannotated",
                           action="store_const", const=True, default=None,
                           help="apply type-wide defaults to fields without a getset annotation")
    annotated.add_argument("--require-annotation", dest="inherit_unannotated",
                           action="store_const", const=False, default=None,
                           help="only generate for fields that carry a getset annotation (default)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> GeneratorConfig:
    env = GeneratorConfig.from_env()
    return GeneratorConfig(
        inline=env.inline if args.inline is None else args.inline,
        distinct_super_visibility=(
            env.distinct_super_visibility if args.distinct_super is None else args.distinct_super
        ),
        inherit_unannotated=(
            env.inherit_unannotated
            if args.inherit_unannotated is None
            else args.inherit_unannotated
        ),
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Exit codes: 0 on success; 1 when generation fails, the markers are
    malformed or --check finds drift; 2 when the configuration is invalid or
    the input or target file cannot be read or loaded.
    """
    args = parse_args(argv)
    configure_logging(args.verbose)
    try:
        config = config_from_args(args)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    if args.check and args.output is None:
        print("ERROR: --check needs --output FILE", file=sys.stderr)
        return 2

    try:
        types = load_types(args.input)
        old = None if args.output is None else args.output.read_text(encoding="utf-8")
    except (OSError, TypeDefinitionError, AnnotationSyntaxError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    try:
        if args.output is None:
            print(render_types(types, config), end="")
            return 0
        new = update_target(
            types,
            args.output,
            config=config,
            diff=args.diff,
            write=not args.check,
            init=args.init,
        )
    except (MarkerError, GetsetError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    if args.check and new != old:
        print(f"{args.output} is out of date; re-run without --check.", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
