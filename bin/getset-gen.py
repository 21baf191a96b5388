#!/usr/bin/env python3
"""Command-line entry point for the getset code generator.

Reads YAML type definitions, renders one Rust impl block per type, and
either prints them or splices them between the generated-region markers of
a Rust source file.

Configuration (CLI args take precedence over env vars):
    --no-inline           (env: GETSET_INLINE=0)
    --distinct-super      (env: GETSET_DISTINCT_SUPER=1)
    --inherit-unannotated (env: GETSET_INHERIT_UNANNOTATED=1)

Usage:
    bin/getset-gen.py types.yaml                          # print to stdout
    bin/getset-gen.py types.yaml -o src/foo.rs            # update + diff
    bin/getset-gen.py types.yaml -o src/foo.rs --check    # CI drift check
    GETSET_DISTINCT_SUPER=1 bin/getset-gen.py types.yaml  # env var override
"""

import sys

from getset_codegen.gen_impls import main

if __name__ == "__main__":
    sys.exit(main())
