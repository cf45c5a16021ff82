# /// script
# requires-python = ">=3.12"
# dependencies = [
#     "agrivoice",
# ]
#
# [tool.uv.sources]
# agrivoice = { path = "." }
# ///
"""Standalone, offline-first voice command router."""

from agrivoice.apps.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
