#!/usr/bin/env python3
"""CLI shim for bulk element capture.

Delegates to ``ad_shotter.cli`` so the script can be run straight from a
checkout, e.g. ``python scripts/bulk_capture.py --manifest-path ads.csv``.
"""
from __future__ import annotations

import sys

from ad_shotter.cli import main

if __name__ == "__main__":
    sys.exit(main())
