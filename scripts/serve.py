#!/usr/bin/env python3
"""Run the Ad Shotter API with uvicorn.

Usage:
  python scripts/serve.py --port 8000
"""
from __future__ import annotations

from ad_shotter.app import main

if __name__ == "__main__":
    main()
