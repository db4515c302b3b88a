#!/usr/bin/env python3
"""Validate a configuration file without reading credentials.

Usage:
    python verify_config.py [path]   # default: config.example.yaml
"""

import sys
from pathlib import Path

from notification_service.config.loader import validate_config_file


if __name__ == "__main__":
    config_file = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("config.example.yaml")

    if not config_file.exists():
        print(f"✗ {config_file} not found")
        sys.exit(1)

    sys.exit(0 if validate_config_file(config_file) else 1)
