#!/usr/bin/env python3
"""
LÖVE web build launcher.

Builds the browser version of the game in the current directory.

Usage:
    # Build with ./lovebuild.yaml (or defaults: main.lua, conf.lua, src)
    python love_web.py

    # Build, then package for itch.io
    python love_web.py --itch-zip

    # Use a specific build file, never hit the network
    python love_web.py --config web.yaml --offline
"""

from lovebuild.build import main


if __name__ == '__main__':
    raise SystemExit(main())
