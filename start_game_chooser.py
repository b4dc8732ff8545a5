#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
Game Chooser - Startup Script

Runs the command line front end from a source checkout.
"""

import sys

from game_chooser.main import main

if __name__ == "__main__":
    sys.exit(main())
