"""App-level APIs.

Thin controller functions and the catalog service intended to be called by GUI/CLI.
Import from `game_chooser.app.api`; this package module stays import-free so scanning
code can depend on `app.models` without cycles.
"""
