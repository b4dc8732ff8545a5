"""Descriptor parsing and resource access shared by scanning and game loading."""
