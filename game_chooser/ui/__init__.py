"""User interaction front ends (console and optional Qt)."""
