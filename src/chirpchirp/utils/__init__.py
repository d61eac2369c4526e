"""Shared utilities (logging setup, deployment detection)."""
