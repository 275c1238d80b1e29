"""Ambient settings and logging setup."""
