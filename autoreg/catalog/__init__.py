"""Bundled declaration stubs for library annotations."""
