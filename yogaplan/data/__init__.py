"""Bundled starter content."""
