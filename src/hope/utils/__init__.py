"""Shared helpers: PLY I/O, rigid transforms, plotting."""
