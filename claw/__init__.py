"""Structs, field headers and packed lists for the Claw binary wire format."""

__version__ = "0.1.0"

__all__ = [
    "padding",
    "header",
    "schema",
    "lists",
    "bytes_lists",
    "message",
    "listfields",
]