"""Output handling for export results."""

from .json_writer import default_export_filename, json_dumps, write_export

__all__ = [
    "default_export_filename",
    "json_dumps",
    "write_export",
]
