"""
Export errors.

Only fatal failures are raised. Image fetch and image stamping problems
degrade to an empty image cell and are logged instead.
"""


class ExportError(Exception):
    """The export could not produce a complete document."""


class ExportInProgressError(ExportError):
    """An export is already running on this exporter."""
