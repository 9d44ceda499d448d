"""Command-line interface (``omni``)."""
