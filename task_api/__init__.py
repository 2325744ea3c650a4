"""Task Manager API: a REST backend over a single ``tasks`` table."""

__version__ = "1.0.0"
