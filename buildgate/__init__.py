"""buildgate — staged build/verification pipeline runner."""

__version__ = "0.1.0"
