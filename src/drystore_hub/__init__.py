"""DryStore Hub: corporate intranet backend."""

__version__ = "0.1.0"
