"""themesync - Keep a local theme directory in sync with the Theme API."""

__version__ = "0.1.0"
