"""Client module - Theme API access, sync engine and CLI."""
