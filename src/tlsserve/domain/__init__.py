"""Pure domain types: credentials, lifecycle, and error taxonomy."""
