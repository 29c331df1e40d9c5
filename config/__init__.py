"""Runtime configuration for the diagnosis coder."""
