"""Domain rule modules, orchestration and validation of diagnosis codes."""
