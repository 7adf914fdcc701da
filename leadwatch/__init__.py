"""Lead accountability service."""
