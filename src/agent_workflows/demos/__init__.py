"""Interactive example programs built on the workflow engine and agent."""
