"""Farm cost and productivity analytics."""
