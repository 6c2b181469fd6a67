"""Pure helper functions (no state)."""
