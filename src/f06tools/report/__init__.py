"""Terminal and JSON reporting."""
