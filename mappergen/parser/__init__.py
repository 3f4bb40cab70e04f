"""Source declaration and configuration parsing."""
