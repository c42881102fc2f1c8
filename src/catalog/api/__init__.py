"""HTTP interface for the character catalog."""
