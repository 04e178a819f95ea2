"""HTTP surface for the request workflow."""
