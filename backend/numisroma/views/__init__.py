"""HTTP handlers for the NumisRoma JSON API."""
