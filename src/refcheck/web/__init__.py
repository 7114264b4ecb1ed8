"""HTTP interface for refcheck."""
