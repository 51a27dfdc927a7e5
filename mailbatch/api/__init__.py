"""HTTP layer for mailbatch."""
