"""HTTP API for Valibook."""
