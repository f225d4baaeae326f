"""HTTP API for the sales-to-cash pipeline."""
