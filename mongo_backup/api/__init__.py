"""HTTP API for the MongoDB backup server."""
