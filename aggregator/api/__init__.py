"""HTTP API for the route quoter."""
