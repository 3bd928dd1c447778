"""HTTP routers for the Sheepshead server."""
