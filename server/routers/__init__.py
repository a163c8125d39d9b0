"""HTTP routers for the UNO room server."""
