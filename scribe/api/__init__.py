"""HTTP layer: app factory, routers, response policy."""
