"""HTTP API: routers, dependency providers and the application factory."""
