"""HTTP route modules, each exposing a ``create_*_routes(state)`` factory."""
