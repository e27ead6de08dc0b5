"""Application layer: ports, use cases and the dispatcher."""
