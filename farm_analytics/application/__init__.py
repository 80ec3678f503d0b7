"""Application layer: cache, result boundary, aggregator services and dispatch."""
