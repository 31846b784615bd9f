"""Domain layer - entities, errors and protocols with no I/O."""
