"""Application layer: services orchestrating domain rules over repository ports."""
