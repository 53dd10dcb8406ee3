"""Application layer: image collection store, view controller and observable state."""
