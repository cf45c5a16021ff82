"""Application layer: configuration loading and the command-line interface."""
