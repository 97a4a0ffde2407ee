"""Application layer: configuration and outbound event messages."""
