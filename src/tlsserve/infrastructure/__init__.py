"""Infrastructure layer: TLS context construction and the network listener."""
