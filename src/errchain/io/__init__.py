"""I/O layer: rendering and serialization of error chains."""
