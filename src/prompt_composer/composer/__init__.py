"""Document model and the engine operating on it."""
