"""Shared infrastructure: configuration, errors, logging, storage backends."""
