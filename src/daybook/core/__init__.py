"""Shared infrastructure: configuration, events, exceptions, storage, logging."""
