"""Persistence layer: record schemas, event store, streams, step log and readers."""
