"""Shared configuration, errors, logging and value types."""
