"""Shared configuration, error types and value models."""
