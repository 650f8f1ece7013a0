"""Shared configuration, logging, errors and storage utilities."""
