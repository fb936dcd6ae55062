"""Shared configuration, errors and logging for Keepsake."""
