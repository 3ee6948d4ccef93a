"""Core: settings, config store, logging, path helpers."""
