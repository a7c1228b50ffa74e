"""Configuration, logging, persistence, event bus and error handling."""
