"""Configuration property bindings."""
