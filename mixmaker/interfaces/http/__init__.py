"""Flask blueprints and response helpers."""
