"""Dashboard routes, API models and built-in templates."""
