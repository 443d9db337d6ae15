"""Infrastructure: logging and diagnostics."""
