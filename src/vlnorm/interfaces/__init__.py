"""Adapters handing normalized specs to rendering libraries."""
