"""API Routers package."""
from . import employees, directory, sorting

__all__ = ['employees', 'directory', 'sorting']
