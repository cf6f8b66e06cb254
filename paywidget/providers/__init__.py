from .base import CatalogProvider
from .console import ConsoleClient

__all__ = ["CatalogProvider", "ConsoleClient"]
