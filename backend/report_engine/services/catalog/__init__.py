"""Battle Report Engine - Message catalog and translation bundles"""
from .message_catalog import MessageCatalog, TranslationBundle, CatalogFormatError

__all__ = ["MessageCatalog", "TranslationBundle", "CatalogFormatError"]
