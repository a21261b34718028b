"""Bundled languages and the language registry.

Languages are rule tables under one or more names. Importing this package
registers nothing; call ``create_default_registry()`` to get the bundled
languages, or build your own registry.
"""

from asmlex.languages.registry import (
    LanguageRegistry,
    LanguageRegistryBuilder,
    create_default_registry,
    create_registry_with_defaults,
)

__all__ = [
    "LanguageRegistry",
    "LanguageRegistryBuilder",
    "create_default_registry",
    "create_registry_with_defaults",
]
