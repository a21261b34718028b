"""Language registry: names to rule tables.

The registry is the boundary a host integration talks to. It maps
language names to rule tables; nothing is registered as a side effect of
importing a module. Bundled languages become available through an
explicit ``create_default_registry()`` call.

Thread Safety:
LanguageRegistry is immutable after creation. Safe to share.
Use LanguageRegistryBuilder for mutable construction.

Example:
    >>> builder = LanguageRegistryBuilder()
    >>> builder.register(("asm", "mojo"), asm.build_table())
    >>> registry = builder.build()
    >>> lexer = registry.create_lexer("asm")
"""

from __future__ import annotations

from collections.abc import Iterable

from asmlex.errors import LanguageNotFoundError
from asmlex.lexer import Lexer
from asmlex.rules import RuleTable
from asmlex.utils.logger import get_logger

logger = get_logger(__name__)


class LanguageRegistry:
    """Immutable registry of named rule tables.

    Thread Safety:
        Immutable after creation. Safe to share across threads; the rule
        tables it hands out are immutable too.
    """

    __slots__ = ("_tables", "_by_name")

    def __init__(
        self,
        tables: tuple[RuleTable, ...],
        by_name: dict[str, RuleTable],
    ) -> None:
        """Initialize registry with pre-built mappings.

        Use LanguageRegistryBuilder to create instances.
        """
        self._tables = tables
        self._by_name = by_name

    def get(self, name: str) -> RuleTable | None:
        """Get the rule table for a language name, or None."""
        return self._by_name.get(name)

    def table(self, name: str) -> RuleTable:
        """Get the rule table for a language name.

        Raises:
            LanguageNotFoundError: If no language has that name.
        """
        table = self._by_name.get(name)
        if table is None:
            raise LanguageNotFoundError(name, self.names)
        return table

    def create_lexer(self, name: str) -> Lexer:
        """Create a fresh lexer session for a language."""
        return Lexer(self.table(name))

    def has(self, name: str) -> bool:
        """Check if a language name is registered."""
        return name in self._by_name

    @property
    def names(self) -> frozenset[str]:
        """All registered language names (aliases included)."""
        return frozenset(self._by_name.keys())

    @property
    def tables(self) -> tuple[RuleTable, ...]:
        """Registered tables, once each, in registration order."""
        return self._tables

    def __contains__(self, name: str) -> bool:
        """Support 'name in registry' syntax."""
        return self.has(name)

    def __len__(self) -> int:
        """Number of registered names."""
        return len(self._by_name)


class LanguageRegistryBuilder:
    """Mutable builder for LanguageRegistry.

    Register tables, then call build() to create an immutable registry.

    Example:
        >>> builder = LanguageRegistryBuilder()
        >>> builder.register("asm", asm.build_table())
        >>> registry = builder.build()
    """

    __slots__ = ("_tables", "_by_name")

    def __init__(self) -> None:
        """Initialize empty builder."""
        self._tables: list[RuleTable] = []
        self._by_name: dict[str, RuleTable] = {}

    def register(self, names: str | Iterable[str], table: RuleTable) -> LanguageRegistryBuilder:
        """Register a rule table under one or more names.

        Args:
            names: Language name, or several names (the first is primary)
            table: Validated rule table

        Returns:
            Self for chaining

        Raises:
            TypeError: If ``table`` is not a RuleTable
            ValueError: If a name is empty or already registered
        """
        if not isinstance(table, RuleTable):
            msg = f"Expected RuleTable, got {type(table).__name__}"
            raise TypeError(msg)

        name_list = [names] if isinstance(names, str) else list(names)
        if not name_list:
            raise ValueError("At least one language name is required")

        for name in name_list:
            if not name:
                raise ValueError("Language names must be non-empty")
            if name in self._by_name:
                msg = f"Language '{name}' already registered"
                raise ValueError(msg)

        for name in name_list:
            self._by_name[name] = table
        self._tables.append(table)
        logger.debug("Registered language %s", ", ".join(name_list))
        return self

    def build(self) -> LanguageRegistry:
        """Build immutable registry from registered tables."""
        return LanguageRegistry(
            tables=tuple(self._tables),
            by_name=dict(self._by_name),
        )

    def __len__(self) -> int:
        """Number of registered tables."""
        return len(self._tables)


def _build_default_registry() -> LanguageRegistry:
    """Build the default registry (internal, not cached)."""
    return create_registry_with_defaults().build()


# Cached singleton; safe to share since LanguageRegistry is immutable
_DEFAULT_REGISTRY: LanguageRegistry | None = None


def create_default_registry() -> LanguageRegistry:
    """Get the default language registry (cached singleton).

    Returns:
        Registry with the bundled languages:
        - asm (alias mojo): compiler and assembler output

    Thread Safety:
        Safe to call from multiple threads. Worst case builds the registry
        twice; both results are equivalent and immutable.
    """
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = _build_default_registry()
    return _DEFAULT_REGISTRY


def create_registry_with_defaults() -> LanguageRegistryBuilder:
    """Get a builder pre-populated with the bundled languages.

    Use this to add your own languages next to the defaults.
    """
    from asmlex.languages import asm

    builder = LanguageRegistryBuilder()
    builder.register(asm.NAMES, asm.build_table())
    return builder
