"""Extraction module implementations and the registry directives dispatch to."""

from __future__ import annotations

from typing import Callable, Dict, Sequence, Set

from .base import Cardinality, DeclarationExtractor, Extractor
from .macros import MacroDef
from .platform import SystemFingerprint
from .structs import DialectProperty, SizeOfStruct, StructDef, StructProperty, SurrogateStruct
from .tables import DeclList, EnumTable, ReverseTable

# New modes are added here as new variants; the set is closed at runtime.
_BUILTIN_FACTORIES: dict[str, Callable[[], Extractor]] = {
    "sizeof_struct": SizeOfStruct,
    "struct_property": StructProperty,
    "struct_def": StructDef,
    "surrogate_struct": SurrogateStruct,
    "macro_def": MacroDef,
    "dialect_property": DialectProperty,
    "enum_table": EnumTable,
    "reverse_table": ReverseTable,
    "decl_list": DeclList,
    "system_fingerprint": SystemFingerprint,
}


def discover_extractors(enabled: Sequence[str] | None = None) -> Dict[str, Extractor]:
    """Return instantiated extractors keyed by directive name, honoring optional enabled names."""
    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}
        unknown = enabled_set - set(_BUILTIN_FACTORIES)
        if unknown:
            raise ValueError(f"Unknown extractors requested: {', '.join(sorted(unknown))}")

    return {
        name: factory()
        for name, factory in _BUILTIN_FACTORIES.items()
        if enabled_set is None or name in enabled_set
    }


__all__ = [
    "Cardinality",
    "DeclarationExtractor",
    "Extractor",
    "discover_extractors",
]
