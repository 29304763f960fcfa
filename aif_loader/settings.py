"""Load settings, as registered with Binary Ninja and as read by the loader."""

import json
from dataclasses import dataclass
from typing import Optional

from .symbols import Durability

DEFINE_FIXED_SYMBOLS = "loader.aif.defineFixedSymbols"
USE_FUNCTION_HEURISTICS = "loader.aif.useFunctionHeuristics"
FIXED_SYMBOL_DURABILITY = "loader.aif.fixedSymbolDurability"
HEURISTIC_SYMBOL_DURABILITY = "loader.aif.heuristicSymbolDurability"

# Provided by the host's default load settings.
IMAGE_BASE = "loader.imageBase"
PLATFORM = "loader.platform"

DEFAULT_PLATFORM = "aarch64"

SCHEMAS = {
    DEFINE_FIXED_SYMBOLS: {
        "title": "Define Fixed-Offset Symbols",
        "type": "boolean",
        "default": True,
        "description": "Define symbols known to reside at fixed offsets.",
    },
    USE_FUNCTION_HEURISTICS: {
        "title": "Use Function Name Heuristics",
        "type": "boolean",
        "default": True,
        "description": "Automatically name functions based on string references and other heuristics.",
    },
    FIXED_SYMBOL_DURABILITY: {
        "title": "Fixed-Offset Symbol Durability",
        "type": "string",
        "default": Durability.AUTO.value,
        "enum": [d.value for d in Durability],
        "description": "Whether fixed-offset symbols may be replaced by later analysis (auto) or not (user).",
    },
    HEURISTIC_SYMBOL_DURABILITY: {
        "title": "Heuristic Symbol Durability",
        "type": "string",
        "default": Durability.USER.value,
        "enum": [d.value for d in Durability],
        "description": "Whether heuristic function names may be replaced by later analysis (auto) or not (user).",
    },
}


def schema_json(key):
    return json.dumps(SCHEMAS[key])


@dataclass(frozen=True)
class LoadSettings:
    define_fixed_symbols: bool = True
    use_function_heuristics: bool = True
    fixed_symbol_durability: Durability = Durability.AUTO
    heuristic_symbol_durability: Durability = Durability.USER
    base_address: Optional[int] = None
    platform: Optional[str] = None

    @classmethod
    def from_getter(cls, get):
        """Build settings from ``get(key) -> value | None``.

        Missing keys fall back to their defaults.
        """
        defaults = cls()

        def value(key, default):
            v = get(key)
            return default if v is None else v

        return cls(
            define_fixed_symbols=bool(value(DEFINE_FIXED_SYMBOLS, defaults.define_fixed_symbols)),
            use_function_heuristics=bool(value(USE_FUNCTION_HEURISTICS, defaults.use_function_heuristics)),
            fixed_symbol_durability=Durability(value(FIXED_SYMBOL_DURABILITY, defaults.fixed_symbol_durability.value)),
            heuristic_symbol_durability=Durability(
                value(HEURISTIC_SYMBOL_DURABILITY, defaults.heuristic_symbol_durability.value)
            ),
            base_address=get(IMAGE_BASE) or None,
            platform=get(PLATFORM) or None,
        )
