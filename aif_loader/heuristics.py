"""Naming functions once analysis has built strings and cross references.

None of this is authoritative: a missing string, pattern or reference only
means one fewer name.
"""

from .symbols import (
    KNOWN_PATTERN_ASSOCIATED_SYMBOLS,
    KNOWN_STRING_ASSOCIATED_SYMBOLS,
    Durability,
    SymbolKind,
)


def get_string_value(host, ref) -> str:
    return bytes(host.read(ref.start, ref.length)).decode("latin-1")


def get_strings_containing(host, pattern):
    return [ref for ref in host.strings() if pattern in get_string_value(host, ref)]


def set_name_from_str_xref(host, name, pattern, log, durability=Durability.USER):
    strings = get_strings_containing(host, pattern)
    if not strings:
        log.debug(f'Failed to find string with pattern "{pattern}".')
        return None

    refs = host.code_refs_to(strings[0].start)
    if not refs:
        log.debug(f'Failed to find code references to string with pattern "{pattern}".')
        return None

    func = refs[0]
    host.define_symbol(func, SymbolKind.FUNCTION, name, durability)
    log.info(f"Defined symbol `{name}` for function at {hex(func)} based on string reference(s).")
    return func


def set_name_from_func_xref(host, name, addr, log, durability=Durability.USER):
    """Name the first caller of the function at ``addr``."""
    refs = host.code_refs_to(addr)
    if not refs:
        log.debug(f"Failed to find code references to {hex(addr)} for `{name}`.")
        return None

    func = refs[0]
    host.define_symbol(func, SymbolKind.FUNCTION, name, durability)
    log.info(f"Defined symbol `{name}` for function at {hex(func)} based on call reference(s).")
    return func


def set_name_from_pattern(host, name, pattern, log, durability=Durability.USER):
    offset = host.find_data(pattern)
    if offset is None:
        log.debug(f"Failed to find byte pattern {pattern.hex()} for `{name}`.")
        return None

    func = host.function_containing(offset)
    if func is None:
        log.debug(f"No function contains pattern match at {hex(offset)} for `{name}`.")
        return None

    host.define_symbol(func, SymbolKind.FUNCTION, name, durability)
    log.info(f"Defined symbol `{name}` for function at {hex(func)} based on byte pattern.")
    return func


def define_string_associated_symbols(host, log, durability=Durability.USER, table=KNOWN_STRING_ASSOCIATED_SYMBOLS):
    named = 0
    for sym in table:
        if set_name_from_str_xref(host, sym.name, sym.pattern, log, durability) is not None:
            named += 1
    return named


def define_pattern_associated_symbols(host, log, durability=Durability.USER, table=KNOWN_PATTERN_ASSOCIATED_SYMBOLS):
    named = 0
    for sym in table:
        addr = set_name_from_pattern(host, sym.name, sym.pattern, log, durability)
        for caller in sym.callers:
            if addr is None:
                break
            named += 1
            addr = set_name_from_func_xref(host, caller, addr, log, durability)
        named += addr is not None
    return named
