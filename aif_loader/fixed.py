from .symbols import KNOWN_FIXED_OFFSET_SYMBOLS, Durability


def define_fixed_offset_symbols(host, base, log, durability=Durability.AUTO, table=KNOWN_FIXED_OFFSET_SYMBOLS):
    """Define every symbol of ``table`` relative to ``base``.

    An unknown base (0) still defines them, at their raw offsets.
    """
    for sym in table:
        address = base + sym.offset
        host.define_symbol(address, sym.kind, sym.name, durability)
        log.info(f"Defined fixed-offset symbol `{sym.name}` at {hex(address)}.")
