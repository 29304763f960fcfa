"""Base address recovery.

Every image of the family starts with a relocation loop that loads its
destination address from a literal pool and copies itself there, e.g.::

    adr  x0, _start
    ldr  x1, 0x300      ; -> 0x19c030000
    cmp  x1, x0
    b.eq ...

The first ``ldr`` in the image is that load, so the eight bytes at its target
are the base address.
"""

import struct

SCAN_LIMIT = 0x200
INSN_SIZE = 4

UNKNOWN_BASE = 0


def predict_base_address(data, arch, log) -> int:
    """Return the predicted base address of ``data``, or ``UNKNOWN_BASE``.

    ``data`` is the raw image (``read(offset, length)``); ``arch`` decodes one
    instruction via ``get_instruction_text(bytes, addr)``. Failures are only
    reported through ``log``.
    """
    for i in range(0, SCAN_LIMIT, INSN_SIZE):
        raw = data.read(i, INSN_SIZE)

        result = arch.get_instruction_text(raw, i) if len(raw) == INSN_SIZE else None
        if not result or not result[0]:
            log.error(f"Failed to get instruction text at offset {hex(i)}.")
            return UNKNOWN_BASE

        tokens = result[0]
        if tokens[0].text.strip() != "ldr":
            continue

        # The last token is the literal the load refers to.
        offset = tokens[-1].value
        literal = data.read(offset, 8)
        if len(literal) != 8:
            log.error(f"Failed to read literal at {hex(offset)} while predicting base address!")
            break

        return struct.unpack("<Q", literal)[0]

    return UNKNOWN_BASE
