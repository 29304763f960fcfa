"""Symbol types and the tables of symbols known for the iBoot family."""

import enum
from collections import namedtuple
from dataclasses import dataclass

TABLE_VERSION = 2


class SymbolKind(enum.Enum):
    FUNCTION = "function"
    DATA = "data"


class Durability(enum.Enum):
    # Replaceable by later analysis.
    AUTO = "auto"
    USER = "user"


@dataclass(frozen=True)
class SymbolRecord:
    address: int
    kind: SymbolKind
    name: str
    durability: Durability = Durability.AUTO


FixedOffsetSymbol = namedtuple("FixedOffsetSymbol", ["offset", "kind", "name"])
StringAssociatedSymbol = namedtuple("StringAssociatedSymbol", ["name", "pattern"])
PatternAssociatedSymbol = namedtuple("PatternAssociatedSymbol", ["name", "pattern", "callers"])

KNOWN_FIXED_OFFSET_SYMBOLS = (
    FixedOffsetSymbol(0x0, SymbolKind.FUNCTION, "_start"),
    FixedOffsetSymbol(0x200, SymbolKind.DATA, "build_banner_string"),
    FixedOffsetSymbol(0x240, SymbolKind.DATA, "build_style_string"),
    FixedOffsetSymbol(0x280, SymbolKind.DATA, "build_tag_string"),
)

# Order matters, a function already named by an earlier entry can be renamed
# by a later one.
KNOWN_STRING_ASSOCIATED_SYMBOLS = (
    StringAssociatedSymbol("_panic", "double panic in"),
    StringAssociatedSymbol("_platform_get_usb_serial_number_string", "CPID:"),
    StringAssociatedSymbol("_platform_get_usb_more_other_string", " NONC:"),
    StringAssociatedSymbol("_image4_get_partial", "IMG4"),
    StringAssociatedSymbol("_UpdateDeviceTree", "fuse-revision"),
    StringAssociatedSymbol("_main_task", "debug-uarts"),
    StringAssociatedSymbol("_platform_init_display", "backlight-level"),
    StringAssociatedSymbol("_do_printf", "<null>"),
    StringAssociatedSymbol("_do_memboot", "Combo image too large"),
    StringAssociatedSymbol("_do_go", "Memory image not valid"),
    StringAssociatedSymbol("_task_init", "idle task"),
    StringAssociatedSymbol("_sys_setup_default_environment", "/System/Library/Caches/com.apple.kernelcaches/kernelcache"),
    StringAssociatedSymbol("_check_autoboot", "aborting autoboot due to user intervention"),
    StringAssociatedSymbol("_do_setpict", "picture too large"),
    StringAssociatedSymbol("_arm_exception_abort", "ARM %s abort at 0x%016llx:"),
    StringAssociatedSymbol("_do_devicetree", "Device Tree image not valid"),
    StringAssociatedSymbol("_do_ramdisk", "Ramdisk image not valid"),
    StringAssociatedSymbol("_usb_serial_init", "Apple USB Serial Interface"),
    StringAssociatedSymbol("_nvme_bdev_create", "construct blockdev for namespace %d"),
    StringAssociatedSymbol("_image4_dump_list", "image %p: bdev %p type"),
    StringAssociatedSymbol("_prepare_and_jump", "End of %s serial output"),
    StringAssociatedSymbol("_boot_upgrade_system", "/boot/kernelcache"),
    StringAssociatedSymbol("_heap_malloc", "heap_malloc must allocate at least one byte"),
    StringAssociatedSymbol("_image4_register_property_capture_callbacks", "image4_register_property_capture_callbacks"),
    StringAssociatedSymbol("_record_memory_range", "chosen/memory-map"),
    StringAssociatedSymbol("_target_pass_boot_manifest", "chosen/manifest-properties"),
    StringAssociatedSymbol("_image4_validate_property_callback_interposer", "Unknown ASN1 type %llu"),
    StringAssociatedSymbol("_platform_handoff_update_devicetree", "iboot-handoff"),
)

KNOWN_PATTERN_ASSOCIATED_SYMBOLS = (
    PatternAssociatedSymbol("_macho_valid", b"\x49\x01\x8b\x9a", ("_loaded_kernelcache", "_load_kernelcache")),
    PatternAssociatedSymbol("_platform_early_init", b"\x60\x02\x40\x39", ()),
    PatternAssociatedSymbol("_aes_crypto_cmd", b"\x89\x2c\x00\x72", ()),
    PatternAssociatedSymbol("_platform_get_usb_vendor_id", b"\x80\xb5\x80\x52", ("_usb_core_init", "_usb_init_with_controller")),
)
