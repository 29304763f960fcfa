"""Binary Ninja loader for Apple iBoot-family firmware images.

When loaded by Binary Ninja as a plugin the view type is registered; outside
of it only the host-agnostic loader is available.
"""

import importlib.util

__version__ = "0.2.0"

if importlib.util.find_spec("binaryninja") is not None:
    from .view import AIFView

    AIFView.register()
