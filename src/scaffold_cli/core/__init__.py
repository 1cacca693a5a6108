"""Core configuration exports."""

from .config import (
    CONFIG_DIR,
    CONFIG_FILE,
    DEFAULT_IGNORE,
    DEFAULT_PROVIDER,
    ENV_NON_INTERACTIVE,
    ENV_PREFIX,
    ENV_TARGET,
    POST_INSTALL_HOOK,
    PRE_INSTALL_HOOK,
    TAGLINE,
)
from .stacks import STACKS, Stack, get_stack, list_stacks
from .utils import safe_remove

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "DEFAULT_IGNORE",
    "DEFAULT_PROVIDER",
    "ENV_NON_INTERACTIVE",
    "ENV_PREFIX",
    "ENV_TARGET",
    "POST_INSTALL_HOOK",
    "PRE_INSTALL_HOOK",
    "STACKS",
    "Stack",
    "TAGLINE",
    "get_stack",
    "list_stacks",
    "safe_remove",
]
