"""Configuration constants for the scaffold CLI."""

from __future__ import annotations

CONFIG_DIR = ".scaffold"
CONFIG_FILE = "config.json"

PRE_INSTALL_HOOK = "pre-install"
POST_INSTALL_HOOK = "post-install"
HOOK_NAMES: tuple[str, ...] = (PRE_INSTALL_HOOK, POST_INSTALL_HOOK)

# Always excluded from the copy.
DEFAULT_IGNORE: tuple[str, ...] = (".git", "node_modules", ".DS_Store", CONFIG_DIR)

ENV_PREFIX = "SCAFFOLD_"
ENV_TARGET = "SCAFFOLD_TARGET"
ENV_NON_INTERACTIVE = "SCAFFOLD_NON_INTERACTIVE"

DEFAULT_PROVIDER = "github"
PROVIDERS: tuple[str, ...] = ("github", "gitlab", "bitbucket")
LOCAL_PREFIXES: tuple[str, ...] = (".", "/", "~")

STAGING_PREFIX = "scaffold-"

TAGLINE = "scaffold - create projects from curated stacks or any template repo"

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "DEFAULT_IGNORE",
    "DEFAULT_PROVIDER",
    "ENV_NON_INTERACTIVE",
    "ENV_PREFIX",
    "ENV_TARGET",
    "HOOK_NAMES",
    "LOCAL_PREFIXES",
    "POST_INSTALL_HOOK",
    "PRE_INSTALL_HOOK",
    "PROVIDERS",
    "STAGING_PREFIX",
    "TAGLINE",
]
