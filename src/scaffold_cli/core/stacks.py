"""Curated template stacks selectable with ``--stack``."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Stack:
    """A curated template published as a repository."""

    name: str
    description: str
    repo: str  # "owner/repo", optionally provider-qualified


STACKS: tuple[Stack, ...] = (
    Stack(
        name="ash-stack",
        description="Rails 8 + Inertia.js + Vue 3 + Vite",
        repo="raptorthree/ash-stack",
    ),
)


def get_stack(name: str) -> Stack | None:
    """Return the stack called *name*, or None."""
    return next((stack for stack in STACKS if stack.name == name), None)


def list_stacks() -> list[Stack]:
    return list(STACKS)


__all__ = ["Stack", "STACKS", "get_stack", "list_stacks"]
