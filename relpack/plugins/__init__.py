"""Lifecycle plugins: contract, discovery, dispatch and checkpoints."""

from .contract import CleanupArgs, DispatchMode, Extension, Phase, Plugin, plugin_name
from .dispatch import (
    BadReturnValue,
    Failed,
    HookOutcome,
    PluginCrashed,
    PluginFailure,
    Unchanged,
    Updated,
    fire,
    invoke,
    thread_state,
)
from .registry import ENTRY_POINT_GROUP, PluginRegistry

__all__ = [
    # contract
    "CleanupArgs",
    "DispatchMode",
    "Extension",
    "Phase",
    "Plugin",
    "plugin_name",
    # dispatch
    "BadReturnValue",
    "Failed",
    "HookOutcome",
    "PluginCrashed",
    "PluginFailure",
    "Unchanged",
    "Updated",
    "fire",
    "invoke",
    "thread_state",
    # registry
    "ENTRY_POINT_GROUP",
    "PluginRegistry",
]
