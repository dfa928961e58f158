"""
Keyboard command surface of the editor.

Accelerators use the GTK notation, e.g. "<Ctrl><Shift>g". Modifier
matching is exact: "<Ctrl>g" groups and "<Ctrl><Shift>g" ungroups.
"""

from __future__ import annotations
import logging
import re
from typing import TYPE_CHECKING, Any, Callable, Dict

if TYPE_CHECKING:
    from .editor import DocEditor


logger = logging.getLogger(__name__)

_MODIFIER_ALIASES = {
    "ctrl": "Ctrl",
    "control": "Ctrl",
    "primary": "Ctrl",
    "shift": "Shift",
    "alt": "Alt",
}
_MODIFIER_ORDER = ("Ctrl", "Shift", "Alt")
_ACCEL_RE = re.compile(r"^((?:<[A-Za-z]+>)*)(.+)$")


def normalize_accel(accel: str) -> str:
    """
    Brings an accelerator into canonical form: known modifiers in a fixed
    order, single-character keys in lower case. Raises ValueError for
    unknown modifiers or a missing key.
    """
    match = _ACCEL_RE.match(accel.strip())
    if not match:
        raise ValueError(f"Invalid accelerator '{accel}'")
    modifiers, key = match.groups()
    names = set()
    for raw in re.findall(r"<([A-Za-z]+)>", modifiers):
        name = _MODIFIER_ALIASES.get(raw.lower())
        if name is None:
            raise ValueError(f"Unknown modifier '{raw}' in '{accel}'")
        names.add(name)
    if len(key) == 1:
        key = key.lower()
    prefix = "".join(f"<{m}>" for m in _MODIFIER_ORDER if m in names)
    return prefix + key


SHORTCUTS: Dict[str, Callable[["DocEditor"], Any]] = {
    "<Ctrl>g": lambda editor: editor.group.group_selected(),
    "<Ctrl><Shift>g": lambda editor: editor.group.ungroup_selected(),
    "<Ctrl>z": lambda editor: editor.undo(),
    "<Ctrl><Shift>z": lambda editor: editor.redo(),
    # Saving the file is up to the host; the editor only records the
    # state in its history.
    "<Ctrl>s": lambda editor: editor.checkpoint(),
    "<Ctrl>c": lambda editor: editor.edit.copy_selected(),
    "<Ctrl>v": lambda editor: editor.edit.paste(),
    "<Ctrl>a": lambda editor: editor.select_all(),
    "Delete": lambda editor: editor.edit.delete_selected(),
}


def handle_shortcut(editor: "DocEditor", accel: str) -> bool:
    """
    Runs the command bound to an accelerator. Returns True if the
    accelerator is bound, whether or not the command changed anything.
    """
    try:
        key = normalize_accel(accel)
    except ValueError:
        logger.debug(f"Ignoring malformed accelerator '{accel}'")
        return False
    action = SHORTCUTS.get(key)
    if action is None:
        return False
    logger.debug(f"Shortcut {key}")
    action(editor)
    return True
