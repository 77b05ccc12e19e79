"""Parse accelerator strings such as ``Ctrl+Alt+Space`` used for reader hotkeys."""

from __future__ import annotations

from dataclasses import dataclass

MODIFIER_ALIASES: dict[str, str] = {
    "ctrl": "Ctrl",
    "control": "Ctrl",
    "alt": "Alt",
    "option": "Alt",
    "shift": "Shift",
    "cmd": "Super",
    "command": "Super",
    "super": "Super",
    "meta": "Super",
    "win": "Super",
    "cmdorctrl": "CmdOrCtrl",
    "commandorcontrol": "CmdOrCtrl",
}

MODIFIER_ORDER = ("CmdOrCtrl", "Ctrl", "Alt", "Shift", "Super")

KEY_NAMES: dict[str, str] = {
    # Navigation
    "pageup": "PageUp",
    "pgup": "PageUp",
    "pagedown": "PageDown",
    "pgdn": "PageDown",
    "home": "Home",
    "end": "End",
    "up": "Up",
    "down": "Down",
    "left": "Left",
    "right": "Right",
    "arrowup": "Up",
    "arrowdown": "Down",
    "arrowleft": "Left",
    "arrowright": "Right",
    # Special keys
    "space": "Space",
    "enter": "Enter",
    "return": "Enter",
    "tab": "Tab",
    "escape": "Esc",
    "esc": "Esc",
    "backspace": "Backspace",
    "delete": "Delete",
    "del": "Delete",
    "insert": "Insert",
    # Punctuation, by symbol and by name
    "plus": "Plus",
    "minus": "Minus",
    "-": "Minus",
    "equal": "Equal",
    "=": "Equal",
    "comma": "Comma",
    ",": "Comma",
    "period": "Period",
    ".": "Period",
    "slash": "Slash",
    "/": "Slash",
    "backslash": "Backslash",
    "\\": "Backslash",
    "semicolon": "Semicolon",
    ";": "Semicolon",
    "quote": "Quote",
    "'": "Quote",
    "backquote": "Backquote",
    "`": "Backquote",
    "bracketleft": "BracketLeft",
    "[": "BracketLeft",
    "bracketright": "BracketRight",
    "]": "BracketRight",
}
KEY_NAMES.update({chr(c): chr(c).upper() for c in range(ord("a"), ord("z") + 1)})
KEY_NAMES.update({str(d): str(d) for d in range(10)})
KEY_NAMES.update({f"f{n}": f"F{n}" for n in range(1, 25)})


@dataclass(slots=True, frozen=True)
class Hotkey:
    modifiers: frozenset[str]
    key: str

    def __str__(self) -> str:
        mods = [m for m in MODIFIER_ORDER if m in self.modifiers]
        return "+".join([*mods, self.key])


def parse_hotkey(shortcut: str) -> Hotkey:
    """
    Parse an accelerator string into its modifiers and key.

    Examples:
        "Ctrl+Alt+Space" -> Hotkey({"Ctrl", "Alt"}, "Space")
        "PageDown" -> Hotkey(set(), "PageDown")
        "cmd+shift+f" -> Hotkey({"Super", "Shift"}, "F")

    Raises:
        ValueError: If the shortcut is empty, names an unknown key or has more than one key
    """
    text = shortcut.strip()
    # A literal "+" key: "Ctrl++" or "+"
    if text == "+" or text.endswith("++"):
        text = text[:-1] + "plus"
    parts = [p.strip().lower() for p in text.split("+")]
    if not text or any(not p for p in parts):
        raise ValueError(f"Malformed shortcut: {shortcut!r}")

    modifiers: set[str] = set()
    key: str | None = None

    for part in parts:
        if part in MODIFIER_ALIASES:
            modifiers.add(MODIFIER_ALIASES[part])
        elif part in KEY_NAMES:
            if key is not None:
                raise ValueError(f"Multiple keys found in shortcut: {shortcut}")
            key = KEY_NAMES[part]
        else:
            raise ValueError(f"Unknown key in shortcut: {part} (from {shortcut})")

    if key is None:
        raise ValueError(f"No key found in shortcut: {shortcut}")

    return Hotkey(frozenset(modifiers), key)
