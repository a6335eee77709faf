"""Theme presets and normalization of stored theme JSON.

Themes have been saved in three shapes over time:

* ``{"preset": <name>, "colors": {...}}`` - current shape;
* ``{"preset": "light" | "dark" | "vibrant", "colors": {...}}`` - old preset names;
* ``{"primary": ..., "background": ...}`` - colors at the root, no preset.

:func:`normalize_theme` folds all of them into the current shape.
"""

from typing import Any, Dict

DEFAULT_PRESET = "glass-corporate"
CUSTOM = "custom"

COLOR_KEYS = (
    "primary",
    "secondary",
    "accent",
    "background",
    "text",
    "card",
    "border",
    "gradientStart",
    "gradientEnd",
    "glowColor",
    "shadowColor",
)

# Root-level keys understood in the legacy shape
LEGACY_COLOR_KEYS = COLOR_KEYS[:7]

PRESETS: Dict[str, Dict[str, Any]] = {
    "glass-corporate": {
        "name": "Glass 3D Corporate",
        "description": "Clean white 3D with glass morphism - High-gloss floating cards",
        "colors": {
            "primary": "#8b5cf6",
            "secondary": "#ec4899",
            "accent": "#10b981",
            "background": "#ffffff",
            "text": "#1f2937",
            "card": "rgba(255, 255, 255, 0.9)",
            "border": "rgba(139, 92, 246, 0.2)",
            "gradientStart": "#8b5cf6",
            "gradientEnd": "#ec4899",
            "glowColor": "rgba(139, 92, 246, 0.3)",
            "shadowColor": "rgba(0, 0, 0, 0.25)",
        },
    },
    "neon-cyber": {
        "name": "Neon Cyber 3D",
        "description": "Cyberpunk/Gamer style - Neon glows with holographic effects",
        "colors": {
            "primary": "#06b6d4",
            "secondary": "#ec4899",
            "accent": "#10b981",
            "background": "#0a0a0a",
            "text": "#fafafa",
            "card": "rgba(26, 26, 46, 0.8)",
            "border": "rgba(6, 182, 212, 0.5)",
            "gradientStart": "#06b6d4",
            "gradientEnd": "#ec4899",
            "glowColor": "rgba(6, 182, 212, 0.5)",
            "shadowColor": "rgba(6, 182, 212, 0.3)",
        },
    },
    "crypto-verse": {
        "name": "Crypto Verse 3D",
        "description": "Premium isometric 3D - Gem-like buttons with beveled edges",
        "colors": {
            "primary": "#8b5cf6",
            "secondary": "#f59e0b",
            "accent": "#ef4444",
            "background": "#1a1a2e",
            "text": "#fafafa",
            "card": "rgba(26, 26, 46, 0.9)",
            "border": "rgba(139, 92, 246, 0.3)",
            "gradientStart": "#8b5cf6",
            "gradientEnd": "#f59e0b",
            "glowColor": "rgba(139, 92, 246, 0.4)",
            "shadowColor": "rgba(0, 0, 0, 0.4)",
        },
    },
}

LEGACY_PRESET_NAMES = {
    "light": "glass-corporate",
    "dark": "neon-cyber",
    "vibrant": "crypto-verse",
}


def _pick_colors(source: Dict[str, Any], keys) -> Dict[str, str]:
    return {k: source[k] for k in keys if isinstance(source.get(k), str) and source[k]}


def normalize_theme(theme: Any) -> Dict[str, Any]:
    """Return ``{"preset": str, "colors": dict}`` for any stored theme value."""
    if not isinstance(theme, dict) or not theme:
        return {"preset": DEFAULT_PRESET, "colors": dict(PRESETS[DEFAULT_PRESET]["colors"])}

    preset = theme.get("preset")
    colors = theme.get("colors")
    if preset and isinstance(colors, dict):
        preset = LEGACY_PRESET_NAMES.get(preset, preset)
        if preset not in PRESETS:
            preset = CUSTOM
        return {"preset": preset, "colors": _pick_colors(colors, COLOR_KEYS)}

    legacy = _pick_colors(theme, LEGACY_COLOR_KEYS)
    if legacy.get("primary") or legacy.get("background"):
        return {"preset": CUSTOM, "colors": legacy}

    return {"preset": DEFAULT_PRESET, "colors": dict(PRESETS[DEFAULT_PRESET]["colors"])}
