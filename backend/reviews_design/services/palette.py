"""Review UI palette: defaults, theme overrides and CSS custom properties."""

import re
from collections.abc import Iterable, Mapping
from typing import Any

COLOR_ROLES = ("primary", "background", "border", "text", "accent")

DEFAULT_COLORS = {
    "primary": "#5070ff",
    "background": "#ffffff",
    "border": "#e5e7eb",
    "text": "#111827",
    "accent": "#fbbf24",
}

# Theme palette slug -> palette role
THEME_SLUG_ROLES = {
    "primary": "primary",
    "secondary": "accent",
    "accent": "accent",
    "text-color": "text",
}

CSS_VARIABLE_NAMES = {
    "primary": "--reviews-design-primary",
    "background": "--reviews-design-bg",
    "border": "--reviews-design-border",
    "text": "--reviews-design-text",
    "accent": "--reviews-design-accent",
}

_HEX_COLOR = re.compile(r"^#([A-Fa-f0-9]{3}){1,2}$")


def sanitize_hex_color(value: Any) -> str | None:
    """Return ``value`` as a lowercase ``#rrggbb`` string, or None if it is not a hex color."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not _HEX_COLOR.match(value):
        return None
    digits = value[1:].lower()
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return f"#{digits}"


def base_palette(theme_palette: Iterable[Mapping[str, Any]] | None = None) -> dict[str, str]:
    """Default colors overridden by matching entries of the theme palette."""
    colors = dict(DEFAULT_COLORS)
    for entry in theme_palette or []:
        if not isinstance(entry, Mapping):
            continue
        role = THEME_SLUG_ROLES.get(str(entry.get("slug") or ""))
        color = sanitize_hex_color(entry.get("color"))
        if role and color:
            colors[role] = color
    return colors


def resolve_colors(
    stored: Mapping[str, Any] | None, theme_palette: Iterable[Mapping[str, Any]] | None = None
) -> dict[str, str]:
    """Effective colors: stored values where set, the base palette elsewhere."""
    colors = base_palette(theme_palette)
    for role, value in (stored or {}).items():
        if role in colors and isinstance(value, str) and value:
            colors[role] = value
    return colors


def sanitize_colors(
    raw: Mapping[str, Any], theme_palette: Iterable[Mapping[str, Any]] | None = None
) -> dict[str, str]:
    """Build a complete color set from form input; invalid or empty fields use the base palette."""
    fallback = base_palette(theme_palette)
    return {role: sanitize_hex_color(raw.get(role)) or fallback[role] for role in COLOR_ROLES}


def css_variables(colors: Mapping[str, str]) -> str:
    declarations = "".join(
        f"{CSS_VARIABLE_NAMES[role]}:{colors[role]};" for role in COLOR_ROLES if role in colors
    )
    return f":root{{{declarations}}}"
