# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Theme stylesheets and primary-color overrides.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from resumectl.errors import InvalidColor, InvalidTheme

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
THEMES_DIR = TEMPLATES_DIR / "themes"

DEFAULT_THEME = "modern"

# Insertion order is the display order
THEMES = {
    "modern": "Modern theme with blue gradient (default)",
    "classic": "Classic professional theme in black",
    "minimal": "Clean minimalist theme",
    "elegant": "Elegant theme with burgundy colors",
    "tech": "Tech theme with green/cyan",
}

SECONDARY_DARKEN = 0.2
ACCENT_LIGHTEN = 0.15

_HEX_COLOR_RE = re.compile(r"^#([0-9A-Fa-f]{6}|[0-9A-Fa-f]{3})$")
_CSS_VARIABLE_RE = {
    "primary": re.compile(r"--primary-color:\s*#[0-9A-Fa-f]{6};"),
    "secondary": re.compile(r"--secondary-color:\s*#[0-9A-Fa-f]{6};"),
    "accent": re.compile(r"--accent-color:\s*#[0-9A-Fa-f]{6};"),
}


@dataclass(frozen=True)
class ColorScheme:
    primary: str
    secondary: str
    accent: str


def validate_hex_color(color: Optional[str]) -> bool:
    """True for #RGB, #RRGGBB, or an empty value (no override)."""
    if not color:
        return True
    return bool(_HEX_COLOR_RE.match(color))


def _clamp(value: int) -> int:
    return max(0, min(255, value))


def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    digits = color.lstrip("#")
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{_clamp(r):02x}{_clamp(g):02x}{_clamp(b):02x}"


def darken(color: str, factor: float) -> str:
    r, g, b = hex_to_rgb(color)
    return rgb_to_hex(int(r * (1 - factor)), int(g * (1 - factor)), int(b * (1 - factor)))


def lighten(color: str, factor: float) -> str:
    r, g, b = hex_to_rgb(color)
    return rgb_to_hex(
        r + int((255 - r) * factor),
        g + int((255 - g) * factor),
        b + int((255 - b) * factor),
    )


def derive_color_scheme(primary: str) -> ColorScheme:
    return ColorScheme(
        primary=primary,
        secondary=darken(primary, SECONDARY_DARKEN),
        accent=lighten(primary, ACCENT_LIGHTEN),
    )


def theme_names() -> str:
    return ", ".join(THEMES)


def validate_theme(name: str) -> str:
    if name not in THEMES:
        raise InvalidTheme(name, theme_names())
    return name


def apply_color_scheme(css: str, scheme: ColorScheme) -> str:
    """Rewrites the three color custom properties of a theme stylesheet."""
    for role, pattern in _CSS_VARIABLE_RE.items():
        css = pattern.sub(f"--{role}-color: {getattr(scheme, role)};", css)
    return css


def get_theme_css(name: str, color: Optional[str] = None) -> str:
    """
    Returns the stylesheet of a theme, recolored when a primary color is given.

    Raises:
        InvalidTheme: unknown theme name
        InvalidColor: color is not #RGB or #RRGGBB
    """
    validate_theme(name)
    if not validate_hex_color(color):
        raise InvalidColor(color)

    css = (THEMES_DIR / f"{name}.css").read_text(encoding="utf-8")
    if color:
        css = apply_color_scheme(css, derive_color_scheme(color))
    return css


def list_themes() -> List[Tuple[str, str, bool]]:
    return [(name, description, name == DEFAULT_THEME) for name, description in THEMES.items()]
