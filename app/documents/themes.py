from __future__ import annotations

from dataclasses import dataclass

from app.core.config import settings


@dataclass(frozen=True)
class Theme:
    name: str
    label: str
    primary: str
    secondary: str
    accent: str
    text: str


THEMES: dict[str, Theme] = {
    "professional": Theme(
        name="professional",
        label="Professional",
        primary="1F3864",
        secondary="2E5597",
        accent="2E5597",
        text="222222",
    ),
    "modern": Theme(
        name="modern",
        label="Modern",
        primary="0F766E",
        secondary="115E59",
        accent="14B8A6",
        text="1F2937",
    ),
    "creative": Theme(
        name="creative",
        label="Creative",
        primary="7C3AED",
        secondary="DB2777",
        accent="F59E0B",
        text="27272A",
    ),
    "minimal": Theme(
        name="minimal",
        label="Minimal",
        primary="111111",
        secondary="444444",
        accent="777777",
        text="333333",
    ),
}

FALLBACK_THEME = "professional"


def default_theme() -> Theme:
    return THEMES.get(settings.default_theme) or THEMES[FALLBACK_THEME]


def resolve_theme(name: str | None) -> Theme:
    key = (name or "").strip().lower()
    return THEMES.get(key) or default_theme()
