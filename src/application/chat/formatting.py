"""Number formatting shared by prompts and templated replies."""

from typing import Optional


def format_volume(volume: Optional[float]) -> str:
    if not volume:
        return "N/A"
    if volume >= 1_000_000_000:
        return f"{volume / 1_000_000_000:.2f}B"
    if volume >= 1_000_000:
        return f"{volume / 1_000_000:.2f}M"
    if volume >= 1_000:
        return f"{volume / 1_000:.2f}K"
    return f"{volume:,.0f}"


def format_market_cap(market_cap: Optional[float]) -> str:
    if not market_cap:
        return "N/A"
    if market_cap >= 1_000_000_000_000:
        return f"${market_cap / 1_000_000_000_000:.2f}T"
    if market_cap >= 1_000_000_000:
        return f"${market_cap / 1_000_000_000:.2f}B"
    if market_cap >= 1_000_000:
        return f"${market_cap / 1_000_000:.2f}M"
    return f"${market_cap:,.0f}"


def format_signed(value: float, prefix: str = "", suffix: str = "") -> str:
    """format_signed(1.5, "$") -> "+$1.50"; format_signed(-0.25, suffix="%") -> "-0.25%"."""
    sign = "+" if value >= 0 else "-"
    return f"{sign}{prefix}{abs(value):.2f}{suffix}"
