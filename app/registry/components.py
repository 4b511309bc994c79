from __future__ import annotations

from app.core.config.registry import get_registry_value


def _variants_per_section() -> int:
    return int(get_registry_value("components.variants_per_section", 5) or 5)


def _sections_for(group: str) -> list[str]:
    return list(get_registry_value(f"components.sections.{group}", []) or [])


def get_available_variants(industry: str, section_type: str) -> list[int]:
    """Variants registered for a section under the industry's own or the shared components."""
    groups = [industry, "shared"] if industry != "shared" else ["shared"]
    available: set[int] = set()
    for group in groups:
        if section_type in _sections_for(group):
            available.update(range(1, _variants_per_section() + 1))
    return sorted(available)
