from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from app.core.config.registry import get_registry_value


@dataclass(frozen=True)
class VariantPersonality:
    variant: int
    traits: tuple[str, ...]
    description: str
    best_for: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "variant": self.variant,
            "traits": list(self.traits),
            "description": self.description,
            "best_for": list(self.best_for),
        }


@dataclass(frozen=True)
class RankedVariant:
    variant: int
    score: float
    personality: VariantPersonality


@lru_cache(maxsize=1)
def get_variant_personalities() -> tuple[VariantPersonality, ...]:
    rows = get_registry_value("variant_personalities", []) or []
    personalities = [
        VariantPersonality(
            variant=int(row["variant"]),
            traits=tuple(str(t) for t in row.get("traits", [])),
            description=str(row.get("description", "")),
            best_for=tuple(str(b) for b in row.get("best_for", [])),
        )
        for row in rows
    ]
    personalities.sort(key=lambda p: p.variant)
    return tuple(personalities)


def get_variant_personality(variant: int) -> VariantPersonality | None:
    for personality in get_variant_personalities():
        if personality.variant == variant:
            return personality
    return None


def normalize_traits(traits) -> list[str]:
    normalized = []
    for trait in traits or []:
        value = str(trait).strip().lower()
        if value:
            normalized.append(value)
    return normalized


def traits_overlap(brand_trait: str, variant_trait: str) -> bool:
    return variant_trait in brand_trait or brand_trait in variant_trait


def calculate_personality_match(brand_traits, variant_traits) -> float:
    """Share of brand traits that overlap (substring either way) with a variant trait.

    Blank traits are ignored on both sides; the denominator never drops below 1.
    """
    brand = normalize_traits(brand_traits)
    variant = normalize_traits(variant_traits)

    matches = 0
    for trait in brand:
        if any(traits_overlap(trait, v) for v in variant):
            matches += 1
    return matches / max(len(brand), 1)


def rank_variants_by_personality(brand_traits) -> list[RankedVariant]:
    ranked = [
        RankedVariant(
            variant=p.variant,
            score=calculate_personality_match(brand_traits, p.traits),
            personality=p,
        )
        for p in get_variant_personalities()
    ]
    # sort is stable, so equal scores keep variant order
    ranked.sort(key=lambda r: r.score, reverse=True)
    return ranked
