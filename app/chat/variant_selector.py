from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Sequence

from app.registry.components import get_available_variants
from app.registry.variant_personalities import (
    RankedVariant,
    VariantPersonality,
    calculate_personality_match,
    get_variant_personalities,
    get_variant_personality,
    normalize_traits,
    rank_variants_by_personality,
    traits_overlap,
)

MAX_ALTERNATIVES = 4


@dataclass
class VariantAlternative:
    variant: int
    score: float
    personality: VariantPersonality

    def to_dict(self) -> dict[str, Any]:
        return {"variant": self.variant, "score": self.score, "personality": self.personality.to_dict()}


@dataclass
class VariantSelection:
    section_type: str
    selected_variant: int
    score: float
    reasoning: str
    alternatives: list[VariantAlternative] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "section_type": self.section_type,
            "selected_variant": self.selected_variant,
            "score": self.score,
            "reasoning": self.reasoning,
            "alternatives": [alt.to_dict() for alt in self.alternatives],
        }


@dataclass
class BatchVariantSelection:
    selections: list[VariantSelection]
    overall_reasoning: str


def _brand_traits(profile: Any) -> list[str]:
    if profile is None:
        return []
    if isinstance(profile, dict):
        traits = profile.get("brand_personality") or []
    else:
        traits = getattr(profile, "brand_personality", None) or []
    if isinstance(traits, str):
        traits = traits.split(",")
    elif not isinstance(traits, (list, tuple)):
        return []
    return [str(t).strip() for t in traits if str(t).strip()]


def _industry_group(industry: str | None) -> str:
    return "service" if industry == "service" else "local"


def _matched_traits(brand_traits: Sequence[str], personality: VariantPersonality) -> list[str]:
    variant_traits = normalize_traits(personality.traits)
    matched = []
    for raw in brand_traits:
        trait = raw.strip().lower()
        if trait and any(traits_overlap(trait, v) for v in variant_traits):
            matched.append(raw.strip())
    return matched


def _percent(score: float) -> int:
    return int(score * 100 + 0.5)


def _generate_reasoning(brand_traits: Sequence[str], personality: VariantPersonality, score: float) -> str:
    if not brand_traits:
        return f"Selected variant {personality.variant} ({personality.description}) as the default style."

    style = " and ".join(personality.traits[:2])
    matched = _matched_traits(brand_traits, personality)
    if not matched:
        return (
            f"Selected variant {personality.variant} for its {style} aesthetic, "
            "which complements your brand."
        )
    return (
        f"Selected variant {personality.variant} ({_percent(score)}% match) because your "
        f'"{", ".join(matched)}" brand personality aligns with its {style} design style.'
    )


def _ranked_available(section_type: str, industry: str | None, brand_traits: Sequence[str]) -> list[RankedVariant]:
    available = get_available_variants(_industry_group(industry), section_type)
    return [rv for rv in rank_variants_by_personality(brand_traits) if rv.variant in available]


def select_variant(section_type: str, industry: str | None, business_profile: Any) -> VariantSelection:
    brand_traits = _brand_traits(business_profile)
    ranked = _ranked_available(section_type, industry, brand_traits)

    if ranked:
        best = ranked[0]
    else:
        best = RankedVariant(variant=1, score=0.0, personality=get_variant_personalities()[0])

    alternatives = [
        VariantAlternative(variant=rv.variant, score=rv.score, personality=rv.personality)
        for rv in ranked
        if rv.variant != best.variant
    ][:MAX_ALTERNATIVES]

    return VariantSelection(
        section_type=section_type,
        selected_variant=best.variant,
        score=best.score,
        reasoning=_generate_reasoning(brand_traits, best.personality, best.score),
        alternatives=alternatives,
    )


def find_dominant_variant(selections: Sequence[VariantSelection]) -> int | None:
    """Most selected variant, only when it holds a strict majority of the sections."""
    if not selections:
        return None
    counts = Counter(s.selected_variant for s in selections)
    # Counter.most_common keeps first-seen order for equal counts
    variant, count = counts.most_common(1)[0]
    return variant if count > len(selections) / 2 else None


def _overall_reasoning(brand_traits: Sequence[str], selections: Sequence[VariantSelection]) -> str:
    if not brand_traits:
        return "Default variants selected. Add brand personality traits to get personalized recommendations."

    avg = sum(s.score for s in selections) / len(selections) if selections else 0.0
    traits_text = ", ".join(brand_traits)
    dominant = find_dominant_variant(selections)
    if dominant is not None:
        personality = get_variant_personality(dominant)
        approach = personality.description.lower() if personality else "selected"
        return (
            f'{_percent(avg)}% overall match. Your "{traits_text}" brand aligns best with the '
            f"{approach} design approach used across most sections."
        )
    return (
        f"{_percent(avg)}% overall match. Variants were selected to best represent your "
        f'"{traits_text}" brand personality across all sections.'
    )


def select_variants_for_site(
    sections: Sequence[str],
    industry: str | None,
    business_profile: Any,
) -> BatchVariantSelection:
    selections = [select_variant(section, industry, business_profile) for section in sections]
    return BatchVariantSelection(
        selections=selections,
        overall_reasoning=_overall_reasoning(_brand_traits(business_profile), selections),
    )


def get_variant_recommendation(section_type: str, industry: str | None, business_profile: Any) -> dict[str, Any]:
    selection = select_variant(section_type, industry, business_profile)
    return {
        "recommended": selection.selected_variant,
        "alternatives": [
            {
                "variant": alt.variant,
                "match": f"{_percent(alt.score)}% match - {alt.personality.description}",
            }
            for alt in selection.alternatives
        ],
        "explanation": selection.reasoning,
    }


def get_match_score(brand_traits: Sequence[str], variant: int) -> dict[str, Any]:
    personality = get_variant_personality(variant)
    if personality is None:
        return {"score": 0.0, "matched_traits": [], "personality": None}

    variant_traits = normalize_traits(personality.traits)
    matched = [t for t in normalize_traits(brand_traits) if any(traits_overlap(t, v) for v in variant_traits)]
    return {
        "score": calculate_personality_match(brand_traits, personality.traits),
        "matched_traits": matched,
        "personality": personality.to_dict(),
    }


def get_all_variants_with_scores(section_type: str, industry: str | None, business_profile: Any) -> list[dict[str, Any]]:
    brand_traits = _brand_traits(business_profile)
    ranked = rank_variants_by_personality(brand_traits)
    top_variant = ranked[0].variant if ranked else 1
    available = get_available_variants(_industry_group(industry), section_type)

    return [
        {
            "variant": rv.variant,
            "score": rv.score,
            "personality": rv.personality.to_dict(),
            "is_recommended": rv.variant == top_variant,
        }
        for rv in ranked
        if rv.variant in available
    ]
