import sys
import unittest
from pathlib import Path

from pydantic import ValidationError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tests.fakes import CONTACT, HERO, PROFILE, SERVICES

from app.schemas import section_content
from app.schemas.business_profile import BusinessProfile
from app.schemas.site_config import SiteSection


def _steps(count):
    return [
        {"id": f"step-{i}", "number": i, "title": f"Step {i}", "description": "Work happens."}
        for i in range(1, count + 1)
    ]


class SectionContentTests(unittest.TestCase):
    def test_every_section_type_has_a_schema(self):
        self.assertEqual(set(section_content.SECTION_SCHEMAS), set(section_content.SECTION_TYPES))

    def test_hero_limits(self):
        section_content.HeroContent.model_validate(HERO)
        with self.assertRaises(ValidationError):
            section_content.HeroContent.model_validate({**HERO, "headline": "x" * 101})
        with self.assertRaises(ValidationError):
            section_content.HeroContent.model_validate({**HERO, "background_style": "video"})

    def test_optional_fields_accept_null(self):
        content = section_content.HeroContent.model_validate(
            {**HERO, "background_image": None, "cta": {**HERO["cta"], "secondary": None}}
        )
        self.assertIsNone(content.background_image)

    def test_process_needs_three_to_six_steps(self):
        section_content.ProcessContent.model_validate({"section_title": "How", "steps": _steps(3)})
        with self.assertRaises(ValidationError):
            section_content.ProcessContent.model_validate({"section_title": "How", "steps": _steps(2)})
        with self.assertRaises(ValidationError):
            section_content.ProcessContent.model_validate({"section_title": "How", "steps": _steps(7)})

    def test_testimonial_rating_range(self):
        quote = {"id": "t-1", "quote": "Great team.", "author": "Dana"}
        section_content.SECTION_SCHEMAS["testimonials"].model_validate(
            {"section_title": "Reviews", "testimonials": [{**quote, "rating": 5}]}
        )
        with self.assertRaises(ValidationError):
            section_content.SECTION_SCHEMAS["testimonials"].model_validate(
                {"section_title": "Reviews", "testimonials": [{**quote, "rating": 6}]}
            )

    def test_gallery_needs_three_images(self):
        images = [{"id": f"image-{i}", "url": "placeholder", "alt": "Shop front"} for i in range(2)]
        with self.assertRaises(ValidationError):
            section_content.GalleryContent.model_validate({"section_title": "Gallery", "images": images})

    def test_contact_form_fields_and_email(self):
        section_content.ContactContent.model_validate(CONTACT)
        with self.assertRaises(ValidationError):
            section_content.ContactContent.model_validate({**CONTACT, "form_fields": ["fax"]})
        with self.assertRaises(ValidationError):
            section_content.ContactContent.model_validate(
                {**CONTACT, "contact_info": {"email": "nope"}}
            )


class BusinessProfileTests(unittest.TestCase):
    def test_valid_profile_and_industry_normalization(self):
        profile = BusinessProfile.model_validate({**PROFILE, "industry": " Service "})
        self.assertEqual(profile.industry, "service")

    def test_brand_personality_and_colors(self):
        with self.assertRaises(ValidationError):
            BusinessProfile.model_validate({**PROFILE, "brand_personality": []})
        with self.assertRaises(ValidationError):
            BusinessProfile.model_validate(
                {**PROFILE, "colors": {"primary": "blue", "secondary": "#000000", "accent": "#FFFFFF"}}
            )


class SiteSectionTests(unittest.TestCase):
    def test_content_is_validated_against_its_own_type(self):
        section = SiteSection.model_validate(
            {"id": "s-1", "type": "services", "order": 0, "variant": 2, "content": SERVICES}
        )
        self.assertTrue(section.is_visible)
        self.assertFalse(section.ai_selected)
        self.assertNotIn("section_subtitle", section.content)

        with self.assertRaises(ValidationError):
            SiteSection.model_validate(
                {"id": "s-2", "type": "hero", "order": 0, "variant": 1, "content": SERVICES}
            )

    def test_variant_range(self):
        with self.assertRaises(ValidationError):
            SiteSection.model_validate({"id": "s-1", "type": "hero", "order": 0, "variant": 6, "content": HERO})


if __name__ == "__main__":
    unittest.main()
