import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tests.fakes import CONTACT, HERO, PROFILE, SERVICES

from fastapi.testclient import TestClient

from app.analytics.db import clear_component_usage
from app.db import conversations as conversation_store
from app.db.connection import clear_all
from app.main import app
from app.services.site_service import slugify

ABOUT = {
    "section_title": "About Us",
    "headline": "Operators, not slide decks",
    "story": "We spent a decade running engineering teams before we started advising them.",
}

LAUNCH = {
    "email": "hello@brightpath.co",
    "image_preference": "placeholders",
    "domain_preference": "hosted_subdomain",
    "timeline": "this_week",
}


class SiteApiTestCase(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        clear_all()
        clear_component_usage()

    def _conversation(self, section_content=None, profile=PROFILE):
        conversation = conversation_store.create_conversation(industry="service")
        conversation_store.update_conversation(
            conversation.id,
            business_profile=profile,
            section_content=section_content if section_content is not None else {
                "hero": HERO,
                "services": SERVICES,
                "contact": CONTACT,
            },
        )
        return conversation.id

    def _generate(self):
        response = self.client.post("/v1/site/generate", json={"conversation_id": self._conversation()})
        self.assertEqual(response.status_code, 200)
        return response.json()


class GenerateSiteTests(SiteApiTestCase):
    def test_generate_builds_sections_in_flow_order(self):
        body = self._generate()
        self.assertTrue(body["success"])
        self.assertTrue(body["overall_reasoning"])

        site = body["site"]
        sections = site["site_config"]["sections"]
        self.assertEqual([s["type"] for s in sections], ["hero", "services", "contact"])
        self.assertEqual([s["order"] for s in sections], [0, 1, 2])
        self.assertEqual(sections[0]["id"], "section-hero")
        self.assertTrue(all(s["ai_selected"] for s in sections))
        self.assertTrue(all(s["ai_reasoning"] for s in sections))
        self.assertEqual(site["site_config"]["section_order"], ["hero", "services", "contact"])
        self.assertEqual(site["site_config"]["theme"]["colors"]["primary"], "#3B82F6")
        self.assertEqual(site["site_config"]["personality"], "professional")
        self.assertEqual(site["status"], "building")

        usage = self.client.get(f"/v1/site/{site['id']}/usage").json()["usage"]
        self.assertEqual(len(usage), 3)
        self.assertFalse(any(u["is_override"] for u in usage))

    def test_brand_colors_override_theme_defaults(self):
        profile = {**PROFILE, "colors": {"primary": "#111111", "secondary": "#222222", "accent": "#333333"}}
        conversation_id = self._conversation(profile=profile)
        site = self.client.post("/v1/site/generate", json={"conversation_id": conversation_id}).json()["site"]
        colors = site["site_config"]["theme"]["colors"]
        self.assertEqual(colors["primary"], "#111111")
        self.assertEqual(colors["background"], "#FFFFFF")

    def test_regenerating_keeps_the_same_draft(self):
        conversation_id = self._conversation()
        first = self.client.post("/v1/site/generate", json={"conversation_id": conversation_id}).json()
        second = self.client.post("/v1/site/generate", json={"conversation_id": conversation_id}).json()
        self.assertEqual(first["site"]["id"], second["site"]["id"])

    def test_generate_errors(self):
        missing = self.client.post("/v1/site/generate", json={"conversation_id": "nope"})
        self.assertEqual(missing.status_code, 404)

        bare = conversation_store.create_conversation()
        no_profile = self.client.post("/v1/site/generate", json={"conversation_id": bare.id})
        self.assertEqual(no_profile.status_code, 400)


class DraftTests(SiteApiTestCase):
    def test_save_and_load_by_session(self):
        response = self.client.post(
            "/v1/site/save",
            json={"session_id": "session-1", "business_profile": PROFILE, "content": {"hero": HERO}},
        )
        self.assertEqual(response.status_code, 200)
        site_id = response.json()["site_id"]

        loaded = self.client.get("/v1/site/save", params={"session_id": "session-1"}).json()
        self.assertEqual(loaded["site"]["id"], site_id)
        self.assertEqual(loaded["site"]["content"]["hero"]["headline"], HERO["headline"])

        self.assertEqual(self.client.get(f"/v1/site/{site_id}").json()["id"], site_id)

    def test_save_requires_business_name(self):
        response = self.client.post(
            "/v1/site/save",
            json={"session_id": "session-1", "business_profile": {}, "content": {}},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Business name is required")

    def test_missing_drafts(self):
        self.assertEqual(self.client.get("/v1/site/save", params={"session_id": "nope"}).status_code, 404)
        self.assertEqual(self.client.get("/v1/site/nope").status_code, 404)
        self.assertEqual(self.client.get("/v1/site/nope").json(), {"detail": "Site not found"})

    def test_site_config_sections_are_validated_on_update(self):
        site_id = self._generate()["site"]["id"]

        bad_variant = self.client.patch(
            f"/v1/site/{site_id}",
            json={"site_config": {"sections": [{"id": "a", "type": "hero", "order": 0, "variant": 9, "content": HERO}]}},
        )
        self.assertEqual(bad_variant.status_code, 422)

        not_an_object = self.client.patch(f"/v1/site/{site_id}", json={"site_config": {"sections": ["oops"]}})
        self.assertEqual(not_an_object.status_code, 422)

        bad_theme = self.client.patch(f"/v1/site/{site_id}", json={"site_config": {"theme": {"colors": {}}}})
        self.assertEqual(bad_theme.status_code, 422)

        sections = self.client.get(f"/v1/site/{site_id}/section")
        self.assertEqual(sections.status_code, 200)
        self.assertEqual(sections.json()["total"], 3)

    def test_site_config_sections_replace_and_reorder(self):
        site_id = self._generate()["site"]["id"]
        response = self.client.patch(
            f"/v1/site/{site_id}",
            json={
                "site_config": {
                    "personality": "modern",
                    "sections": [
                        {"id": "b", "type": "contact", "order": 1, "variant": 2, "content": CONTACT},
                        {"id": "a", "type": "hero", "order": 0, "variant": 5, "content": HERO},
                    ],
                }
            },
        )
        self.assertEqual(response.status_code, 200)

        site = self.client.get(f"/v1/site/{site_id}").json()
        self.assertEqual(site["site_config"]["personality"], "modern")
        self.assertEqual([s["id"] for s in site["site_config"]["sections"]], ["a", "b"])
        self.assertEqual(site["site_config"]["theme"]["colors"]["primary"], "#3B82F6")

    def test_save_rejects_invalid_sections(self):
        response = self.client.post(
            "/v1/site/save",
            json={
                "session_id": "session-1",
                "business_profile": PROFILE,
                "content": {},
                "site_config": {"sections": [{"id": "a", "type": "hero", "order": 0, "variant": 1, "content": {}}]},
            },
        )
        self.assertEqual(response.status_code, 422)
        self.assertTrue(response.json()["detail"].startswith("Invalid section data"))
        self.assertEqual(self.client.get("/v1/site/save", params={"session_id": "session-1"}).status_code, 404)

    def test_update_site_name_and_theme(self):
        site_id = self._generate()["site"]["id"]
        theme = {
            "colors": {
                "primary": "#000000",
                "secondary": "#111111",
                "accent": "#222222",
                "background": "#FFFFFF",
                "foreground": "#333333",
            },
            "fonts": {"heading": "Lora", "body": "Inter"},
            "border_radius": "lg",
        }
        response = self.client.patch(f"/v1/site/{site_id}", json={"name": "BrightPath", "theme": theme})
        self.assertEqual(response.status_code, 200)

        site = self.client.get(f"/v1/site/{site_id}").json()
        self.assertEqual(site["business_profile"]["name"], "BrightPath")
        self.assertEqual(site["site_config"]["theme"]["fonts"]["heading"], "Lora")
        self.assertEqual(len(site["site_config"]["sections"]), 3)


class SectionTests(SiteApiTestCase):
    def setUp(self):
        super().setUp()
        self.site_id = self._generate()["site"]["id"]

    def test_list_and_get(self):
        body = self.client.get(f"/v1/site/{self.site_id}/section").json()
        self.assertEqual(body["total"], 3)
        section = self.client.get(f"/v1/site/{self.site_id}/section/section-services").json()["section"]
        self.assertEqual(section["type"], "services")
        self.assertEqual(self.client.get(f"/v1/site/{self.site_id}/section/nope").status_code, 404)

    def test_create_section(self):
        response = self.client.post(
            f"/v1/site/{self.site_id}/section",
            json={"type": "about", "order": 1, "variant": 2, "content": ABOUT},
        )
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["total_sections"], 4)
        self.assertTrue(body["section"]["id"].startswith("section-about-"))

        types = [s["type"] for s in self.client.get(f"/v1/site/{self.site_id}/section").json()["sections"]]
        self.assertEqual(types, ["hero", "services", "about", "contact"])

    def test_duplicate_type_is_409(self):
        response = self.client.post(f"/v1/site/{self.site_id}/section", json={"type": "hero", "content": HERO})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["existing_section_id"], "section-hero")

    def test_invalid_content_is_422(self):
        response = self.client.post(
            f"/v1/site/{self.site_id}/section",
            json={"type": "about", "content": {"section_title": "About"}},
        )
        self.assertEqual(response.status_code, 422)

    def test_update_section(self):
        response = self.client.patch(
            f"/v1/site/{self.site_id}/section/section-hero",
            json={"variant": 4, "is_visible": False},
        )
        self.assertEqual(response.status_code, 200)
        section = response.json()["section"]
        self.assertEqual(section["variant"], 4)
        self.assertFalse(section["is_visible"])
        self.assertEqual(section["content"]["headline"], HERO["headline"])

    def test_delete_renumbers_order(self):
        response = self.client.delete(f"/v1/site/{self.site_id}/section/section-hero")
        self.assertEqual(response.json(), {"deleted": "section-hero", "remaining_sections": 2})
        sections = self.client.get(f"/v1/site/{self.site_id}/section").json()["sections"]
        self.assertEqual([(s["type"], s["order"]) for s in sections], [("services", 0), ("contact", 1)])


class VariantTests(SiteApiTestCase):
    def setUp(self):
        super().setUp()
        self.site_id = self._generate()["site"]["id"]

    def test_variant_options(self):
        body = self.client.get(f"/v1/site/{self.site_id}/variant", params={"section_type": "hero"}).json()
        self.assertEqual(body["current_variant"], 1)
        self.assertEqual(len(body["variants"]), 5)
        self.assertEqual(sum(1 for v in body["variants"] if v["is_recommended"]), 1)
        self.assertEqual(sum(1 for v in body["variants"] if v["is_current"]), 1)
        self.assertEqual(body["variants"][0]["match_score"], 50)

    def test_recommend_single_section_and_batch(self):
        single = self.client.post(f"/v1/site/{self.site_id}/variant", json={"section_type": "hero"}).json()
        self.assertEqual(single["recommendation"]["selected_variant"], 1)
        self.assertEqual(len(single["alternatives"]), 4)

        batch = self.client.post(
            f"/v1/site/{self.site_id}/variant", json={"sections": ["hero", "contact"]}
        ).json()
        self.assertEqual([s["section_type"] for s in batch["selections"]], ["hero", "contact"])
        self.assertTrue(batch["overall_reasoning"])

    def test_switch_variant_tracks_override(self):
        response = self.client.patch(
            f"/v1/site/{self.site_id}/variant",
            json={"section_id": "section-hero", "section_type": "hero", "new_variant": 3},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["previous_variant"], 1)
        self.assertEqual(body["new_variant"], 3)
        self.assertEqual(body["variant_info"]["match_score"], 0)

        usage = self.client.get(f"/v1/site/{self.site_id}/usage").json()["usage"]
        self.assertEqual(sum(1 for u in usage if u["is_override"]), 1)

        stats = self.client.get("/v1/analytics/overrides").json()
        self.assertEqual(stats["total_overrides"], 1)
        self.assertEqual(stats["overrides_by_section"], {"hero": 1})
        self.assertEqual(stats["overrides_by_variant"], {"3": 1})
        self.assertEqual(stats["most_overridden_section"], "hero")

    def test_switch_unknown_section_is_404(self):
        response = self.client.patch(
            f"/v1/site/{self.site_id}/variant",
            json={"section_id": "nope", "section_type": "gallery", "new_variant": 2},
        )
        self.assertEqual(response.status_code, 404)


class PublishTests(SiteApiTestCase):
    def test_slugify(self):
        self.assertEqual(slugify("BrightPath Consulting, LLC!"), "brightpath-consulting-llc")
        self.assertEqual(slugify("  a  --  b "), "-a-b-")
        self.assertEqual(len(slugify("x" * 80)), 50)

    def test_publish_uses_business_name(self):
        site_id = self._generate()["site"]["id"]
        response = self.client.post("/v1/site/publish", json={"site_id": site_id})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["slug"], "brightpath-consulting")
        self.assertTrue(body["published_url"].endswith("/sites/brightpath-consulting"))
        self.assertTrue(body["published_at"])
        self.assertEqual(self.client.get(f"/v1/site/{site_id}").json()["status"], "launched")

        again = self.client.post("/v1/site/publish", json={"site_id": site_id}).json()
        self.assertEqual(again["slug"], "brightpath-consulting")

    def test_slug_collision_gets_suffix(self):
        first_id = self._generate()["site"]["id"]
        self.client.post("/v1/site/publish", json={"site_id": first_id})

        second_id = self.client.post(
            "/v1/site/save",
            json={"session_id": "session-2", "business_profile": PROFILE, "content": {}},
        ).json()["site_id"]
        body = self.client.post("/v1/site/publish", json={"site_id": second_id}).json()
        self.assertRegex(body["slug"], r"^brightpath-consulting-[0-9a-f]{4}$")

    def test_suffix_is_redrawn_until_free(self):
        first_id = self._generate()["site"]["id"]
        self.client.post("/v1/site/publish", json={"site_id": first_id})

        ids = []
        for session in ("session-2", "session-3"):
            ids.append(
                self.client.post(
                    "/v1/site/save",
                    json={"session_id": session, "business_profile": PROFILE, "content": {}},
                ).json()["site_id"]
            )

        with patch("app.services.site_service.secrets.token_hex", side_effect=["aaaa", "aaaa", "bbbb"]):
            second = self.client.post("/v1/site/publish", json={"site_id": ids[0]}).json()
            third = self.client.post("/v1/site/publish", json={"site_id": ids[1]})

        self.assertEqual(second["slug"], "brightpath-consulting-aaaa")
        self.assertEqual(third.status_code, 200)
        self.assertEqual(third.json()["slug"], "brightpath-consulting-bbbb")

    def test_custom_domain(self):
        site_id = self._generate()["site"]["id"]
        body = self.client.post(
            "/v1/site/publish",
            json={"site_id": site_id, "slug": "Bright Path", "custom_domain": "brightpath.co"},
        ).json()
        self.assertEqual(body["slug"], "bright-path")
        self.assertEqual(body["published_url"], "https://brightpath.co")

    def test_publish_missing_site(self):
        self.assertEqual(self.client.post("/v1/site/publish", json={"site_id": "nope"}).status_code, 404)

    def test_launch_request(self):
        site_id = self._generate()["site"]["id"]
        response = self.client.post(f"/v1/site/{site_id}/launch", json=LAUNCH)
        self.assertEqual(response.json(), {"success": True, "site_id": site_id, "status": "awaiting_launch"})

        site = self.client.get(f"/v1/site/{site_id}").json()
        self.assertEqual(site["launch_preferences"]["timeline"], "this_week")

        invalid = self.client.post(f"/v1/site/{site_id}/launch", json={**LAUNCH, "email": "nope"})
        self.assertEqual(invalid.status_code, 422)


if __name__ == "__main__":
    unittest.main()
