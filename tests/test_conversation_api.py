import json
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tests.fakes import HERO, PROFILE, FakeAIClient, make_message

from fastapi.testclient import TestClient

from app.db import conversations as conversation_store
from app.db.connection import clear_all
from app.main import app


class ConversationApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        clear_all()

    def _create(self, **body):
        response = self.client.post("/v1/conversation", json=body)
        self.assertEqual(response.status_code, 201)
        return response.json()

    def test_create_starts_at_industry_selection(self):
        body = self._create(user_id="user-1")
        self.assertEqual(body["current_step"], "industry_selection")
        self.assertEqual(body["messages"], [])
        self.assertEqual(body["section_content"], {})
        self.assertIsNone(body["business_profile"])

    def test_get_and_list_by_user(self):
        first = self._create(user_id="user-1")
        self._create(user_id="user-2")

        response = self.client.get(f"/v1/conversation/{first['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["id"], first["id"])

        listed = self.client.get("/v1/conversation", params={"user_id": "user-1"}).json()
        self.assertEqual([c["id"] for c in listed], [first["id"]])

    def test_missing_conversation_is_404(self):
        self.assertEqual(self.client.get("/v1/conversation/nope").status_code, 404)
        self.assertEqual(self.client.delete("/v1/conversation/nope").status_code, 404)
        self.assertEqual(
            self.client.patch("/v1/conversation/nope", json={"industry": "local"}).status_code, 404
        )

    def test_update_and_delete(self):
        created = self._create()
        response = self.client.patch(
            f"/v1/conversation/{created['id']}",
            json={"industry": "service", "current_step": "hero", "business_profile": PROFILE},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["current_step"], "hero")
        self.assertEqual(body["business_profile"]["name"], "BrightPath Consulting")

        self.assertEqual(self.client.delete(f"/v1/conversation/{created['id']}").status_code, 204)
        self.assertIsNone(conversation_store.get_conversation(created["id"]))

    def test_update_rejects_unknown_step(self):
        created = self._create()
        response = self.client.patch(f"/v1/conversation/{created['id']}", json={"current_step": "pricing"})
        self.assertEqual(response.status_code, 422)

    def test_progress(self):
        created = self._create(industry="service")
        conversation_store.update_conversation(created["id"], current_step="services")

        body = self.client.get(f"/v1/conversation/{created['id']}/progress").json()
        self.assertEqual(body["current_step"], "services")
        self.assertEqual(body["progress"], {"current": 3, "total": 10, "percentage": 30})
        self.assertEqual(body["completed_sections"], ["hero"])


class ExtractApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        clear_all()
        conversation = conversation_store.create_conversation(industry="service")
        conversation_store.add_message(
            conversation.id, make_message("user", "Our headline is Strategy that ships", step="hero")
        )
        self.conversation_id = conversation.id

    def test_extract_returns_validated_content(self):
        fake = FakeAIClient(completions=[json.dumps(HERO)])
        with patch("app.services.chat_service.get_ai_client", return_value=fake):
            response = self.client.post(
                f"/v1/conversation/{self.conversation_id}/extract",
                json={"section_type": "hero", "user_message": "Button should say Book a call"},
            )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["content"]["headline"], "Strategy that ships")
        self.assertEqual(body["confidence"], 0.85)

        transcript = fake.completion_calls()[0]["messages"][1].content
        self.assertIn("user: Our headline is Strategy that ships", transcript)
        self.assertIn("user: Button should say Book a call", transcript)

    def test_invalid_extraction_is_422_with_partial_fields(self):
        fake = FakeAIClient(completions=[json.dumps({"headline": "Strategy that ships"})])
        with patch("app.services.chat_service.get_ai_client", return_value=fake):
            response = self.client.post(
                f"/v1/conversation/{self.conversation_id}/extract",
                json={"section_type": "hero"},
            )
        self.assertEqual(response.status_code, 422)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertIn("subheadline", body["error"])
        self.assertEqual(body["suggested_fields"], {"headline": "Strategy that ships"})
        self.assertIn("Strategy that ships", body["raw_input"])

    def test_unknown_section_type_is_400(self):
        response = self.client.post(
            f"/v1/conversation/{self.conversation_id}/extract",
            json={"section_type": "pricing"},
        )
        self.assertEqual(response.status_code, 400)

    def test_unconfigured_provider_is_502(self):
        with patch("app.services.chat_service.get_ai_client", side_effect=ValueError("Unsupported AI_PROVIDER='x'")):
            response = self.client.post(
                f"/v1/conversation/{self.conversation_id}/extract",
                json={"section_type": "hero"},
            )
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"], "AI provider is not configured")


if __name__ == "__main__":
    unittest.main()
