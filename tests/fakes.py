import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

_TMP = Path(tempfile.gettempdir())
os.environ.setdefault("DATABASE_PATH", str(_TMP / f"site_builder_test_{os.getpid()}.db"))
os.environ.setdefault("ANALYTICS_DB_PATH", str(_TMP / f"site_builder_analytics_test_{os.getpid()}.db"))
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ["API_KEY"] = ""

from app.schemas.conversation import Message, MessageMetadata  # noqa: E402


class FakeAIClient:
    """In-memory stand-in for the chat model: scripted stream tokens and completions."""

    def __init__(self, stream_tokens=None, completions=None):
        self.stream_tokens = list(stream_tokens or [])
        self.completions = list(completions or [])
        self.calls = []

    async def stream(self, messages, *, model=None, temperature=0.7, max_tokens=None):
        self.calls.append(
            {"kind": "stream", "messages": list(messages), "model": model,
             "temperature": temperature, "max_tokens": max_tokens}
        )
        for token in self.stream_tokens:
            yield token

    async def complete(self, messages, *, model=None, temperature=0.2, max_tokens=None, json_mode=False):
        self.calls.append(
            {"kind": "complete", "messages": list(messages), "model": model,
             "temperature": temperature, "max_tokens": max_tokens, "json_mode": json_mode}
        )
        if not self.completions:
            return ""
        item = self.completions.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def completion_calls(self):
        return [call for call in self.calls if call["kind"] == "complete"]


def make_message(role, content, step=None, index=0):
    return Message(
        id=f"msg-{index}-{role}",
        role=role,
        content=content,
        timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
        metadata=MessageMetadata(step=step) if step else None,
    )


PROFILE = {
    "name": "BrightPath Consulting",
    "industry": "service",
    "business_type": "consulting",
    "tagline": "Clear strategy for growing teams",
    "description": "We help small software companies plan, hire and ship.",
    "brand_personality": ["professional", "modern"],
    "contact": {"email": "hello@brightpath.co", "phone": "+1 555 0100"},
}

HERO = {
    "headline": "Strategy that ships",
    "subheadline": "Hands-on consulting for software teams between 5 and 50 people.",
    "cta": {"primary": "Book a call", "primary_action": "#contact"},
    "background_style": "gradient",
}

SERVICES = {
    "section_title": "Our Services",
    "services": [
        {"id": "service-1", "title": "Roadmapping", "description": "Quarterly product plans."},
        {"id": "service-2", "title": "Hiring", "description": "Structured engineering hiring loops."},
    ],
}

CONTACT = {
    "section_title": "Get In Touch",
    "show_form": True,
    "form_fields": ["name", "email", "message"],
    "contact_info": {"email": "hello@brightpath.co", "phone": None},
}
