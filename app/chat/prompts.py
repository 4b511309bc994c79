from __future__ import annotations

import json
from typing import Any

ORCHESTRATION_SYSTEM_PROMPT = (
    "You are an expert website consultant helping small business owners build their perfect "
    "website through friendly conversation.\n\n"
    "Your personality:\n"
    "- Warm, encouraging, and professional\n"
    "- Ask one question at a time\n"
    "- Celebrate their answers positively\n"
    "- Guide them through the process step by step\n"
    "- Never overwhelm with technical jargon\n\n"
    "Your goal is to gather information to build a complete website configuration. "
    "You'll guide users through:\n"
    "1. Understanding their business type and industry\n"
    "2. Collecting their business profile (name, tagline, brand personality)\n"
    "3. Building each section of their website with their content\n\n"
    "IMPORTANT RULES:\n"
    "- Ask only 1-2 questions per message\n"
    "- Wait for the user's response before moving to the next topic\n"
    "- Be encouraging and acknowledge what they share\n"
    "- If they seem stuck, provide helpful examples\n"
    "- Keep responses concise but warm\n\n"
    "Current conversation context will be provided. Your job is to guide them to the next "
    "piece of information needed."
)

_STEP_PROMPTS: dict[str, str] = {
    "industry_selection": (
        "The user is just starting. Ask them what type of business they're building a website for.\n\n"
        "Explain there are two main types:\n"
        "1. SERVICE businesses (consultants, agencies, professional services)\n"
        "2. LOCAL businesses (restaurants, salons, retail shops)\n\n"
        "Ask which best describes their business in a friendly way."
    ),
    "business_profile": (
        "Now gather their business profile. You need to collect:\n"
        "- Business name\n"
        "- A short, punchy tagline (encourage them!)\n"
        "- A description of what they do and who they serve\n"
        "- Their brand personality (2-3 words: professional, friendly, modern, elegant, bold, etc.)\n"
        "- Contact email\n\n"
        "Ask about these naturally, 1-2 at a time. Start with their business name."
    ),
    "hero": (
        "Time to create their hero section, the first thing visitors see!\n\n"
        "Guide them to provide:\n"
        "- A compelling headline (their main value proposition)\n"
        "- A subheadline (supporting message)\n"
        "- What their main call-to-action button should say\n\n"
        "Help them think about what makes their business special and what action they want "
        "visitors to take."
    ),
    "services": (
        "Now let's showcase their services/offerings.\n\n"
        "Help them list:\n"
        "- 3-6 main services or offerings\n"
        "- A brief description for each (1-2 sentences)\n"
        "- Optional: key features or benefits\n\n"
        "Ask them to describe what they offer and how it helps their clients."
    ),
    "menu": (
        "Let's build their menu section for their local business!\n\n"
        "Guide them to provide:\n"
        "- Menu categories (e.g., Appetizers, Mains, Desserts)\n"
        "- Items within each category\n"
        "- Prices and descriptions (optional)\n\n"
        "Start by asking what types of items or services they offer."
    ),
    "about": (
        "Time for the About section, their story!\n\n"
        "Help them share:\n"
        "- Their story and how they got started\n"
        "- What makes them unique\n"
        "- Years in business, team size, or other credibility builders\n"
        "- Their mission or values\n\n"
        "Encourage authentic storytelling. This is where personality shines!"
    ),
    "process": (
        "Let's explain their process to potential clients.\n\n"
        "Guide them to describe:\n"
        "- Their step-by-step process (3-6 steps work best)\n"
        "- What happens at each stage\n"
        "- What clients can expect\n\n"
        "This helps build trust by showing professionalism."
    ),
    "portfolio": (
        "Time to showcase their work!\n\n"
        "Ask about:\n"
        "- 3-6 notable projects or case studies\n"
        "- Brief descriptions of each\n"
        "- The results or outcomes achieved\n"
        "- Any client testimonials related to the work\n\n"
        "Even if they don't have formal case studies, past work examples help."
    ),
    "testimonials": (
        "Let's add social proof with testimonials!\n\n"
        "Guide them to provide:\n"
        "- 2-4 customer testimonials or reviews\n"
        "- The person's name and role (if available)\n"
        "- Keep quotes authentic and specific\n\n"
        "If they don't have formal testimonials, ask about positive feedback they've received."
    ),
    "location": (
        "Now for their location information!\n\n"
        "Collect:\n"
        "- Full business address\n"
        "- Business hours (by day)\n"
        "- Phone number\n"
        "- Any special instructions (parking, entrance, etc.)\n\n"
        "This helps local customers find and visit them."
    ),
    "gallery": (
        "Let's create a visual gallery!\n\n"
        "Ask about:\n"
        "- 4-12 photos they'd want to showcase\n"
        "- What each photo represents\n"
        "- Any themes or categories\n\n"
        "Even without actual photos now, we can plan the gallery structure and use placeholders."
    ),
    "contact": (
        "Final section: the contact form and info!\n\n"
        "Gather:\n"
        "- What contact methods they prefer (form, phone, email, social)\n"
        "- Which form fields they need (name, email, phone, message, etc.)\n"
        "- Any specific questions they want to ask visitors\n"
        "- Social media links\n\n"
        "Make it easy for customers to reach out!"
    ),
    "review": (
        "The user has completed all sections. Now summarize what we've built and ask if they'd like to:\n"
        "1. Review and edit any section\n"
        "2. Continue to preview their complete website\n"
        "3. Make any final adjustments\n\n"
        "Be celebratory, they've built their website content!"
    ),
    "complete": (
        "Congratulations! Their website content is complete. Let them know they can:\n"
        "1. Preview their full website\n"
        "2. Switch between design variants\n"
        "3. Export their site when ready\n"
        "4. Request launch assistance\n\n"
        "Thank them for their time and encourage them to explore their new website!"
    ),
}


def get_step_prompt(step: str, industry: str | None = None) -> str:
    _ = industry
    return _STEP_PROMPTS.get(step) or _STEP_PROMPTS["business_profile"]


def build_editing_context(existing_content: Any) -> str:
    if not existing_content:
        return ""
    return (
        "IMPORTANT: The user is EDITING an existing section. Current content:\n"
        f"{json.dumps(existing_content, indent=2, ensure_ascii=False)}\n\n"
        "Help them refine or update this content. Ask what they'd like to change specifically."
    )


def build_orchestration_system_prompt(
    step: str,
    industry: str | None = None,
    business_name: str | None = None,
    editing_context: str = "",
) -> str:
    lines = [ORCHESTRATION_SYSTEM_PROMPT, "", f"Current Step: {step}"]
    if industry:
        lines.append(f"Industry: {industry}")
    if business_name:
        lines.append(f"Business: {business_name}")
    lines.extend(["", "Step-specific guidance:", get_step_prompt(step, industry)])

    prompt = "\n".join(lines)
    editing = (editing_context or "").strip()
    if editing:
        prompt = f"{prompt}\n\n{editing}"
    return prompt


# JSON shapes shared by the extraction and suggestion prompts.
_SECTION_SHAPES: dict[str, str] = {
    "hero": """{
  "headline": "Main headline text (max 100 chars)",
  "subheadline": "Supporting subheadline (max 200 chars)",
  "cta": {
    "primary": "Primary button text (e.g., 'Get Started', 'Book Now')",
    "primary_action": "#contact",
    "secondary": "Optional secondary button text or null",
    "secondary_action": "#learn-more or null"
  },
  "background_style": "gradient"
}""",
    "services": """{
  "section_title": "Our Services",
  "section_subtitle": "Optional subtitle or null",
  "services": [
    {
      "id": "service-1",
      "title": "Service name (max 50 chars)",
      "description": "Brief description (max 200 chars)",
      "features": ["feature1", "feature2"] or null
    }
  ]
}""",
    "menu": """{
  "section_title": "Our Menu",
  "categories": [
    {
      "id": "cat-1",
      "name": "Category Name",
      "items": [
        {
          "id": "item-1",
          "name": "Item name",
          "description": "Brief description or null",
          "price": "$12.99 or null",
          "tags": ["vegetarian", "spicy"] or null
        }
      ]
    }
  ]
}""",
    "about": """{
  "section_title": "About Us",
  "headline": "Short compelling headline about the business",
  "story": "Their story in 2-4 paragraphs (max 1000 chars)",
  "highlights": [
    {"title": "Years in Business", "value": "15+"},
    {"title": "Clients Served", "value": "500+"}
  ] or null
}""",
    "process": """{
  "section_title": "How We Work",
  "section_subtitle": "Optional subtitle or null",
  "steps": [
    {
      "id": "step-1",
      "number": 1,
      "title": "Step name (short)",
      "description": "What happens in this step"
    }
  ]
}""",
    "portfolio": """{
  "section_title": "Our Work",
  "projects": [
    {
      "id": "project-1",
      "title": "Project or client name",
      "description": "Brief description of the work",
      "category": "Category or null",
      "link": null
    }
  ]
}""",
    "testimonials": """{
  "section_title": "What Our Clients Say",
  "testimonials": [
    {
      "id": "testimonial-1",
      "quote": "The testimonial text (max 500 chars)",
      "author": "Client Name",
      "role": "Their role or null",
      "company": "Company name or null",
      "rating": 5 or null
    }
  ]
}""",
    "location": """{
  "section_title": "Visit Us",
  "address": {
    "street": "123 Main St",
    "city": "City Name",
    "state": "ST",
    "zip": "12345",
    "country": "USA or null"
  },
  "phone": "Phone number or null",
  "email": "Email or null",
  "hours": [
    {"days": "Monday - Friday", "hours": "9:00 AM - 5:00 PM"},
    {"days": "Saturday", "hours": "10:00 AM - 2:00 PM"},
    {"days": "Sunday", "hours": "Closed"}
  ]
}""",
    "gallery": """{
  "section_title": "Gallery",
  "section_subtitle": "Optional subtitle or null",
  "images": [
    {
      "id": "image-1",
      "url": "placeholder",
      "alt": "Description of what the image shows",
      "caption": "Optional caption or null"
    }
  ]
}""",
    "contact": """{
  "section_title": "Get In Touch",
  "headline": "Short headline or null",
  "subtext": "Encouraging message about reaching out or null",
  "show_form": true,
  "form_fields": ["name", "email", "phone", "message"],
  "contact_info": {
    "email": "email@example.com or null",
    "phone": "Phone or null",
    "address": "Address or null"
  },
  "social_links": [
    {"platform": "facebook", "url": "URL"}
  ] or null
}""",
}

_SECTION_INTROS: dict[str, str] = {
    "hero": "Extract hero section content from the user's message.",
    "services": "Extract services/offerings content from the user's message.",
    "menu": "Extract menu content from the user's message for a local business.",
    "about": "Extract about section content from the user's message.",
    "process": "Extract process section content from the user's message.",
    "portfolio": "Extract portfolio/case study content from the user's message.",
    "testimonials": "Extract testimonials content from the user's message.",
    "location": "Extract location content from the user's message.",
    "gallery": "Extract gallery content from the user's message.",
    "contact": "Extract contact section content from the user's message.",
}

_SECTION_RULES: dict[str, list[str]] = {
    "hero": [
        "Extract the most compelling headline from their description",
        "If they don't specify a CTA, infer a relevant one based on their business",
        'background_style is always "gradient" for now',
        "Make content punchy and action-oriented",
    ],
    "services": [
        "Extract 1-12 services from their description",
        'Generate unique IDs like "service-1", "service-2"',
        "Keep titles concise and benefit-focused",
        "If they mention features/benefits, include them",
    ],
    "menu": [
        "Organize items into logical categories",
        "Include prices if mentioned",
        "Add dietary tags if mentioned (vegetarian, vegan, gluten-free, spicy, etc.)",
    ],
    "about": [
        "Extract the authentic story from their description",
        "Identify any credibility builders (years, clients, awards) for highlights",
        "Keep the story conversational but professional",
    ],
    "process": [
        "Extract 3-6 clear process steps",
        "Number them sequentially",
        "Keep descriptions actionable and clear",
    ],
    "portfolio": [
        "Extract 1-12 projects/case studies",
        "Include results if mentioned",
        "Categories help with filtering",
    ],
    "testimonials": [
        "Extract authentic quotes from their description",
        "If they paraphrase feedback, turn it into a quote",
        "Include 1-10 testimonials",
    ],
    "location": [
        "Parse address into components",
        "Format hours consistently",
        "Group similar days together",
    ],
    "gallery": [
        "Extract 3-20 image descriptions",
        "Use descriptive alt text",
        "Group by theme if mentioned",
    ],
    "contact": [
        "Default to showing a form unless they say otherwise",
        "Include fields they specifically mention",
        "Add social links if mentioned",
    ],
}


def get_extraction_prompt(section_type: str) -> str:
    key = section_type if section_type in _SECTION_SHAPES else "hero"
    rules = "\n".join(f"- {rule}" for rule in _SECTION_RULES[key])
    return (
        f"{_SECTION_INTROS[key]}\n\n"
        "Return a JSON object with this exact structure:\n"
        f"{_SECTION_SHAPES[key]}\n\n"
        f"Rules:\n{rules}"
    )


BUSINESS_PROFILE_EXTRACTION_PROMPT = """Extract business profile information from the conversation.

Return a JSON object with this exact structure:
{
  "name": "Business Name",
  "industry": "service" or "local",
  "business_type": "Specific type (e.g., 'consulting', 'restaurant', 'law firm')",
  "tagline": "Short, catchy tagline (max 200 chars)",
  "description": "Full business description (max 2000 chars)",
  "brand_personality": ["personality1", "personality2"],
  "colors": null,
  "contact": {
    "phone": "Phone or null",
    "email": "email@example.com",
    "address": "Address or null"
  }
}

Rules:
- Extract as much as available from the conversation
- For missing optional fields, use null
- brand_personality should be 1-5 descriptive words
- Infer industry from business type if not explicitly stated"""


BUSINESS_PROFILE_COMPLETION_PROMPT = (
    "Analyze this conversation and determine if we have enough business information to proceed.\n"
    "We need: business name, tagline/value proposition, description, brand personality, and contact email.\n"
    'Respond with just "true" if we have all required info, or "false" if we need more.'
)


def get_section_completion_prompt(section_type: str) -> str:
    return (
        "Analyze this message and determine if the user has provided enough content for the "
        f'"{section_type}" section of their website.\n'
        "They may have provided partial info across multiple messages. "
        "Check if core required fields are present.\n"
        'Respond with just "true" if ready to proceed, or "false" if we need more information.'
    )


def get_suggestion_prompt(section_type: str) -> str:
    key = section_type if section_type in _SECTION_SHAPES else "hero"
    return (
        f"You write website copy for small businesses. Draft the {key} section for the business "
        "described by the user, using its name, tagline, description and brand personality.\n\n"
        "Return a JSON object with this exact structure:\n"
        f"{_SECTION_SHAPES[key]}\n\n"
        "Rules:\n"
        "- Write realistic, specific copy; never leave required fields empty\n"
        "- Match the tone to the brand personality\n"
        "- Use null for optional fields you cannot fill\n"
        "- Return only the JSON object"
    )


def build_suggestion_user_message(business_profile: dict[str, Any] | None, industry: str) -> str:
    profile_json = json.dumps(business_profile, ensure_ascii=False) if business_profile else "null"
    return f"Business profile: {profile_json}\nIndustry: {industry}"
