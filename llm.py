"""OpenAI round trips: journal extraction and free-text health insights."""
import json
import logging
import re

from openai import OpenAI

from config import OPENAI_API_KEY, OPENAI_MODEL
from models import SYMPTOM_CATEGORIES

logger = logging.getLogger(__name__)

# Extraction never assigns MENTAL_HEALTH; mood lands in OTHER
EXTRACTABLE_REGIONS = (
    "HEAD", "NECK", "CHEST", "HEART", "LUNGS", "ABDOMEN",
    "LOW_BACK", "UPPER_BACK", "LEFT_ARM", "RIGHT_ARM",
    "LEFT_LEG", "RIGHT_LEG", "SKIN", "OTHER",
)

EXTRACTION_PROMPT = """You are a health data extraction assistant. Your ONLY job is to extract structured health information from user journal entries.

CRITICAL RULES:
1. NEVER provide medical diagnoses, advice, or interpretations
2. NEVER suggest treatments or medications
3. ONLY extract objective data that the user has explicitly stated
4. If uncertain, omit the field rather than guessing

Extract the following information into a JSON array of objects:

For each distinct piece of health information, create an object with:
- category: "SYMPTOM" | "VITAL" | "ACTIVITY" | "NOTE"
- title: Brief description (e.g., "Headache", "Blood pressure reading", "Morning run")
- bodyRegion: One of: HEAD, NECK, CHEST, HEART, LUNGS, ABDOMEN, LOW_BACK, UPPER_BACK, LEFT_ARM, RIGHT_ARM, LEFT_LEG, RIGHT_LEG, SKIN, OTHER
- severity: (optional) 1-10 scale if mentioned
- vitalsJson: (optional) Object with fields like: { bp: "120/80", hr: 72, tempC: 37.2, spo2: 98 }
- activityJson: (optional) Object with fields like: { type: "running", distanceKm: 5, durationMin: 30, perceivedExertion: 7 }
- tags: (optional) Array of relevant keywords

Body region mapping guidelines:
- Headache, migraine, dizziness -> HEAD
- Chest pain, chest tightness -> CHEST
- Heart palpitations, irregular heartbeat -> HEART
- Shortness of breath, breathing difficulty -> LUNGS
- Stomach pain, nausea -> ABDOMEN
- Rash, itching -> SKIN
- General fatigue, mood -> OTHER

Return ONLY valid JSON of the form {"items": [...]}. If no health data is found, return {"items": []}."""

INSIGHTS_PROMPT = (
    "You are a helpful health assistant. Provide clear, informative insights based on the user's health data.\n"
    "Always remind users to consult with healthcare professionals for medical advice. "
    "Keep responses concise and actionable."
)

EXPLAIN_PROMPT = (
    "You are a helpful medical assistant. Help users understand medical information in simple terms. "
    "Always remind users that this is not medical advice and they should consult their healthcare "
    "provider for medical guidance."
)


class LLMError(Exception):
    """Raised when the model cannot be reached or is not configured."""


_client = None


def get_client() -> OpenAI:
    global _client
    if not OPENAI_API_KEY:
        raise LLMError("OPENAI_API_KEY is not configured")
    if _client is None:
        _client = OpenAI(api_key=OPENAI_API_KEY)
    return _client


def _complete(messages: list[dict], temperature: float, **kwargs) -> str:
    try:
        resp = get_client().chat.completions.create(
            model=OPENAI_MODEL, messages=messages, temperature=temperature, **kwargs
        )
    except LLMError:
        raise
    except Exception as e:
        raise LLMError(str(e)) from e
    if not resp.choices:
        return ""
    return resp.choices[0].message.content or ""


# ════════════════════════════════════
#        JOURNAL EXTRACTION
# ════════════════════════════════════

def parse_model_reply(text: str) -> list[dict]:
    """Decode the model reply into a list of raw items.

    Accepts a bare JSON array or an object with an ``items`` key. When the
    reply is not valid JSON, the first ``[...]`` span is tried instead;
    anything else yields no items.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        match = re.search(r"\[[\s\S]*\]", text or "")
        if not match:
            return []
        try:
            data = json.loads(match.group(0))
        except ValueError:
            return []

    if isinstance(data, dict):
        data = data.get("items") or []
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]


def _severity(value) -> int | None:
    try:
        n = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return None
    if n <= 0:
        return None
    return min(n, 10)


def normalize_item(item: dict) -> dict:
    category = item.get("category")
    region = item.get("bodyRegion") or item.get("body_region")
    tags = item.get("tags")
    vitals = item.get("vitalsJson") or item.get("vitals_json")
    activity = item.get("activityJson") or item.get("activity_json")
    return {
        "category": category if category in SYMPTOM_CATEGORIES else "SYMPTOM",
        "body_region": region if region in EXTRACTABLE_REGIONS else "OTHER",
        "title": str(item.get("title") or "Untitled")[:200],
        "severity": _severity(item.get("severity")),
        "tags": [str(t) for t in tags] if isinstance(tags, list) else [],
        "vitals_json": vitals if isinstance(vitals, dict) else None,
        "activity_json": activity if isinstance(activity, dict) else None,
    }


def extract_health_items(raw_text: str) -> list[dict]:
    reply = _complete(
        [
            {"role": "system", "content": EXTRACTION_PROMPT},
            {"role": "user", "content": raw_text},
        ],
        temperature=0.3,
        response_format={"type": "json_object"},
    )
    items = [normalize_item(i) for i in parse_model_reply(reply)]
    logger.info("Extracted %d item(s) from journal text", len(items))
    return items


# ════════════════════════════════════
#           INSIGHTS
# ════════════════════════════════════

def generate_health_insights(prompt: str) -> str:
    return _complete(
        [
            {"role": "system", "content": INSIGHTS_PROMPT},
            {"role": "user", "content": prompt},
        ],
        temperature=0.7,
        max_tokens=1000,
    )


def analyze_symptoms(symptoms) -> str:
    lines = "\n".join(
        f"- {s.title} (Severity: {s.severity if s.severity is not None else '?'}/10, Body Region: {s.body_region})"
        for s in symptoms
    )
    prompt = f"""Analyze the following symptoms and provide insights about potential patterns or connections:

{lines}

Please provide:
1. Any notable patterns or trends
2. Suggestions for tracking or monitoring
3. General wellness recommendations

Remember to emphasize that this is not a diagnosis and users should consult healthcare professionals."""
    return generate_health_insights(prompt)


def _vital_lines(vitals) -> list[str]:
    out = []
    for v in vitals:
        data = v.vitals_json or {}
        parts = [f"{k}: {val}" for k, val in data.items()]
        out.append(f"- {v.title}: {', '.join(parts) or 'no values'}")
    return out


def generate_health_summary(conditions, medications, symptoms, vitals) -> str:
    conditions_txt = "\n".join(
        f"- {c.name} (Since: {c.onset_date.date().isoformat() if c.onset_date else 'Unknown'})" for c in conditions
    ) or "None recorded"
    medications_txt = "\n".join(f"- {m.name} ({m.dosage or 'dose unknown'})" for m in medications) or "None recorded"
    symptoms_txt = "\n".join(
        f"- {s.title} (Severity: {s.severity if s.severity is not None else '?'}/10)" for s in symptoms[:10]
    ) or "None recorded"
    vitals_txt = "\n".join(_vital_lines(vitals[:5])) or "None recorded"

    prompt = f"""Generate a comprehensive health summary report based on the following data:

CURRENT CONDITIONS:
{conditions_txt}

MEDICATIONS:
{medications_txt}

RECENT SYMPTOMS (Last 30 days):
{symptoms_txt}

RECENT VITALS:
{vitals_txt}

Please provide:
1. Overall health summary
2. Notable trends or patterns
3. Areas that may need attention
4. General wellness recommendations

Keep the report professional and remind users to share this with their healthcare provider."""
    return generate_health_insights(prompt)


def explain_text(text: str, instruction: str) -> str:
    return _complete(
        [
            {"role": "system", "content": EXPLAIN_PROMPT},
            {"role": "user", "content": f"{instruction}\n\nText: {text}"},
        ],
        temperature=0.7,
        max_tokens=1000,
    )
