import json
import logging
from dataclasses import dataclass
from typing import Optional
from openai import OpenAI, OpenAIError
from app.core.config import settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a data normalization assistant.
Output a JSON object with:
- "standardizedMajor": string or null (Standardized specific major e.g. 'Dentistry')
- "majorCategory": string or null (Broad Category e.g. 'Health', 'Engineering', 'Business', 'Arts', 'Science')
- "gender": "Male" | "Female" | null (Inferred from name)"""

ALLOWED_GENDERS = ("Male", "Female")


@dataclass
class Enrichment:
    standardized_major: Optional[str] = None
    major_category: Optional[str] = None
    gender: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.standardized_major or self.major_category or self.gender)


def parse_enrichment(content: Optional[str]) -> Enrichment:
    """Turn the model's JSON reply into an Enrichment, dropping anything unexpected"""
    if not content:
        return Enrichment()
    try:
        result = json.loads(content)
    except json.JSONDecodeError:
        logger.warning(f"Enrichment reply was not valid JSON: {content[:200]}")
        return Enrichment()
    if not isinstance(result, dict):
        return Enrichment()

    gender = result.get("gender")
    return Enrichment(
        standardized_major=result.get("standardizedMajor") or None,
        major_category=result.get("majorCategory") or None,
        gender=gender if gender in ALLOWED_GENDERS else None,
    )


class EnrichmentService:
    def __init__(self, client: Optional[OpenAI] = None):
        self._client = client

    @property
    def client(self) -> Optional[OpenAI]:
        if self._client is None and settings.OPENAI_API_KEY:
            self._client = OpenAI(api_key=settings.OPENAI_API_KEY)
        return self._client

    def enrich(self, name: str, interested_major: Optional[str]) -> Enrichment:
        if self.client is None:
            logger.warning("OPENAI_API_KEY is not set. Skipping enrichment.")
            return Enrichment()

        try:
            completion = self.client.chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": f"Name: {name}\nInterested Major: {interested_major or 'Not specified'}"},
                ],
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.error(f"AI enrichment failed: {str(e)}")
            return Enrichment()

        return parse_enrichment(completion.choices[0].message.content)


enrichment_service = EnrichmentService()
