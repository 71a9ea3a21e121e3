"""
Concept extraction: free text -> raw concept array, via the LLM.

The LLM is an untrusted producer. Whatever it returns (or fails to return),
extraction ends with a list of concept dicts; shape problems that survive
parsing are left for the emitter's input guard.
"""

import html
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from conceptmap.inference.base import LLMClient
from conceptmap.inference.prompt import build_messages
from conceptmap.utils.json_extract import parse_concepts

logger = logging.getLogger(__name__)

SOURCE_LLM = "LLM Analysis"
SOURCE_BASIC = "Basic Fallback"

BASIC_TEXT_LIMIT = 100
BASIC_DEFINITION = "Could not generate detailed map. Please try again or provide more input."

_SPANISH_PATTERNS = [
    re.compile(r"\b(el|la|los|las|un|una|unos|unas)\b", re.IGNORECASE),
    re.compile(r"\b(es|son|está|están|fue|fueron)\b", re.IGNORECASE),
    re.compile(r"\b(para|por|con|sin|sobre|bajo)\b", re.IGNORECASE),
    re.compile(r"\b(que|qué|cómo|cuándo|dónde|quién)\b", re.IGNORECASE),
    re.compile(r"\b(y|o|pero|porque|si|aunque)\b", re.IGNORECASE),
    re.compile(r"[áéíóúñ¿¡]", re.IGNORECASE),
]
_LINE_BREAK_RE = re.compile(r"<br\s*/?>|\r\n|\r|\n", re.IGNORECASE)
_HTML_TAG_RE = re.compile(r"</?[A-Za-z][A-Za-z0-9]*(?:\s[^<>]*)?/?>")
_SPACES_RE = re.compile(r"[ \t]{2,}")


def plain_text(value: str) -> str:
    """
    LLM output -> plain label text.

    Line breaks (including <br>) become spaces, HTML tags are dropped and
    entities decoded. Structural characters are left for the sanitizer.
    """
    text = _LINE_BREAK_RE.sub(" ", value)
    text = _HTML_TAG_RE.sub("", text)
    text = html.unescape(text)
    return _SPACES_RE.sub(" ", text).strip()


def detect_language(text: str) -> str:
    """'es' when at least 3 Spanish indicator groups match, else 'en'."""
    if not text:
        return "en"
    score = sum(1 for pattern in _SPANISH_PATTERNS if pattern.search(text))
    return "es" if score >= 3 else "en"


def create_basic_concepts(text: str) -> List[Dict[str, Any]]:
    """Single-node concept array used when the LLM path fails."""
    text = text or ""
    label = text[:BASIC_TEXT_LIMIT] + ("..." if len(text) > BASIC_TEXT_LIMIT else "")
    return [{
        "id": "node-0",
        "text": label,
        "type": "main",
        "definition": BASIC_DEFINITION,
        "connections": [],
    }]


@dataclass
class ExtractionResult:
    concepts: List[Any] = field(default_factory=list)
    language: str = "en"
    source: str = SOURCE_LLM
    fallback: bool = False


class ConceptExtractor:
    """
    Usage:
        extractor = ConceptExtractor(client)
        result = extractor.extract("Photosynthesis converts light ...")
    """

    def __init__(self, client: Optional[LLMClient] = None):
        self._client = client

    @property
    def client(self) -> LLMClient:
        """Lazy load LLM client"""
        if self._client is None:
            from conceptmap.inference.config import get_llm_client
            self._client = get_llm_client()
        return self._client

    def extract(self, text: str) -> ExtractionResult:
        """NEVER throws: any failure degrades to create_basic_concepts()."""
        language = detect_language(text)

        try:
            raw = self.client.generate(build_messages(text, language))
        except Exception as e:
            logger.error("[ANALYZER] LLM request failed: %s", e)
            return self._fallback(text, language)

        concepts = parse_concepts(raw)
        if not concepts:
            logger.error("[ANALYZER] Could not parse concept array from LLM output: %.200r", raw)
            return self._fallback(text, language)

        logger.info("[ANALYZER] Extracted %d concepts (language=%s)", len(concepts), language)
        return ExtractionResult(
            concepts=[self._post_process(c) for c in concepts],
            language=language,
            source=SOURCE_LLM,
        )

    # ---------- helpers ----------

    @staticmethod
    def _post_process(concept: Any) -> Any:
        if not isinstance(concept, dict):
            return concept

        processed = dict(concept)
        for key in ("text", "definition"):
            value = processed.get(key)
            if isinstance(value, str):
                processed[key] = plain_text(value)
        return processed

    @staticmethod
    def _fallback(text: str, language: str) -> ExtractionResult:
        return ExtractionResult(
            concepts=create_basic_concepts(text),
            language=language,
            source=SOURCE_BASIC,
            fallback=True,
        )
