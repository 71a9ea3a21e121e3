from typing import Dict, List

LANGUAGE_NAMES = {
    "en": "English",
    "es": "Spanish",
}

SYSTEM_PROMPT = """
You build CONCEPT MAPS as strict JSON.

Rules:
- Output ONLY a JSON array
- No markdown, no explanations
- ALL content in {language}
- Plain text inside strings: no HTML tags, no markdown, no line breaks
- Create a 3-level hierarchy:
  * main: central concepts (2-4 nodes)
  * sub: supporting concepts (4-8 nodes)
  * detail: specific examples or details (6-12 nodes)
- Connection labels are short verbs (maximum 3 words) taken from:
  * Causal: causes, leads to, results in, triggers, enables
  * Hierarchical: contains, includes, comprises, consists of, is part of
  * Temporal: precedes, follows, evolves into, develops from
  * Functional: supports, facilitates, enhances, improves
  * Conceptual: relates to, connects with, associates with, correlates with
  * Process: requires, needs, depends on, influences, affects
- No self-references, no duplicate connections between the same nodes
- Preserve every key fact of the user's input

JSON schema:
[
  {{
    "id": "concept1",
    "text": "short concept label",
    "type": "main|sub|detail",
    "definition": "paragraph explaining the concept",
    "connections": [
      {{ "targetId": "concept2", "label": "leads to" }}
    ]
  }}
]
"""


def build_messages(text: str, language: str = "en") -> List[Dict]:
    language_name = LANGUAGE_NAMES.get(language, LANGUAGE_NAMES["en"])
    return [
        {
            "role": "system",
            "content": SYSTEM_PROMPT.format(language=language_name),
        },
        {
            "role": "user",
            "content": (
                f"Generate a detailed, explanatory concept map in {language_name} "
                f"from this text: {text}"
            ),
        },
    ]
