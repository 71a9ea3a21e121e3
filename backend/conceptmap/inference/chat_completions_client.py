import re
from typing import Dict, List, Optional

import requests

from conceptmap.inference.base import LLMClient


class ChatCompletionsClient(LLMClient):
    """Minimal client for OpenAI-compatible /chat/completions endpoints."""

    def __init__(
        self,
        base_url: str,
        model: str,
        temperature: float = 0.2,
        api_key: Optional[str] = None,
        timeout: float = 120,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.api_key = api_key
        self.timeout = timeout

    def generate(self, messages: List[Dict]) -> str:
        url = f"{self.base_url}/chat/completions"

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        response = requests.post(
            url,
            json={
                "model": self.model,
                "messages": messages,
                "temperature": self.temperature,
            },
            headers=headers,
            timeout=self.timeout,
        )
        response.raise_for_status()

        content = response.json()["choices"][0]["message"]["content"]

        #  STRIP MARKDOWN FENCES
        content = re.sub(r"^```(?:json)?\s*", "", content.strip())
        content = re.sub(r"\s*```$", "", content.strip())

        return content
