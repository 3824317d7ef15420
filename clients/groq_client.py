import os
import asyncio
import logging
from typing import Dict, Any, Optional
from dotenv import load_dotenv
from groq import AsyncGroq

load_dotenv()

logger = logging.getLogger(__name__)

GROQ_API_KEY = os.getenv("GROQ_API_KEY")

SYSTEM_PROMPT = "You are an expert educational content creator. When asked for JSON, respond with valid JSON only."

_groq_client: Optional[AsyncGroq] = None


def get_groq_client() -> AsyncGroq:
    global _groq_client
    if _groq_client is None:
        if not GROQ_API_KEY:
            raise ValueError("GROQ_API_KEY must be set to use Groq models")
        _groq_client = AsyncGroq(api_key=GROQ_API_KEY)
    return _groq_client


async def generate_text(prompt: str, model_config: Dict[str, Any]) -> str:
    """
    Generate a completion with a Groq-hosted model.
    Args:
        prompt: The full user prompt.
        model_config: Entry from MODEL_CONFIGS (model, max_tokens, temperature).
    Returns:
        The completion text.
    Raises:
        Exception if the API call fails after retries.
    """
    client = get_groq_client()
    temperature = model_config.get("temperature", 0.7)
    completion_params = {
        "model": model_config["model"],
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt}
        ],
        "max_tokens": model_config.get("max_tokens", 8192),
        "temperature": temperature,
        "stream": False
    }

    max_retries = 3
    for attempt in range(max_retries):
        try:
            response = await client.chat.completions.create(**completion_params)
            choice = response.choices[0]

            # Truncated response, JSON is likely invalid
            if choice.finish_reason == "length" and attempt < max_retries - 1:
                completion_params["temperature"] = max(0.3, temperature - 0.2)
                logger.warning(f"Groq response truncated (attempt {attempt + 1}/{max_retries}). Retrying with lower temperature...")
                await asyncio.sleep(2 ** (attempt + 1))
                continue

            return choice.message.content or ""

        except Exception as e:
            error_str = str(e).lower()
            is_rate_limit = "429" in error_str or "rate_limit" in error_str or "rate limit" in error_str
            if is_rate_limit and attempt < max_retries - 1:
                backoff = 2 ** (attempt + 1)
                logger.warning(f"Groq rate limit (attempt {attempt + 1}/{max_retries}). Retrying in {backoff}s...")
                await asyncio.sleep(backoff)
                continue
            logger.error(f"Groq API error: {e}")
            raise
    return ""
