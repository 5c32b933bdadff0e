import logging

import google.generativeai as genai

logger = logging.getLogger(__name__)


class LLMClient:
    def __init__(self, api_key: str, model_name: str = "models/gemini-2.5-flash"):
        genai.configure(api_key=api_key)
        # Low temperature: the tester wants a stable yes/no verdict
        self.model = genai.GenerativeModel(model_name)

    async def ask(self, prompt: str) -> str:
        try:
            response = await self.model.generate_content_async(
                prompt,
                generation_config={"temperature": 0.0}
            )
            return response.text
        except Exception as e:
            logger.error(f"LLM API call failed: {e}")
            raise
