"""Translation through an LLM hosted on AWS Bedrock."""

import json
import logging
from typing import Dict, List, Optional, Tuple

import boto3

from recipe_utils.translation.base import Translator

logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = "anthropic.claude-3-5-haiku-20241022-v1:0"

LANGUAGE_NAMES = {"en": "English", "nl": "Dutch"}


class BedrockTranslator(Translator):
    """Translates recipe sentences with a Bedrock model.

    The sentences are sent as one JSON array and the model is asked to answer
    with a JSON array of the same length. Results are cached per batch.

    Attributes:
        bedrock_client: AWS Bedrock runtime client.
        model_id: The Bedrock model ID to invoke.
        cache: Translations keyed by (sentences, source tag, target tag).
    """

    def __init__(
        self,
        model_id: str = DEFAULT_MODEL_ID,
        region_name: str = "us-east-1",
        bedrock_client=None,
    ):
        self.bedrock_client = bedrock_client or boto3.client(
            "bedrock-runtime", region_name=region_name
        )
        self.model_id = model_id
        self.cache: Dict[Tuple[Tuple[str, ...], str, str], List[str]] = {}

    def _build_prompt(
        self, sentences: List[str], source_tag: str, target_tag: str
    ) -> str:
        source = LANGUAGE_NAMES.get(source_tag, source_tag)
        target = LANGUAGE_NAMES.get(target_tag, target_tag)
        return f"""
You are a professional translator of cooking recipes. Translate every string in
the JSON array below from {source} to {target}.

Keep numbers, fractions and units exactly as they are written. Answer with a
JSON array containing exactly {len(sentences)} strings, in the same order, and
nothing else.

{json.dumps(sentences, ensure_ascii=False)}
"""

    def _build_body(self, prompt: str) -> str:
        if "anthropic.claude-3" in self.model_id:
            return json.dumps(
                {
                    "anthropic_version": "bedrock-2023-05-31",
                    "max_tokens": 4096,
                    "messages": [
                        {"role": "user", "content": [{"type": "text", "text": prompt}]}
                    ],
                }
            )
        elif "amazon.nova" in self.model_id:
            return json.dumps(
                {"messages": [{"role": "user", "content": [{"text": prompt}]}]}
            )
        else:  # Legacy Claude
            return json.dumps(
                {
                    "prompt": f"\n\nHuman:{prompt}\n\nAssistant:",
                    "max_tokens_to_sample": 4096,
                    "temperature": 0.1,
                }
            )

    def _read_completion(self, response_body: dict) -> str:
        if "anthropic.claude-3" in self.model_id:
            return response_body.get("content", [{}])[0].get("text", "")
        elif "amazon.nova" in self.model_id:
            return (
                response_body.get("output", {})
                .get("message", {})
                .get("content", [{}])[0]
                .get("text", "")
            )
        return response_body.get("completion", "")

    @staticmethod
    def _parse_array(completion: str) -> Optional[List[str]]:
        """Extract the JSON array from a model completion."""
        if "```json" in completion:
            completion = completion.split("```json")[1].split("```")[0]
        start_index = completion.find("[")
        end_index = completion.rfind("]")
        if start_index == -1 or end_index <= start_index:
            return None
        parsed = json.loads(completion[start_index : end_index + 1])
        if not isinstance(parsed, list):
            return None
        return [str(item) for item in parsed]

    def translate_batch(
        self, sentences: List[str], source_tag: str, target_tag: str
    ) -> List[str]:
        if not sentences:
            return []
        key = (tuple(sentences), source_tag, target_tag)
        if key in self.cache:
            return self.cache[key]

        body = self._build_body(self._build_prompt(sentences, source_tag, target_tag))
        try:
            response = self.bedrock_client.invoke_model(
                body=body,
                modelId=self.model_id,
                accept="application/json",
                contentType="application/json",
            )
            response_body = json.loads(response.get("body").read())
            translated = self._parse_array(self._read_completion(response_body))
        except Exception as e:
            logger.error(f"Error during translation with model {self.model_id}: {e}")
            return []

        if translated is None or len(translated) != len(sentences):
            logger.error(
                f"Model {self.model_id} returned an unusable translation for "
                f"{len(sentences)} sentences"
            )
            return []

        self.cache[key] = translated
        return translated
