"""LLM client utilities for OpenAI, Google Gemini and Anthropic APIs"""

import json
import os
import re
from typing import Optional, Dict, Any

import anthropic
import google.generativeai as genai
import openai
from google.generativeai.types import HarmCategory, HarmBlockThreshold

from matchday.prompts import COMMENTATOR_SYSTEM_PROMPT
from matchday.utils.logging import get_logger

logger = get_logger("utils.llm")

API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def detect_provider(model: str) -> str:
    """Infer the provider from a model name"""
    if model.startswith("gpt-") or model.startswith("o1-") or model.startswith("o3-"):
        return "openai"
    if model.startswith("gemini-"):
        return "gemini"
    if model.startswith("claude-"):
        return "anthropic"
    logger.warning(f"Could not auto-detect provider for model '{model}', defaulting to OpenAI")
    return "openai"


class LLMClient:
    """Client for OpenAI, Google Gemini and Anthropic API calls"""

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o-mini", provider: Optional[str] = None):
        """
        Initialize LLM client

        Args:
            api_key: API key (defaults to the provider's environment variable)
            model: Model to use
            provider: "openai", "gemini" or "anthropic" (auto-detected from model name if not provided)
        """
        self.provider = (provider or detect_provider(model)).lower()
        self.model = model

        if self.provider not in API_KEY_ENV:
            raise ValueError(f"Unknown provider: {provider}. Must be 'openai', 'gemini' or 'anthropic'")

        env_var = API_KEY_ENV[self.provider]
        self.api_key = api_key or os.getenv(env_var)
        if not self.api_key:
            raise ValueError(f"{self.provider} API key required. Set {env_var} env var or pass api_key parameter.")

        if self.provider == "openai":
            self.client = openai.OpenAI(api_key=self.api_key)
        elif self.provider == "gemini":
            genai.configure(api_key=self.api_key)
            self.safety_settings = {
                HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_NONE,
                HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_NONE,
                HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_NONE,
                HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_NONE,
            }
        else:
            self.client = anthropic.Anthropic(api_key=self.api_key)

        self.logger = logger

    def generate(self, prompt: str) -> Dict[str, Any]:
        """Answer a commentary prompt with the shared commentator instructions"""
        return self.call(system_prompt=COMMENTATOR_SYSTEM_PROMPT, user_prompt=prompt)

    def call(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = 1024,
    ) -> Dict[str, Any]:
        """
        Make LLM API call

        Args:
            system_prompt: System prompt
            user_prompt: Task-specific input
            temperature: Sampling temperature (0-2)
            max_tokens: Maximum tokens in response

        Returns:
            Parsed JSON response, or {"raw_response": text} when the model returned nothing
        """
        if self.provider == "openai":
            content = self._call_openai(system_prompt, user_prompt, temperature, max_tokens)
        elif self.provider == "gemini":
            content = self._call_gemini(system_prompt, user_prompt, temperature, max_tokens)
        else:
            content = self._call_anthropic(system_prompt, user_prompt, temperature, max_tokens)

        if not content:
            return {"raw_response": content}
        return self._parse_json(content)

    def _call_openai(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: Optional[int],
    ) -> str:
        """Make OpenAI Chat API call"""
        try:
            request_params = {
                "model": self.model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "temperature": temperature,
            }

            # Reasoning models use max_completion_tokens instead of max_tokens
            if max_tokens:
                if self.model.startswith("gpt-5") or self.model.startswith("o1-") or self.model.startswith("o3-"):
                    request_params["max_completion_tokens"] = max_tokens
                else:
                    request_params["max_tokens"] = max_tokens

            request_params["response_format"] = {"type": "json_object"}

            self.logger.debug(f"Calling OpenAI {self.model}")
            response = self.client.chat.completions.create(**request_params)

            if response.usage:
                self._record_usage(
                    response.usage.prompt_tokens,
                    response.usage.completion_tokens,
                )

            return response.choices[0].message.content or ""
        except Exception as e:
            self.logger.error(f"Error calling OpenAI: {e}", exc_info=True)
            raise

    def _call_gemini(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: Optional[int],
    ) -> str:
        """Make Gemini API call"""
        try:
            generation_config = genai.types.GenerationConfig(
                temperature=temperature,
                max_output_tokens=max_tokens,
                response_mime_type="application/json",
            )

            model = genai.GenerativeModel(
                model_name=self.model,
                system_instruction=system_prompt,
                safety_settings=self.safety_settings,
            )

            self.logger.debug(f"Calling {self.model}")
            response = model.generate_content(
                contents=[{"role": "user", "parts": [user_prompt]}],
                generation_config=generation_config,
            )

            if response.usage_metadata:
                self._record_usage(
                    response.usage_metadata.prompt_token_count,
                    response.usage_metadata.candidates_token_count,
                )

            if not response.candidates:
                feedback = getattr(response, 'prompt_feedback', None)
                block_reason = getattr(feedback, 'block_reason', None) if feedback else None
                self.logger.error(f"Gemini returned no candidates. Model: {self.model}. Block reason: {block_reason}")
                return ""

            candidate = response.candidates[0]
            parts = candidate.content.parts if getattr(candidate, 'content', None) else []
            # In JSON mode the payload can be split across several parts
            return "".join(getattr(p, "text", "") for p in parts if getattr(p, "text", None))
        except Exception as e:
            self.logger.error(f"Error calling Gemini: {e}", exc_info=True)
            raise

    def _call_anthropic(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: Optional[int],
    ) -> str:
        """Make Anthropic Messages API call"""
        try:
            self.logger.debug(f"Calling Anthropic {self.model}")
            response = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens or 1024,
                temperature=temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )

            if response.usage:
                self._record_usage(response.usage.input_tokens, response.usage.output_tokens)

            return "".join(
                block.text for block in response.content if getattr(block, "type", None) == "text"
            )
        except Exception as e:
            self.logger.error(f"Error calling Anthropic: {e}", exc_info=True)
            raise

    def _record_usage(self, prompt_tokens: int, completion_tokens: int) -> None:
        total_tokens = prompt_tokens + completion_tokens
        self.logger.info(
            f"📊 Token usage ({self.model}): "
            f"Prompt: {prompt_tokens:,} | "
            f"Completion: {completion_tokens:,} | "
            f"Total: {total_tokens:,}"
        )

    def _parse_json(self, content: str) -> Dict[str, Any]:
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            repaired = self._repair_json(content)
            if repaired:
                try:
                    return json.loads(repaired)
                except json.JSONDecodeError:
                    pass

            snippet = (content[:500] + "... [truncated]") if len(content) > 500 else content
            self.logger.warning(f"JSON parsing error: {e} | Raw content snippet: {snippet}")
            return {"raw_response": content, "parse_error": str(e)}

    def _repair_json(self, json_str: str) -> Optional[str]:
        """Attempt to repair common JSON issues"""
        repaired = json_str
        # Remove markdown code blocks
        if "```json" in repaired:
            repaired = repaired.split("```json")[1].split("```")[0]
        elif "```" in repaired:
            repaired = repaired.split("```")[1].split("```")[0]

        repaired = repaired.strip()

        # Remove trailing commas
        repaired = re.sub(r',(\s*[}\]])', r'\1', repaired)
        return repaired or None


def get_llm_client(model: str) -> LLMClient:
    """Get a configured LLM client for a model"""
    provider = detect_provider(model)
    logger.debug(f"🤖 LLM Client: using model '{model}' via {provider}")
    return LLMClient(model=model, provider=provider)
