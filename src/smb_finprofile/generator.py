# SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Text-generation boundary for SMB FinProfile.

The analysis pipeline only needs a callable ``generate(prompt) -> str``.
This module provides:

- ``generate_text()`` / ``generate_analysis()``: run a prompt through such
  a callable. Any error raised by the callable is re-raised as
  ``AnalysisGenerationError`` so that "generation failed" stays distinct
  from "analysis produced but empty". No retry is attempted.
- ``HuggingFaceGenerator``: an httpx-based callable for the Hugging Face
  inference API, with a request timeout.
"""

import logging
from collections.abc import Callable
from typing import Any, Optional

import httpx

from .analysis import parse_analysis_response
from .models import AnalysisResult, ExtractedData, FinancialFeatures
from .prompts import create_analysis_prompt

logger = logging.getLogger(__name__)

TextGenerator = Callable[[str], str]

HF_API_URL = "https://api-inference.huggingface.co/models/"
DEFAULT_MODEL = "mistralai/Mistral-7B-Instruct-v0.2"


class AnalysisGenerationError(Exception):
    """The text generator failed, timed out or returned an error payload."""


class HuggingFaceGenerator:
    """Callable client for the Hugging Face text-generation inference API."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        base_url: str = HF_API_URL,
        timeout: float = 60.0,
        max_new_tokens: int = 1000,
        temperature: float = 0.7,
        top_p: float = 0.95,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.parameters = {
            "max_new_tokens": max_new_tokens,
            "temperature": temperature,
            "top_p": top_p,
            "return_full_text": False,
        }
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.model}"

    def __call__(self, prompt: str) -> str:
        """
        Send ``prompt`` and return the generated text.

        Raises:
            AnalysisGenerationError: on missing API key, timeout, HTTP error,
                error payload or undecodable reply.
        """
        if not self.api_key:
            raise AnalysisGenerationError("Hugging Face API key is not set")

        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = client.post(
                    self.url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={"inputs": prompt, "parameters": self.parameters},
                )
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as e:
                raise AnalysisGenerationError(
                    f"Hugging Face API timeout after {self.timeout}s"
                ) from e
            except httpx.HTTPStatusError as e:
                raise AnalysisGenerationError(
                    f"Hugging Face API error: {e.response.status_code} {e.response.text}"
                ) from e
            except httpx.HTTPError as e:
                raise AnalysisGenerationError(f"Hugging Face API request failed: {e}") from e
            except ValueError as e:
                raise AnalysisGenerationError(
                    f"Invalid JSON from Hugging Face API: {e}"
                ) from e

        return _generated_text(data)


def _generated_text(data: Any) -> str:
    # The API answers either [{"generated_text": ...}] or {"generated_text": ...}.
    if isinstance(data, list):
        if data and isinstance(data[0], dict):
            return str(data[0].get("generated_text") or "")
        return ""
    if isinstance(data, dict):
        if data.get("generated_text"):
            return str(data["generated_text"])
        if data.get("error"):
            raise AnalysisGenerationError(f"Hugging Face API error: {data['error']}")
    return ""


def generate_text(prompt: str, generate: TextGenerator) -> str:
    """Run ``prompt`` through ``generate``, wrapping failures.

    Raises:
        AnalysisGenerationError: if the generator raises for any reason.
    """
    try:
        return generate(prompt)
    except AnalysisGenerationError:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.warning("Text generation failed: %s", exc)
        raise AnalysisGenerationError(f"Failed to generate text: {exc}") from exc


def generate_analysis(
    data: ExtractedData,
    features: FinancialFeatures,
    generate: TextGenerator,
    prompt: Optional[str] = None,
) -> AnalysisResult:
    """
    Build the analysis prompt, call the generator once and parse its reply.

    Args:
        data: Extracted aggregates.
        features: Ratios and scores computed from ``data``.
        generate: Text generator, ``prompt -> text``.
        prompt: Optional pre-built prompt (defaults to the analysis prompt).

    Returns:
        The parsed AnalysisResult. It may be empty if the reply had no
        recognizable sections.

    Raises:
        AnalysisGenerationError: if the generator fails.
    """
    if prompt is None:
        prompt = create_analysis_prompt(data, features)
    response = generate_text(prompt, generate)
    return parse_analysis_response(response, data, features)
