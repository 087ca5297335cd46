import json
from datetime import date
from decimal import Decimal

import httpx
import pytest

from smb_finprofile.engine import build_extracted_data
from smb_finprofile.generator import (
    AnalysisGenerationError,
    HuggingFaceGenerator,
    generate_analysis,
    generate_text,
)
from smb_finprofile.models import Transaction
from smb_finprofile.ratios import calculate_financial_features


def _generator(handler, api_key="hf_test") -> HuggingFaceGenerator:
    return HuggingFaceGenerator(
        api_key=api_key,
        model="org/model",
        base_url="https://example.test/models/",
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def sample():
    data = build_extracted_data(
        [
            Transaction(date(2024, 1, 1), "Sale", Decimal("100000"), "income", "Sales"),
            Transaction(date(2024, 1, 2), "Rent", Decimal("70000"), "expense", "Rent"),
        ]
    )
    return data, calculate_financial_features(data)


def test_request_shape_and_list_reply() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=[{"generated_text": "Summary\nAll fine."}])

    text = _generator(handler)("Analyze this")

    assert text == "Summary\nAll fine."
    assert seen["url"] == "https://example.test/models/org/model"
    assert seen["auth"] == "Bearer hf_test"
    assert seen["body"]["inputs"] == "Analyze this"
    assert seen["body"]["parameters"]["max_new_tokens"] == 1000
    assert seen["body"]["parameters"]["return_full_text"] is False


def test_dict_reply() -> None:
    gen = _generator(lambda r: httpx.Response(200, json={"generated_text": "ok"}))

    assert gen("p") == "ok"


def test_error_payload_raises() -> None:
    gen = _generator(lambda r: httpx.Response(200, json={"error": "Model is loading"}))

    with pytest.raises(AnalysisGenerationError, match="Model is loading"):
        gen("p")


def test_http_error_raises() -> None:
    gen = _generator(lambda r: httpx.Response(500, text="boom"))

    with pytest.raises(AnalysisGenerationError, match="500"):
        gen("p")


def test_timeout_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(AnalysisGenerationError, match="timeout"):
        _generator(handler)("p")


def test_invalid_json_raises() -> None:
    gen = _generator(lambda r: httpx.Response(200, text="not json"))

    with pytest.raises(AnalysisGenerationError):
        gen("p")


def test_missing_api_key_raises_before_any_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(AnalysisGenerationError, match="API key"):
        _generator(handler, api_key=None)("p")


def test_generate_text_wraps_any_exception() -> None:
    def broken(prompt: str) -> str:
        raise RuntimeError("network down")

    with pytest.raises(AnalysisGenerationError, match="network down"):
        generate_text("p", broken)


def test_generate_analysis_uses_analysis_prompt(sample) -> None:
    data, features = sample
    prompts = []

    def fake(prompt: str) -> str:
        prompts.append(prompt)
        return "Summary\nSteady growth.\nRecommendations\n1. Keep going"

    result = generate_analysis(data, features, fake)

    assert len(prompts) == 1
    assert "Health Score: 85/100" in prompts[0]
    assert result.summary == "Steady growth."
    assert result.recommendations[0].title == "Keep going"


def test_generate_analysis_failure_is_distinct_from_empty(sample) -> None:
    data, features = sample

    empty = generate_analysis(data, features, lambda p: "")
    assert empty.is_empty

    def broken(prompt: str) -> str:
        raise TimeoutError("slow")

    with pytest.raises(AnalysisGenerationError):
        generate_analysis(data, features, broken)
