"""Google Gemini client: search-grounded domain and email lookups."""

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from .models import (
    CompanySearchParams,
    DomainResult,
    EmailResult,
    MalformedResponseError,
    PersonSearchParams,
    RequestFailedError,
    Source,
)

logger = logging.getLogger(__name__)

API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TIMEOUT = 30.0

MALFORMED_MESSAGE = "Received malformed data from AI. Please try again."
DOMAIN_FAILED_MESSAGE = "Failed to retrieve domain information. Please try again."
EMAIL_FAILED_MESSAGE = "Failed to retrieve email information. Please try again."

COMPANY_PROMPT = """
You are a domain intelligence expert. Find the official website domain for the company: "{company_name}".
{extra}

Task:
1. **Use Google Search** to find the official website.
2. **Identify the Primary Domain**:
   - Tell consumer-facing brands apart from the corporate entity behind them.
   - When a company runs a distinct corporate website (e.g. 'thekrogerco.com' for Kroger, 'aboutamazon.com' for Amazon) next to its consumer site (e.g. 'kroger.com', 'amazon.com'), **prefer the corporate/parent domain** as the primary result; it identifies the business more accurately.
   - If the corporate domain is not widely used, fall back to the main consumer domain.
3. **Return Data**:
   - Give the primary domain.
   - List the consumer domain and any regional domains as 'alternatives'.
   - Give a confidence level based on the search results.

Output Format:
Return the result **strictly** as a valid JSON object with this structure. Do not wrap it in markdown code blocks if possible.
{{
  "domain": "string (the primary corporate domain)",
  "confidence": "High" | "Medium" | "Low",
  "reasoning": "string (short explanation of the choice, mention corporate vs consumer sites where relevant)",
  "alternatives": ["string", "string"] (related domains)
}}
"""

PERSON_PROMPT = """
You are a professional contact researcher. Find the professional email address for:
Name: "{person_name}"
Company: "{company_name}"
{extra}

Task:
1. **Use Google Search** to find public professional profiles, company press releases or contact pages.
2. **Identify or Deduce the Email**:
   - Look for an exact match of the professional email address.
   - If the exact address is not public, find the company's standard email pattern (e.g. 'first.last@company.com', 'f.last@company.com') and apply it to the person's name.
3. **Reasoning**:
   - State clearly whether the email was found directly or deduced from a pattern.

Output Format:
Return the result **strictly** as a valid JSON object.
{{
  "email": "string (the found or most likely email address)",
  "confidence": "High" | "Medium" | "Low",
  "reasoning": "string (direct find or pattern deduction, and why)",
  "pattern": "string (e.g. '{{first}}.{{last}}@domain.com', or 'N/A' for a direct match)"
}}
"""


def _optional_lines(**fields: str) -> str:
    lines = []
    for label, value in fields.items():
        if value and value.strip():
            lines.append(f"{label.replace('_', ' ')}: {value.strip()}")
    return "\n".join(lines)


def build_company_prompt(params: CompanySearchParams) -> str:
    extra = _optional_lines(Industry=params.industry, Location=params.location)
    return COMPANY_PROMPT.format(company_name=params.company_name.strip(), extra=extra)


def build_person_prompt(params: PersonSearchParams) -> str:
    extra = _optional_lines(Job_Title=params.job_title, Location=params.location)
    return PERSON_PROMPT.format(
        person_name=params.person_name.strip(),
        company_name=params.company_name.strip(),
        extra=extra,
    )


def clean_json(text: str) -> str:
    """Strip markdown code fences the model sometimes wraps its JSON in."""
    if "```json" in text:
        return text.replace("```json", "").replace("```", "").strip()
    if "```" in text:
        return text.replace("```", "").strip()
    return text.strip()


def parse_result(text: str) -> Dict[str, Any]:
    cleaned = clean_json(text or "{}")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("JSON parse error: %s. Text: %s", e, cleaned)
        raise MalformedResponseError(MALFORMED_MESSAGE) from e
    if not isinstance(data, dict):
        logger.error("Expected a JSON object, got %s. Text: %s", type(data).__name__, cleaned)
        raise MalformedResponseError(MALFORMED_MESSAGE)
    return data


def _first_candidate(payload: Dict[str, Any]) -> Dict[str, Any]:
    candidates = payload.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return {}
    return candidates[0]


def response_text(payload: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    content = _first_candidate(payload).get("content") or {}
    parts = content.get("parts") or []
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict))


def extract_sources(payload: Dict[str, Any]) -> List[Source]:
    metadata = _first_candidate(payload).get("groundingMetadata") or {}
    sources: List[Source] = []
    for chunk in metadata.get("groundingChunks") or []:
        web = chunk.get("web") if isinstance(chunk, dict) else None
        if not web or not web.get("uri") or not web.get("title"):
            continue
        sources.append(Source(title=web["title"], uri=web["uri"]))
    return sources


def generate_content(
    prompt: str, api_key: str, model: str = DEFAULT_MODEL, timeout: float = DEFAULT_TIMEOUT
) -> Dict[str, Any]:
    """Single search-grounded generateContent call. No retries."""
    logger.debug("Calling %s (%d prompt chars)", model, len(prompt))
    r = requests.post(
        API_URL.format(model=model),
        headers={"x-goog-api-key": api_key},
        json={
            "contents": [{"parts": [{"text": prompt}]}],
            "tools": [{"google_search": {}}],
        },
        timeout=timeout,
    )
    r.raise_for_status()
    return r.json()


def _as_str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v]


def find_company_domain(
    params: CompanySearchParams,
    api_key: str,
    model: str = DEFAULT_MODEL,
    timeout: float = DEFAULT_TIMEOUT,
) -> DomainResult:
    """Ask Gemini for the official corporate domain of a company."""
    prompt = build_company_prompt(params)
    try:
        payload = generate_content(prompt, api_key, model, timeout)
        data = parse_result(response_text(payload))
        return DomainResult(
            domain=str(data.get("domain") or ""),
            confidence=str(data.get("confidence") or ""),
            reasoning=str(data.get("reasoning") or ""),
            alternatives=_as_str_list(data.get("alternatives")),
            sources=extract_sources(payload),
        )
    except MalformedResponseError:
        raise
    except requests.RequestException as e:
        logger.error("HTTP error finding domain: %s", e)
        raise RequestFailedError(DOMAIN_FAILED_MESSAGE) from e
    except Exception as e:
        logger.error("Error finding domain: %s", e)
        raise RequestFailedError(DOMAIN_FAILED_MESSAGE) from e


def find_person_email(
    params: PersonSearchParams,
    api_key: str,
    model: str = DEFAULT_MODEL,
    timeout: float = DEFAULT_TIMEOUT,
) -> EmailResult:
    """Ask Gemini for a person's professional email, found or deduced from a pattern."""
    prompt = build_person_prompt(params)
    try:
        payload = generate_content(prompt, api_key, model, timeout)
        data = parse_result(response_text(payload))
        pattern: Optional[str] = data.get("pattern")
        return EmailResult(
            email=str(data.get("email") or ""),
            confidence=str(data.get("confidence") or ""),
            reasoning=str(data.get("reasoning") or ""),
            pattern=str(pattern) if pattern else None,
            sources=extract_sources(payload),
        )
    except MalformedResponseError:
        raise
    except requests.RequestException as e:
        logger.error("HTTP error finding email: %s", e)
        raise RequestFailedError(EMAIL_FAILED_MESSAGE) from e
    except Exception as e:
        logger.error("Error finding email: %s", e)
        raise RequestFailedError(EMAIL_FAILED_MESSAGE) from e
