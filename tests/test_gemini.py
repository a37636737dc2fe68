import pytest
import requests

from apis import gemini
from apis.gemini import (
    clean_json,
    extract_sources,
    find_company_domain,
    find_person_email,
    parse_result,
)
from apis.models import (
    CompanySearchParams,
    DomainResult,
    EmailResult,
    MalformedResponseError,
    PersonSearchParams,
    RequestFailedError,
    Source,
)


def _payload(text, chunks=None):
    candidate = {"content": {"parts": [{"text": text}]}}
    if chunks is not None:
        candidate["groundingMetadata"] = {"groundingChunks": chunks}
    return {"candidates": [candidate]}


class _FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


@pytest.fixture
def fake_post(monkeypatch):
    calls = []

    def install(response):
        def _post(url, **kwargs):
            calls.append((url, kwargs))
            if isinstance(response, Exception):
                raise response
            return response

        monkeypatch.setattr(gemini.requests, "post", _post)
        return calls

    return install


def test_clean_json_strips_json_fence():
    assert clean_json('```json\n{"a": 1}\n```') == '{"a": 1}'


def test_clean_json_strips_bare_fence():
    assert clean_json('```\n{"a": 1}\n```') == '{"a": 1}'


def test_fenced_and_unfenced_parse_identically():
    body = '{"domain": "thekrogerco.com", "confidence": "High"}'
    assert parse_result(f"```json\n{body}\n```") == parse_result(body)
    assert parse_result(f"  {body}  ") == parse_result(body)


def test_parse_result_rejects_invalid_json():
    with pytest.raises(MalformedResponseError) as exc:
        parse_result("Sorry, I could not find that.")
    assert str(exc.value) == gemini.MALFORMED_MESSAGE


def test_parse_result_rejects_non_object():
    with pytest.raises(MalformedResponseError):
        parse_result('["kroger.com"]')


def test_parse_result_empty_text_is_empty_object():
    assert parse_result("") == {}


def test_extract_sources_drops_incomplete_entries():
    payload = _payload(
        "{}",
        chunks=[
            {"web": {"uri": "https://a.example", "title": "A"}},
            {"web": {"uri": "https://b.example"}},
            {"web": {"title": "C"}},
            {"retrievedContext": {"uri": "x"}},
            {"web": {"uri": "https://d.example", "title": "D"}},
        ],
    )
    assert extract_sources(payload) == [
        Source(title="A", uri="https://a.example"),
        Source(title="D", uri="https://d.example"),
    ]


def test_extract_sources_without_metadata():
    assert extract_sources({}) == []
    assert extract_sources(_payload("{}")) == []


def test_find_company_domain_success(fake_post):
    text = (
        '```json\n{"domain": "thekrogerco.com", "confidence": "High", '
        '"reasoning": "Corporate site.", "alternatives": ["kroger.com"]}\n```'
    )
    chunks = [{"web": {"uri": "https://thekrogerco.com", "title": "The Kroger Co."}}]
    calls = fake_post(_FakeResponse(_payload(text, chunks)))

    result = find_company_domain(
        CompanySearchParams("Kroger", industry="Retail"), api_key="key", model="m", timeout=5
    )

    assert isinstance(result, DomainResult)
    assert result.type == "domain"
    assert result.domain == "thekrogerco.com"
    assert result.confidence == "High"
    assert result.alternatives == ["kroger.com"]
    assert result.sources == [Source("The Kroger Co.", "https://thekrogerco.com")]

    url, kwargs = calls[0]
    assert url.endswith("/models/m:generateContent")
    assert kwargs["headers"] == {"x-goog-api-key": "key"}
    assert kwargs["json"]["tools"] == [{"google_search": {}}]
    assert kwargs["timeout"] == 5
    prompt = kwargs["json"]["contents"][0]["parts"][0]["text"]
    assert '"Kroger"' in prompt
    assert "Industry: Retail" in prompt
    assert "Location:" not in prompt


def test_find_person_email_success(fake_post):
    text = (
        '{"email": "jane.doe@acme.com", "confidence": "Medium", '
        '"reasoning": "Deduced from pattern.", "pattern": "{first}.{last}@acme.com"}'
    )
    calls = fake_post(_FakeResponse(_payload(text)))

    result = find_person_email(
        PersonSearchParams("Jane Doe", "Acme", job_title="CTO", location="Berlin"),
        api_key="key",
    )

    assert isinstance(result, EmailResult)
    assert result.type == "email"
    assert result.email == "jane.doe@acme.com"
    assert result.pattern == "{first}.{last}@acme.com"
    assert result.sources == []

    prompt = calls[0][1]["json"]["contents"][0]["parts"][0]["text"]
    assert 'Name: "Jane Doe"' in prompt
    assert 'Company: "Acme"' in prompt
    assert "Job Title: CTO" in prompt
    assert "Location: Berlin" in prompt


def test_find_company_domain_malformed(fake_post):
    fake_post(_FakeResponse(_payload("not json at all")))
    with pytest.raises(MalformedResponseError):
        find_company_domain(CompanySearchParams("Acme"), api_key="key")


def test_find_person_email_http_error(fake_post):
    fake_post(_FakeResponse({"error": {"message": "denied"}}, status_code=403))
    with pytest.raises(RequestFailedError) as exc:
        find_person_email(PersonSearchParams("Jane Doe", "Acme"), api_key="key")
    assert str(exc.value) == gemini.EMAIL_FAILED_MESSAGE


def test_find_company_domain_network_error(fake_post):
    fake_post(requests.ConnectionError("unreachable"))
    with pytest.raises(RequestFailedError) as exc:
        find_company_domain(CompanySearchParams("Acme"), api_key="key")
    assert str(exc.value) == gemini.DOMAIN_FAILED_MESSAGE


class _BrokenJSONResponse(_FakeResponse):
    def json(self):
        raise ValueError("Expecting value")


def test_find_company_domain_unreadable_body(fake_post):
    fake_post(_BrokenJSONResponse(None))
    with pytest.raises(RequestFailedError):
        find_company_domain(CompanySearchParams("Acme"), api_key="key")
