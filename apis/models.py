"""Shared data models for the domain and email finder."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

CONFIDENCE_LEVELS = ("High", "Medium", "Low")


@dataclass
class Source:
    title: str
    uri: str


@dataclass
class CompanySearchParams:
    company_name: str
    industry: str = ""
    location: str = ""


@dataclass
class PersonSearchParams:
    person_name: str
    company_name: str
    job_title: str = ""
    location: str = ""


@dataclass
class DomainResult:
    domain: str
    confidence: str  # High / Medium / Low, as reported by the model
    reasoning: str
    alternatives: List[str] = field(default_factory=list)
    sources: List[Source] = field(default_factory=list)
    type: str = field(default="domain", init=False)


@dataclass
class EmailResult:
    email: str
    confidence: str  # High / Medium / Low, as reported by the model
    reasoning: str
    pattern: Optional[str] = None  # e.g. "{first}.{last}@domain.com", "N/A" on direct match
    sources: List[Source] = field(default_factory=list)
    type: str = field(default="email", init=False)


SearchResult = Union[DomainResult, EmailResult]

# field name -> message
FormErrors = Dict[str, str]


class FinderError(Exception):
    """Error whose message is safe to show to the user as-is."""


class MalformedResponseError(FinderError):
    pass


class RequestFailedError(FinderError):
    pass
