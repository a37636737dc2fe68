"""Form validation and search state for the finder CLI."""

import logging
from typing import Callable, Optional

from apis.gemini import find_company_domain, find_person_email
from apis.models import (
    CompanySearchParams,
    FinderError,
    FormErrors,
    PersonSearchParams,
    SearchResult,
)

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "An unexpected error occurred"


def validate_company(params: CompanySearchParams) -> FormErrors:
    errors: FormErrors = {}
    if not params.company_name.strip():
        errors["company_name"] = "Company name is required"
    return errors


def validate_person(params: PersonSearchParams) -> FormErrors:
    errors: FormErrors = {}
    if not params.person_name.strip():
        errors["person_name"] = "Person name is required"
    if not params.company_name.strip():
        errors["company_name"] = "Company name is required"
    return errors


class SearchSession:
    """
    Holds what the result view shows: the last result or error, the loading
    flag and per-field form errors. One request at a time; a new search
    replaces the previous result.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout: float,
        company_search: Optional[Callable[..., SearchResult]] = None,
        person_search: Optional[Callable[..., SearchResult]] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._company_search = company_search or find_company_domain
        self._person_search = person_search or find_person_email

        self.result: Optional[SearchResult] = None
        self.error: Optional[str] = None
        self.is_loading = False
        self.errors: FormErrors = {}

    def submit_company(self, params: CompanySearchParams) -> bool:
        """Validate and run a domain search. Returns False if nothing was sent."""
        return self._submit(validate_company(params), self._company_search, params)

    def submit_person(self, params: PersonSearchParams) -> bool:
        """Validate and run an email search. Returns False if nothing was sent."""
        return self._submit(validate_person(params), self._person_search, params)

    def _submit(self, errors: FormErrors, search: Callable[..., SearchResult], params) -> bool:
        if self.is_loading:
            logger.debug("Search already in flight, ignoring submit")
            return False
        self.errors = errors
        if errors:
            return False

        self.is_loading = True
        self.error = None
        self.result = None
        try:
            self.result = search(params, self.api_key, self.model, self.timeout)
        except FinderError as e:
            self.error = str(e)
        except Exception:
            logger.exception("Unexpected error during search")
            self.error = UNEXPECTED_ERROR
        finally:
            self.is_loading = False
        return True

    def switch_mode(self) -> None:
        self.errors = {}

    def reset(self) -> None:
        self.result = None
        self.error = None
