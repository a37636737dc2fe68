#!/usr/bin/env python3
"""
finder.py — corporate domain and professional email finder

Features
- Company mode: official corporate domain (corporate site preferred over consumer brand)
- Person mode: professional email address, found directly or deduced from the company pattern
- Both answered by Google Gemini with Google Search grounding, with cited sources
- Interactive form mode (-i)

Environment (.env)
  GEMINI_API_KEY=...        (API_KEY is accepted as a fallback)
  FINDER_MODEL=gemini-2.5-flash
  FINDER_TIMEOUT=30

Usage
  # Domain
  python finder.py --company "Kroger" [--industry Retail] [--location "Cincinnati, OH"]

  # Email
  python finder.py --email --person "Jane Doe" --company "Acme Corp" [--job-title CTO]

  # Interactive form
  python finder.py -i
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import asdict
from typing import Optional

import click
from dotenv import load_dotenv

from apis.gemini import DEFAULT_MODEL, DEFAULT_TIMEOUT
from apis.models import (
    CompanySearchParams,
    EmailResult,
    FormErrors,
    PersonSearchParams,
    SearchResult,
)
from search_form import SearchSession

FIELD_LABELS = {
    "company_name": "Company Name",
    "person_name": "Full Name",
}

CONFIDENCE_ICONS = {"high": "✅", "medium": "ℹ️ ", "low": "⚠️ "}


# --------------------------
# Result view
# --------------------------


def confidence_icon(level: str) -> str:
    return CONFIDENCE_ICONS.get((level or "").lower(), "ℹ️ ")


def result_link(result: SearchResult) -> str:
    if isinstance(result, EmailResult):
        return f"mailto:{result.email}"
    return f"https://{result.domain}"


def print_result(result: SearchResult) -> None:
    """Print a search result card."""
    is_email = isinstance(result, EmailResult)
    title = "Email Found" if is_email else "Domain Found"

    print(f"\n================ {title} =================")
    if is_email:
        print(f"📧 Email Address:   {result.email}")
    else:
        print(f"🌐 Primary Domain:  {result.domain}")
        print(f"   Website:         {result_link(result)}")
    print(f"{confidence_icon(result.confidence)} Confidence:     {result.confidence}")

    if is_email and result.pattern and result.pattern != "N/A":
        print(f"@  Pattern:         {result.pattern}")

    print(f"💡 Analysis:        {result.reasoning}")

    if not is_email and result.alternatives:
        print(f"🔀 Alternatives:    {', '.join(result.alternatives)}")

    if result.sources:
        print(f"📍 Sources:         {len(result.sources)} source(s)")
        for i, source in enumerate(result.sources, 1):
            print(f"   {i}. {source.title} — {source.uri}")
    print("============================================\n")


def print_form_errors(errors: FormErrors) -> None:
    for name, message in errors.items():
        print(f"\n❌ {FIELD_LABELS.get(name, name)}: {message}")


# --------------------------
# Form view
# --------------------------


def prompt_params(person_mode: bool):
    if person_mode:
        return PersonSearchParams(
            person_name=click.prompt("Full Name", default="", show_default=False),
            company_name=click.prompt("Company Name", default="", show_default=False),
            job_title=click.prompt("Job Title (optional)", default="", show_default=False),
            location=click.prompt("Location (optional)", default="", show_default=False),
        )
    return CompanySearchParams(
        company_name=click.prompt("Company Name", default="", show_default=False),
        industry=click.prompt("Industry (optional)", default="", show_default=False),
        location=click.prompt("Location (optional)", default="", show_default=False),
    )


def run_search(session: SearchSession, params, as_json: bool, open_link: bool) -> int:
    """Submit the form and render the outcome. Returns the exit status."""
    if not as_json:
        click.echo("🔎 Searching...", err=True)

    if isinstance(params, PersonSearchParams):
        sent = session.submit_person(params)
    else:
        sent = session.submit_company(params)

    if not sent:
        print_form_errors(session.errors)
        return 2
    if session.error:
        print(f"\n❌ Error: {session.error}")
        return 1

    assert session.result is not None
    if as_json:
        print(json.dumps(asdict(session.result), indent=2))
    else:
        print_result(session.result)
    if open_link:
        click.launch(result_link(session.result))
    return 0


# --------------------------
# CLI
# --------------------------


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--email",
    "person_mode",
    is_flag=True,
    help="Find a person's email instead of a company domain (requires --person, --company)",
)
@click.option("--company", "company_name", default="", help="Company name")
@click.option("--person", "person_name", default="", help="Person's full name (email mode)")
@click.option("--industry", default="", help="Industry (domain mode, optional)")
@click.option("--job-title", default="", help="Job title (email mode, optional)")
@click.option("--location", default="", help="Location (optional)")
@click.option("--model", default=None, help=f"Gemini model id (default {DEFAULT_MODEL})")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.option("--open", "open_link", is_flag=True, help="Open the website or mail client.")
@click.option("-i", "--interactive", is_flag=True, help="Fill in the search form interactively.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
def main(
    person_mode: bool,
    company_name: str,
    person_name: str,
    industry: str,
    job_title: str,
    location: str,
    model: Optional[str],
    as_json: bool,
    open_link: bool,
    interactive: bool,
    verbose: bool,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv()
    api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    model = model or os.getenv("FINDER_MODEL") or DEFAULT_MODEL
    try:
        timeout = float(os.getenv("FINDER_TIMEOUT") or DEFAULT_TIMEOUT)
    except ValueError:
        print("\n❌ Error: FINDER_TIMEOUT must be a number of seconds")
        sys.exit(2)

    if not api_key:
        print("\n❌ Error: GEMINI_API_KEY is not set (add it to .env)")
        sys.exit(2)

    session = SearchSession(api_key, model, timeout)

    if not interactive:
        if person_mode:
            params = PersonSearchParams(person_name, company_name, job_title, location)
        else:
            params = CompanySearchParams(company_name, industry, location)
        sys.exit(run_search(session, params, as_json, open_link))

    status = 0
    while True:
        mode = click.prompt(
            "Search for",
            type=click.Choice(["company", "person"]),
            default="person" if person_mode else "company",
        )
        if (mode == "person") != person_mode:
            person_mode = mode == "person"
            session.switch_mode()
        status = run_search(session, prompt_params(person_mode), as_json, open_link)
        if not click.confirm("Start new search?", default=False):
            break
        session.reset()
    sys.exit(status)


if __name__ == "__main__":
    main()
