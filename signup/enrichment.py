"""
Company enrichment lookup

Forwards an email address to The Companies API and hands back its JSON
body. Also maps that body onto the wizard's business fields, with a
website derived from the email domain when the lookup has nothing.

References:
- The Companies API, company by email: https://www.thecompaniesapi.com/api
"""

import logging
from typing import Any, Dict, Optional

import requests

from .validators import EmailValidator

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15


class EnrichmentError(Exception):
    """Raised when a company lookup fails"""
    pass


class EnrichmentConfigurationError(EnrichmentError):
    """Raised when the companies API token is not configured"""
    pass


class EnrichmentUpstreamError(EnrichmentError):
    """Raised when the companies API answers with a non-2xx status"""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Upstream API error {status_code}")
        self.status_code = status_code
        self.body = body


class CompanyLookupService:
    """Client for the upstream company-data API"""

    def __init__(self, api_url: str, token: Optional[str],
                 timeout: float = DEFAULT_TIMEOUT_SECONDS, session: Optional[requests.Session] = None):
        self.api_url = api_url
        self.token = token
        self.timeout = timeout
        self.session = session

    def lookup(self, email: str) -> Any:
        """
        Fetch company data keyed by email

        Returns:
            Decoded JSON body of the upstream response

        Raises:
            EnrichmentConfigurationError: No API token configured
            EnrichmentUpstreamError: Upstream answered non-2xx
            EnrichmentError: Network failure or undecodable body
        """
        if not self.token:
            logger.error("Missing THE_COMPANIES_API_TOKEN env var")
            raise EnrichmentConfigurationError("Server configuration error")

        try:
            requester = self.session or requests
            response = requester.get(
                self.api_url,
                params={"email": email},
                headers={"Authorization": f"Basic {self.token}"},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Enrichment API error: {str(e)}")
            raise EnrichmentError(str(e))

        if not response.ok:
            logger.error(
                f"Upstream API error: {response.status_code} {response.reason} {response.text}"
            )
            raise EnrichmentUpstreamError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Enrichment API returned invalid JSON: {str(e)}")
            raise EnrichmentError("Invalid response from company data service")


def _dig(data: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def map_company_fields(data: Any) -> Optional[Dict[str, str]]:
    """
    Map a companies API body onto the business fields

    Returns:
        Dict with company_name, industry, country and website, or None when
        the body carries no company record
    """
    company = _dig(data, "company")
    if not isinstance(company, dict):
        return None

    domain = _dig(company, "domain", "domain")
    return {
        "company_name": _dig(company, "about", "name") or "",
        "industry": _dig(company, "about", "industry") or "",
        "country": _dig(company, "locations", "headquarters", "country", "name") or "",
        "website": f"https://{domain}" if domain else "",
    }


def website_from_email(email: str) -> Optional[str]:
    """Derive https://<domain> from an email address"""
    domain = EmailValidator.domain_of(email)
    return f"https://{domain}" if domain else None
