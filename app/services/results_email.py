"""
Deliver search results by email through Resend.
Failures raise NotifierFailure; the search gateway turns that into a warning so a
completed search never fails because of email.
"""
import json
import logging
from html import escape
from typing import Optional

import resend

from app.core.errors import NotifierFailure

logger = logging.getLogger(__name__)

NOT_SPECIFIED = "Not specified"


def _first_investigator(project: dict) -> dict:
    investigators = project.get("principal_investigators") or []
    if investigators and isinstance(investigators[0], dict):
        return investigators[0]
    return {}


def _format_award(amount) -> str:
    if not amount:
        return NOT_SPECIFIED
    try:
        return f"${amount:,}"
    except (TypeError, ValueError):
        return escape(str(amount))


def format_results_html(projects: list, criteria: Optional[dict]) -> str:
    """Render the result set as the HTML body of the results email."""
    criteria_text = escape(json.dumps(criteria or {}, indent=2))
    html = f"""
    <h2>Your NIH RePORTER Search Results</h2>
    <p><strong>Search criteria:</strong> <pre>{criteria_text}</pre></p>
    <p><strong>Results found:</strong> {len(projects)}</p>
    <hr>
    """

    for index, project in enumerate(projects, start=1):
        pi = _first_investigator(project)
        title = escape(str(project.get("project_title") or "No title available"))
        pi_name = escape(str(pi.get("full_name") or NOT_SPECIFIED))
        org_name = escape(str(pi.get("org_name") or NOT_SPECIFIED))
        fiscal_year = escape(str(project.get("fy") or NOT_SPECIFIED))
        abstract = escape(str(project.get("abstract_text") or "No abstract available"))
        html += f"""
    <div style="margin-bottom: 30px; border-left: 4px solid #007bff; padding-left: 15px;">
      <h3>{index}. {title}</h3>
      <p><strong>PI:</strong> {pi_name}</p>
      <p><strong>Institution:</strong> {org_name}</p>
      <p><strong>Award:</strong> {_format_award(project.get("award_amount"))}</p>
      <p><strong>Fiscal Year:</strong> {fiscal_year}</p>
      <p><strong>Abstract:</strong></p>
      <p style="background: #f8f9fa; padding: 15px; border-radius: 5px;">{abstract}</p>
    </div>
    """

    html += """
    <hr>
    <p style="color: #666; font-size: 14px;"><em>Powered by NIH RePORTER Scoop</em></p>
    """
    return html.strip()


class ResultsMailer:
    def __init__(self, api_key: str, sender_email: str, sender_name: str = "NIH RePORTER Scoop"):
        self.api_key = (api_key or "").strip()
        self.sender_email = (sender_email or "").strip()
        self.sender_name = sender_name

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.sender_email)

    def send_results(self, to_email: str, projects: list, criteria: Optional[dict]) -> None:
        """
        Email the result set to `to_email`.

        Raises:
            NotifierFailure: missing configuration, or the message could not be built or sent
        """
        if not self.configured:
            logger.error("Missing email configuration (RESEND_API_KEY / SENDER_EMAIL)")
            raise NotifierFailure("Email delivery is not configured")

        resend.api_key = self.api_key
        try:
            params = {
                "from": f"{self.sender_name} <{self.sender_email}>",
                "to": [to_email],
                "subject": f"Your NIH Research Results ({len(projects)} projects found)",
                "html": format_results_html(projects, criteria),
            }
            resend.Emails.send(params)
        except Exception as e:
            logger.error("Failed to send results to %s: %s", to_email, e)
            raise NotifierFailure(str(e)) from e
        logger.info("Results email sent to %s (%d projects)", to_email, len(projects))
