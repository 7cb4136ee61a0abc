"""PromptManager — Jinja2-based renderer for report text.

Loads templates from the ``template/`` directory and renders a
``ScreeningReport`` into:

    - the plain-text results summary (copy / print)
    - the prompt sent to the AI clinical companion
    - an email draft to the treating clinician
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

import jinja2

from screening_rulesets import constants
from screening_rulesets.models.report import EmailDraft, ScreeningReport

_SUMMARY_TEMPLATE = "summary.jinja2"
_ANALYSIS_PROMPT_TEMPLATE = "analysis_prompt.jinja2"
_EMAIL_BODY_TEMPLATE = "email_body.jinja2"


class PromptManager:
    """Jinja2-based renderer for summaries, AI prompts and email drafts.

    Args:
        template_dir: optional override for the template directory.
            Defaults to ``template/`` sibling of this module.
        recipient: email address for :meth:`render_email`.  Defaults to
            ``REPORT_RECIPIENT_EMAIL``.
        salutation: name used to open the email.  Defaults to
            ``REPORT_RECIPIENT_NAME``.
    """

    def __init__(
        self,
        template_dir: Path | None = None,
        *,
        recipient: str | None = None,
        salutation: str | None = None,
    ) -> None:
        if template_dir is None:
            template_dir = Path(__file__).parent / "template"
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._recipient = recipient or constants.REPORT_RECIPIENT_EMAIL
        self._salutation = salutation or constants.REPORT_RECIPIENT_NAME

    def render(self, template_name: str, **context) -> str:
        """Render a named template with arbitrary context."""
        template = self._env.get_template(template_name)
        return template.render(**context)

    # --- Report renderers ---

    def render_summary(self, report: ScreeningReport) -> str:
        """Plain-text results summary suitable for copying or printing."""
        return self.render(
            _SUMMARY_TEMPLATE,
            report=report,
            dob=_history_or(report, "ph_2", "N/A"),
            gender=_history_or(report, "ph_1", "N/A"),
            diagnoses=_history_or(report, "ph_12", "None listed"),
        )

    def render_analysis_prompt(self, report: ScreeningReport) -> str:
        """Prompt asking the AI companion for a structured clinical analysis."""
        return self.render(
            _ANALYSIS_PROMPT_TEMPLATE,
            report=report,
            diagnoses=_history_or(report, "ph_12", "None listed"),
        )

    def render_email(self, report: ScreeningReport) -> EmailDraft:
        """Email draft carrying the summary, with a ready-made ``mailto:`` link."""
        subject = f"Confidential Screening Report - {report.report_date.isoformat()}"
        body = self.render(
            _EMAIL_BODY_TEMPLATE,
            salutation=self._salutation,
            summary=self.render_summary(report),
        )
        mailto_url = (
            f"mailto:{self._recipient}"
            f"?subject={quote(subject, safe='')}&body={quote(body, safe='')}"
        )
        return EmailDraft(
            recipient=self._recipient,
            subject=subject,
            body=body,
            mailto_url=mailto_url,
        )


def _history_or(report: ScreeningReport, qid: str, fallback: str) -> str:
    field = next((h for h in report.history if h.qid == qid), None)
    if field is None or not field.answered:
        return fallback
    return field.value
