"""Text rendering for screening reports.

Provides ``PromptManager``, a Jinja2-based template engine that renders a
``ScreeningReport`` into the plain-text summary, the AI analysis prompt and
the clinician email draft.
"""

from screening_rulesets.prompt.manager import PromptManager

__all__ = ["PromptManager"]
