"""Abstract interfaces for the post-questionnaire AI stage.

These ABCs define the contract that external implementations must fulfil.
The SDK ships no concrete implementation: calling a hosted language model
is the integrator's concern.

Typical integration flow::

    engine = ScreeningEngine(catalog)
    # ... walk the respondent through the route to RESULTS ...

    prompt = prompts.render_analysis_prompt(report)

    generator: AnalysisGenerator = MyHostedModelGenerator(...)
    text = await generator.generate(prompt)
    # text is shown in the report under "AI CLINICAL COMPANION"
"""

from abc import ABC, abstractmethod


class AnalysisGenerator(ABC):
    """Interface for the AI clinical companion.

    Implementations receive a fully rendered prompt describing the
    respondent's context and detected symptom clusters, and return the
    model's free-text analysis.
    """

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Generate a structured clinical analysis.

        Parameters
        ----------
        prompt:
            The rendered analysis prompt (see
            ``PromptManager.render_analysis_prompt``).

        Returns
        -------
        str
            The analysis text.  An empty string means the model produced
            nothing usable.
        """
        ...
