"""Mock AnalysisGenerator implementations shared by pipeline and server tests."""

from screening_rulesets.interfaces import AnalysisGenerator


class MockAnalysisGenerator(AnalysisGenerator):
    """Returns a fixed text and records every prompt it receives."""

    def __init__(self, text: str = "Consider a structured CBT assessment."):
        self._text = text
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._text


class FailingAnalysisGenerator(AnalysisGenerator):
    """Simulates an unreachable model endpoint."""

    async def generate(self, prompt: str) -> str:
        raise ConnectionError("model endpoint unreachable")
