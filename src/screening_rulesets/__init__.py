"""screening_rulesets — Rule-based mental-health screening SDK.

Public API:
    compute_route        — ordered section route from the CORE answers
    analyze_patterns     — evaluate the symptom-cluster rule battery
    ScreeningEngine      — section-by-section session orchestrator
    ScreeningPipeline    — engine plus the optional AI analysis stage
    QuestionnaireCatalog — loads the YAML question catalog into typed models
    PromptManager        — renders summaries, AI prompts and email drafts
    build_report         — assemble a ScreeningReport from answers and route

Models:
    SectionId         — questionnaire sections
    PatternResult     — one evaluated pattern rule
    AnswerStore       — per-session answer mapping with read-only snapshots
    StepResult        — union type returned by engine step methods
    SectionStep       — step: present a section's questions
    EmergencyStep     — step: immediate danger reported
    ResultsStep       — step: route complete, report attached
    SessionInfo       — public view of session state
    ScreeningReport   — findings, history and transcript for one session

Interfaces:
    AnalysisGenerator — ABC for the AI clinical companion
"""

from screening_rulesets.catalog import QuestionnaireCatalog
from screening_rulesets.engine import ScreeningEngine
from screening_rulesets.interfaces import AnalysisGenerator
from screening_rulesets.models import (
    AnswerStore,
    EmailDraft,
    EmergencyStep,
    PatternResult,
    QuestionPayload,
    ResultsStep,
    ScreeningReport,
    SectionId,
    SectionStep,
    SessionInfo,
    SessionStatus,
    StepResult,
)
from screening_rulesets.patterns import analyze_patterns
from screening_rulesets.pipeline import ScreeningPipeline
from screening_rulesets.prompt import PromptManager
from screening_rulesets.report import build_report
from screening_rulesets.routing import compute_route

__all__ = [
    # Rule engines
    "analyze_patterns",
    "compute_route",
    # Engine & catalog
    "QuestionnaireCatalog",
    "ScreeningEngine",
    "ScreeningPipeline",
    "PromptManager",
    "build_report",
    # Interfaces
    "AnalysisGenerator",
    # Models
    "AnswerStore",
    "EmailDraft",
    "EmergencyStep",
    "PatternResult",
    "QuestionPayload",
    "ResultsStep",
    "ScreeningReport",
    "SectionId",
    "SectionStep",
    "SessionInfo",
    "SessionStatus",
    "StepResult",
]
