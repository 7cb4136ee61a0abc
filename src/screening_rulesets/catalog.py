"""QuestionnaireCatalog — loads the YAML question catalog into typed models.

This is the single source of truth for section titles, question text and
option lists at runtime.  The catalog is loaded once at startup and
provides lookup by section and by question id.

Usage::

    catalog = QuestionnaireCatalog()    # defaults to the packaged v1/
    catalog.load()                      # parse sections.yaml

    section = catalog.get_section(SectionId.CORE)
    q = catalog.get_question("c3")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from screening_rulesets.models.question import Question, Section, question_mapper
from screening_rulesets.models.section import SectionId
from screening_rulesets.patterns import PATTERN_RULES

logger = logging.getLogger(__name__)

CATALOG_FILENAME = "sections.yaml"


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


class QuestionnaireCatalog:
    """Loads ``sections.yaml`` and provides typed lookup.

    Attributes populated after :meth:`load`:

        sections   — dict[SectionId, Section] in YAML order
        questions  — dict[qid, Question]
    """

    def __init__(self, catalog_dir: str | Path | None = None) -> None:
        if catalog_dir is None:
            catalog_dir = Path(__file__).parent / "v1"
        self._base = Path(catalog_dir)

        # Populated by load()
        self.sections: dict[SectionId, Section] = {}
        self.questions: dict[str, Question] = {}
        self._section_of: dict[str, SectionId] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse the catalog file into typed models.

        Raises:
            FileNotFoundError: if the catalog file is missing.
            ValueError: on unknown question types, duplicate question ids,
                or when a question the rule engines depend on is missing.
        """
        raw_sections = load_yaml(self._base / CATALOG_FILENAME)
        for raw in raw_sections:
            section = self._parse_section(raw)
            self.sections[section.id] = section
            for q in section.questions:
                if q.qid in self.questions:
                    raise ValueError(
                        f"Duplicate qid '{q.qid}' in sections "
                        f"{self._section_of[q.qid].value} and {section.id.value}"
                    )
                self.questions[q.qid] = q
                self._section_of[q.qid] = section.id

        self._check_rule_gates()
        logger.info(
            "QuestionnaireCatalog loaded: %d sections, %d questions",
            len(self.sections),
            len(self.questions),
        )

    @staticmethod
    def _parse_section(raw: dict) -> Section:
        """Parse one section dict, dispatching questions via ``question_mapper``."""
        section_id = SectionId(raw["id"])
        questions = []
        for q_dict in raw.get("questions") or []:
            qtype = q_dict.get("question_type")
            cls = question_mapper.get(qtype)
            if cls is None:
                raise ValueError(
                    f"Unknown question_type '{qtype}' in section {section_id.value}"
                )
            questions.append(cls(**q_dict))
        return Section(
            id=section_id,
            title=raw["title"],
            description=raw.get("description"),
            questions=questions,
        )

    def _check_rule_gates(self) -> None:
        """Every pattern-rule entry question must exist in the catalog."""
        for rule in PATTERN_RULES:
            missing = [qid for qid in rule.gates if qid not in self.questions]
            if missing:
                raise ValueError(
                    f"Catalog is missing entry question(s) {missing} "
                    f"for rule '{rule.name}'"
                )

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def get_section(self, section_id: SectionId) -> Section:
        """Look up a section.

        Raises:
            KeyError: if the section is not in the catalog.
        """
        return self.sections[section_id]

    def get_question(self, qid: str) -> Question:
        """Look up a question by id.

        Raises:
            KeyError: if no question has this id.
        """
        return self.questions[qid]

    def section_of(self, qid: str) -> SectionId:
        """Return the section a question belongs to.

        Raises:
            KeyError: if no question has this id.
        """
        return self._section_of[qid]

    def title_of(self, section_id: SectionId) -> str:
        """Section title, falling back to the enum name for unknown sections."""
        section = self.sections.get(section_id)
        return section.title if section is not None else section_id.value
