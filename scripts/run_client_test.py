#!/usr/bin/env python3
"""API client integration test for the screening server.

Exercises all API endpoints by acting as a pure HTTP client against the
live server (unlike ``simulate_session.py`` which calls the SDK directly).

Builds one profile per affected-domain option of the CORE questionnaire
(plus a "no domain" profile) and runs N random sessions per profile.  Each
session selects the profile's domain, answers every other question at
random, walks to RESULTS, checks that the domain's section was routed, and
then hits the report endpoints.  Errors and unexpected responses are
flagged.

Usage::

    # Install deps (first time only)
    pip install httpx rich

    # Quick smoke test (1 domain, 1 run)
    python scripts/run_client_test.py -d Panic -n 1 -v

    # Full run (9 profiles x 3 runs = 27 sessions)
    python scripts/run_client_test.py

    # Verbose debug run with full JSON payloads
    python scripts/run_client_test.py -d Mood -n 1 -vv

    # Reproducible run
    python scripts/run_client_test.py --seed 42
"""

from __future__ import annotations

import argparse
import asyncio
import json
import random
import sys
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

import httpx
from rich.console import Console
from rich.table import Table

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Keyword in each c2 option label -> the section it routes to
DOMAIN_SECTIONS = {
    "Panic": "PANIC",
    "Intrusive": "INTRUSIONS",
    "Trauma": "TRAUMA",
    "Worry": "WORRY",
    "Attention": "EXECUTIVE",
    "Mood": "MOOD",
    "Alcohol": "SUBSTANCE",
    "Unusual": "REALITY",
}

DOMAINS_QID = "c2"
IMMEDIATE_DANGER_QID = "s0_1"

FREE_TEXT_POOL = [
    "",
    "Depression (2019)",
    "Asthma",
    "Generalised anxiety, treated 2021",
    "None",
]

DATE_POOL = ["1958-02-11", "1975-08-10", "1990-01-30", "2003-11-01", ""]


# ---------------------------------------------------------------------------
# Profile: one affected-domain focus
# ---------------------------------------------------------------------------

@dataclass
class Profile:
    """A respondent profile: the CORE domain option they always select."""

    keyword: str | None     # None selects no domain at all
    label: str | None       # full c2 option label

    @property
    def name(self) -> str:
        return self.keyword or "No domain"

    @property
    def expected_section(self) -> str | None:
        return DOMAIN_SECTIONS.get(self.keyword) if self.keyword else None


def build_profiles(domain_options: list[str], keywords: list[str] | None) -> list[Profile]:
    """One profile per domain keyword found in the catalog, plus "No domain"."""
    profiles = []
    for kw in DOMAIN_SECTIONS:
        if keywords and kw not in keywords:
            continue
        label = next((o for o in domain_options if kw in o), None)
        if label is not None:
            profiles.append(Profile(keyword=kw, label=label))
    if not keywords:
        profiles.append(Profile(keyword=None, label=None))
    return profiles


# ---------------------------------------------------------------------------
# APIClient: thin httpx wrapper with X-User-ID header
# ---------------------------------------------------------------------------

class APIClient:
    """Async HTTP client for the screening server API."""

    def __init__(self, base_url: str, timeout: float = 30.0):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> APIClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    async def health_check(self) -> bool:
        """Check server health. Returns True if server is reachable."""
        try:
            resp = await self._client.get("/health")  # type: ignore[union-attr]
            return resp.status_code == 200
        except (httpx.ConnectError, httpx.TimeoutException):
            return False

    async def get_sections(self) -> list[dict]:
        resp = await self._client.get("/api/v1/reference/sections")  # type: ignore[union-attr]
        resp.raise_for_status()
        return resp.json()

    async def create_session(self, user_id: str, session_id: str) -> dict:
        return await self._post(
            "/api/v1/sessions",
            user_id=user_id,
            json={"session_id": session_id},
        )

    async def get_session(self, user_id: str, session_id: str) -> dict:
        return await self._get(f"/api/v1/sessions/{session_id}", user_id=user_id)

    async def delete_session(self, user_id: str, session_id: str) -> None:
        resp = await self._client.delete(  # type: ignore[union-attr]
            f"/api/v1/sessions/{session_id}", headers={"X-User-ID": user_id},
        )
        resp.raise_for_status()

    async def get_step(self, user_id: str, session_id: str) -> dict:
        return await self._get(f"/api/v1/sessions/{session_id}/step", user_id=user_id)

    async def submit_answers(
        self, user_id: str, session_id: str, answers: dict[str, Any],
    ) -> dict:
        return await self._post(
            f"/api/v1/sessions/{session_id}/answers",
            user_id=user_id,
            json={"answers": answers},
        )

    async def advance(self, user_id: str, session_id: str) -> dict:
        return await self._post(
            f"/api/v1/sessions/{session_id}/next", user_id=user_id, json=None,
        )

    async def get_resource(self, user_id: str, session_id: str, name: str) -> Any:
        """GET one of the per-session report resources (findings, summary, ...)."""
        return await self._get(f"/api/v1/sessions/{session_id}/{name}", user_id=user_id)

    async def _get(self, path: str, user_id: str) -> Any:
        """GET with X-User-ID header, retry once on timeout."""
        headers = {"X-User-ID": user_id}
        try:
            resp = await self._client.get(path, headers=headers)  # type: ignore[union-attr]
        except httpx.TimeoutException:
            # One retry
            resp = await self._client.get(path, headers=headers)  # type: ignore[union-attr]
        resp.raise_for_status()
        return resp.json()

    async def _post(self, path: str, user_id: str, json: Any) -> Any:
        """POST with X-User-ID header, retry once on timeout."""
        headers = {"X-User-ID": user_id}
        try:
            resp = await self._client.post(path, headers=headers, json=json)  # type: ignore[union-attr]
        except httpx.TimeoutException:
            resp = await self._client.post(path, headers=headers, json=json)  # type: ignore[union-attr]
        resp.raise_for_status()
        return resp.json()


# ---------------------------------------------------------------------------
# AnswerGenerator: random valid answers per question_type
# ---------------------------------------------------------------------------

class AnswerGenerator:
    """Generate random valid answers from question payloads."""

    def __init__(self, rng: random.Random, randomize_danger: bool = False):
        self._rng = rng
        self._randomize_danger = randomize_danger

    def section_answers(self, questions: list[dict], profile: Profile) -> dict[str, Any]:
        return {q["qid"]: self.answer(q, profile) for q in questions}

    def answer(self, question: dict, profile: Profile) -> Any:
        qid = question["qid"]
        qtype = question["question_type"]
        options = question.get("options") or []

        if qid == IMMEDIATE_DANGER_QID and not self._randomize_danger:
            return "No"

        if qid == DOMAINS_QID:
            # The profile's domain plus a random handful of others
            others = [o for o in options if o != profile.label]
            picked = self._rng.sample(others, self._rng.randint(0, 2))
            if profile.label:
                picked.append(profile.label)
            return picked

        if qtype in ("yes_no", "single_select"):
            return self._rng.choice(options)

        if qtype == "multi_select":
            return self._rng.sample(options, self._rng.randint(0, len(options)))

        if qtype == "scale":
            c = question.get("constraints") or {}
            return self._rng.randint(c.get("min", 0), c.get("max", 10))

        if qtype == "date":
            return self._rng.choice(DATE_POOL)

        return self._rng.choice(FREE_TEXT_POOL)


# ---------------------------------------------------------------------------
# SessionResult: outcome of one session
# ---------------------------------------------------------------------------

@dataclass
class SessionResult:
    """Outcome of a single session run."""

    profile: Profile
    run_index: int
    status: str = "pending"          # "success", "failed", "incomplete", "emergency"
    route: list[str] = field(default_factory=list)
    detected: list[str] = field(default_factory=list)
    impairment: int | float | None = None
    error: str | None = None
    steps_taken: int = 0


# ---------------------------------------------------------------------------
# RichPrinter: verbosity-aware console output
# ---------------------------------------------------------------------------

class RichPrinter:
    """Verbosity-aware console output using rich."""

    def __init__(self, verbosity: int = 0):
        self.console = Console()
        self.verbosity = verbosity

    def session_header(
        self, index: int, total: int, profile: Profile, run: int, runs: int,
    ) -> None:
        self.console.print(
            f"\n[bold cyan][{index}/{total}][/] "
            f"{profile.name} (run {run}/{runs})"
        )

    def section_ok(self, section: str, detail: str) -> None:
        self.console.print(f"  [green]✓[/] {section} — {detail}")

    def result_line(self, result: SessionResult) -> None:
        if result.status == "success":
            status_str = "[green]OK[/]"
        elif result.status == "emergency":
            status_str = "[yellow]EMERGENCY[/]"
        elif result.status == "failed":
            status_str = f"[red]FAILED[/]: {result.error}"
        else:
            status_str = f"[yellow]{result.status.upper()}[/]"

        detected = ", ".join(result.detected) if result.detected else "(none)"
        self.console.print(f"  → Patterns: {detected} — {status_str}")

    def question_answer(self, question: dict, answer: Any) -> None:
        """Print a Q&A pair (verbosity >= 1)."""
        if self.verbosity < 1:
            return
        self.console.print(
            f"    [dim]Q:[/] {question['question']} ({question['qid']}) "
            f"[{question['question_type']}]"
        )
        self.console.print(f"    [dim]A:[/] {answer}")

    def json_payload(self, label: str, data: Any) -> None:
        """Print full JSON payload (verbosity >= 2)."""
        if self.verbosity < 2:
            return
        formatted = json.dumps(data, ensure_ascii=False, indent=2)
        self.console.print(f"    [dim]{label}:[/]")
        self.console.print(f"    {formatted}")

    def warning(self, msg: str) -> None:
        self.console.print(f"  [yellow]![/] {msg}")


# ---------------------------------------------------------------------------
# SessionRunner: drives one session start-to-finish
# ---------------------------------------------------------------------------

class CheckFailed(Exception):
    """A response was well-formed HTTP but had unexpected content."""


class SessionRunner:
    """Run a single screening session through the API."""

    def __init__(
        self,
        client: APIClient,
        answer_gen: AnswerGenerator,
        printer: RichPrinter,
        max_steps: int = 50,
        check_analysis: bool = False,
    ):
        self._client = client
        self._answers = answer_gen
        self._printer = printer
        self._max_steps = max_steps
        self._check_analysis = check_analysis

    async def run(self, profile: Profile, run_index: int) -> SessionResult:
        result = SessionResult(profile=profile, run_index=run_index)
        user_id = f"client_test_{uuid.uuid4().hex[:8]}"
        session_id = uuid.uuid4().hex

        try:
            await self._client.create_session(user_id, session_id)
            step = await self._client.get_step(user_id, session_id)

            while step["type"] == "section":
                if result.steps_taken >= self._max_steps:
                    result.status = "incomplete"
                    result.error = f"max steps ({self._max_steps}) reached"
                    return result
                result.steps_taken += 1
                step = await self._answer_section(user_id, session_id, step, profile)

            info = await self._client.get_session(user_id, session_id)
            result.route = info["route"]

            if step["type"] == "emergency":
                result.status = "emergency"
                self._printer.section_ok("EMERGENCY", step["title"])
                return result

            report = step["report"]
            result.impairment = report["impairment_score"]
            result.detected = [f["name"] for f in report["findings"] if f["detected"]]
            self._printer.json_payload("report", report)

            expected = profile.expected_section
            if expected and expected not in result.route:
                result.status = "failed"
                result.error = f"{expected} missing from route {result.route}"
                return result

            await self._check_report_endpoints(user_id, session_id)
            await self._client.delete_session(user_id, session_id)
            result.status = "success"

        except httpx.HTTPStatusError as exc:
            result.status = "failed"
            result.error = (
                f"HTTP {exc.response.status_code} at {exc.request.url.path}: "
                f"{exc.response.text}"
            )
        except (httpx.HTTPError, KeyError, CheckFailed) as exc:
            result.status = "failed"
            result.error = f"{type(exc).__name__}: {exc}"

        return result

    async def _answer_section(
        self, user_id: str, session_id: str, step: dict, profile: Profile,
    ) -> dict:
        section = step["section"]
        answers = self._answers.section_answers(step["questions"], profile)
        for q in step["questions"]:
            self._printer.question_answer(q, answers[q["qid"]])

        if answers:
            step = await self._client.submit_answers(user_id, session_id, answers)
            if step["type"] != "section":
                return step
            for notice in step.get("notices", []):
                self._printer.warning(notice)
        if not step["can_proceed"]:
            self._printer.warning(f"{section} reports it cannot proceed")

        self._printer.section_ok(section, f"{len(answers)} answer(s), {step['progress']}")
        return await self._client.advance(user_id, session_id)

    async def _check_report_endpoints(self, user_id: str, session_id: str) -> None:
        findings = await self._client.get_resource(user_id, session_id, "findings")
        for f in findings:
            if not f["detected"] and set(f) != {"name", "detected"}:
                raise CheckFailed(f"ruled-out finding carries extra fields: {f}")

        summary = await self._client.get_resource(user_id, session_id, "summary")
        if not summary["summary"].startswith("SCREENING RESULTS SUMMARY"):
            raise CheckFailed("summary has an unexpected header")

        email = await self._client.get_resource(user_id, session_id, "email")
        if not email["mailto_url"].startswith("mailto:"):
            raise CheckFailed("email draft has no mailto link")

        prompt = await self._client.get_resource(user_id, session_id, "analysis-prompt")
        self._printer.json_payload("analysis prompt", prompt)

        if self._check_analysis:
            analysis = await self._client._post(
                f"/api/v1/sessions/{session_id}/analysis", user_id=user_id, json=None,
            )
            self._printer.json_payload("analysis", analysis)


# ---------------------------------------------------------------------------
# ResultCollector: aggregate results
# ---------------------------------------------------------------------------

class ResultCollector:
    """Collect and aggregate session results for the final summary."""

    def __init__(self) -> None:
        self.results: list[SessionResult] = []

    def add(self, result: SessionResult) -> None:
        self.results.append(result)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.status in ("success", "emergency"))

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == "failed")

    @property
    def incomplete(self) -> int:
        return sum(1 for r in self.results if r.status == "incomplete")

    def print_summary(self, console: Console) -> None:
        """Print a rich summary table of all results."""
        console.print("\n")
        console.rule("[bold]Session Summary")
        console.print()

        console.print(f"  Total:       {self.total}")
        console.print(f"  [green]Passed:[/]      {self.passed}")
        console.print(f"  [red]Failed:[/]      {self.failed}")
        console.print(f"  [yellow]Incomplete:[/]  {self.incomplete}")
        console.print()

        table = Table(title="Results by Profile", show_lines=True)
        table.add_column("#", style="dim", width=4)
        table.add_column("Profile", min_width=12)
        table.add_column("Run", width=4)
        table.add_column("Status", width=10)
        table.add_column("Sections", width=9)
        table.add_column("Impairment", width=10)
        table.add_column("Detected patterns", min_width=30)

        for i, r in enumerate(self.results, 1):
            status_str = {
                "success": "[green]OK[/]",
                "emergency": "[yellow]EMERG[/]",
                "failed": "[red]FAIL[/]",
                "incomplete": "[yellow]INC[/]",
            }.get(r.status, r.status)

            table.add_row(
                str(i),
                r.profile.name,
                str(r.run_index),
                status_str,
                str(r.steps_taken),
                "-" if r.impairment is None else str(r.impairment),
                ", ".join(r.detected) or "-",
            )

        console.print(table)

        failed = [r for r in self.results if r.status == "failed"]
        if failed:
            console.print()
            console.rule("[red]Failed Sessions")
            for r in failed:
                console.print(f"  {r.profile.name} (run {r.run_index}): {r.error}")

        console.print()


# ---------------------------------------------------------------------------
# CLI + async main
# ---------------------------------------------------------------------------

def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="API client integration test for the screening server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--base-url",
        default="http://localhost:8080",
        help="Server base URL (default: http://localhost:8080)",
    )
    parser.add_argument(
        "-n", "--runs",
        type=int, default=3,
        help="Number of random runs per profile (default: 3)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count", default=0,
        help="Increase verbosity (-v for Q&A pairs, -vv for full JSON)",
    )
    parser.add_argument(
        "--seed",
        type=int, default=None,
        help="RNG seed for reproducibility (default: current timestamp)",
    )
    parser.add_argument(
        "-d", "--domain",
        type=str, default=None,
        help=f"Filter domains (comma-separated keywords from: {', '.join(DOMAIN_SECTIONS)})",
    )
    parser.add_argument(
        "--randomize-danger",
        action="store_true",
        help="Randomize the immediate-danger answer (may end in EMERGENCY)",
    )
    parser.add_argument(
        "--analysis",
        action="store_true",
        help="Also call POST /analysis (needs a server with a generator)",
    )
    parser.add_argument(
        "--max-steps",
        type=int, default=50,
        help="Safety limit: max sections per session (default: 50)",
    )
    parser.add_argument(
        "--timeout",
        type=float, default=30.0,
        help="HTTP request timeout in seconds (default: 30)",
    )
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    console = Console()

    seed = args.seed if args.seed is not None else int(time.time())
    rng = random.Random(seed)
    console.print(f"[dim]RNG seed: {seed}[/]")

    keywords: list[str] | None = None
    if args.domain:
        keywords = [d.strip() for d in args.domain.split(",")]
        for kw in keywords:
            if kw not in DOMAIN_SECTIONS:
                console.print(f"[red]Unknown domain:[/] '{kw}'")
                console.print(f"Available: {', '.join(DOMAIN_SECTIONS)}")
                sys.exit(1)

    printer = RichPrinter(verbosity=args.verbose)
    collector = ResultCollector()

    async with APIClient(args.base_url, timeout=args.timeout) as client:
        if not await client.health_check():
            console.print(
                f"[red]Server at {args.base_url} is not reachable. "
                f"Is the server running?[/]"
            )
            sys.exit(1)
        console.print(f"[green]Server health check passed[/] ({args.base_url})")

        # --- Profiles come from the live catalog's domain options ---
        sections = await client.get_sections()
        core = next(s for s in sections if s["id"] == "CORE")
        c2 = next(q for q in core["questions"] if q["qid"] == DOMAINS_QID)
        profiles = build_profiles(c2["options"], keywords)
        if not profiles:
            console.print("[red]No profiles match the given filters.[/]")
            sys.exit(1)

        total_sessions = len(profiles) * args.runs
        console.print(
            f"[bold]Running {total_sessions} sessions "
            f"({len(profiles)} profiles x {args.runs} runs)[/]"
        )

        answer_gen = AnswerGenerator(rng, randomize_danger=args.randomize_danger)
        runner = SessionRunner(
            client, answer_gen, printer,
            max_steps=args.max_steps, check_analysis=args.analysis,
        )

        session_num = 0
        for profile in profiles:
            for run_idx in range(1, args.runs + 1):
                session_num += 1
                printer.session_header(
                    session_num, total_sessions, profile, run_idx, args.runs,
                )
                result = await runner.run(profile, run_idx)
                printer.result_line(result)
                collector.add(result)

    collector.print_summary(console)

    # Exit code: 1 if any failures
    if collector.failed > 0:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
