"""Deterministic text-analysis tools exposed as the ``text`` module.

Extractors return ``{"results": [...]}`` rows so batch commands can feed
them forward with ``${task.results[N].field}``.
"""

from __future__ import annotations

import json
import re
from collections import Counter
from typing import Literal

from pydantic import Field

from tool_gateway.modules.base import READ_ONLY, SpecModule, StrictModel, ToolParams, ToolSpec
from tool_gateway.modules.builtin.notes import rows_to_csv

MAX_ACTION_ITEMS = 10

_ENTITY_RE = re.compile(r"\b[A-Z][a-zA-Z0-9_-]*\b")
_SENTENCE_SPLIT_RE = re.compile(r"[\n.;]")
_OWNER_RE = re.compile(r"\b(?:owner|assignee):\s*([A-Z][a-zA-Z-]*)", re.IGNORECASE)

# Checked in order; the first kind that claims a span wins.
_DEADLINE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("date", re.compile(r"\b\d{4}-\d{2}-\d{2}\b")),
    (
        "date",
        re.compile(
            r"\b(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*"
            r"\s+\d{1,2}(?:,\s*\d{4})?\b",
            re.IGNORECASE,
        ),
    ),
    (
        "relative",
        re.compile(r"\b(?:in|next|within)\s+\d{1,3}\s+(?:days?|weeks?|months?)\b", re.IGNORECASE),
    ),
    (
        "weekday",
        re.compile(
            r"\b(?:by|before|on)\s+(?:mon|tues|wednes|thurs|fri|satur|sun)day\b", re.IGNORECASE
        ),
    ),
    ("period", re.compile(r"\b(?:eod|eow|eom|end of (?:day|week|month)|q[1-4])\b", re.IGNORECASE)),
)

_ACTION_VERBS = frozenset(
    {
        "add",
        "coordinate",
        "create",
        "deliver",
        "draft",
        "finalize",
        "fix",
        "follow",
        "investigate",
        "prepare",
        "publish",
        "review",
        "schedule",
        "send",
        "update",
    }
)
_ACTION_PREFIXES = ("action:", "todo:")

Priority = Literal["low", "medium", "high", "critical"]

# Highest level first.
_PRIORITY_SIGNALS: tuple[tuple[Priority, tuple[str, ...]], ...] = (
    ("critical", ("sev1", "p0", "outage", "production down", "security incident", "breach")),
    ("high", ("urgent", "asap", "high priority", "deadline", "blocking", "escalat")),
    ("medium", ("important", "soon", "follow up", "when possible")),
)


class TextInput(ToolParams):
    text: str = Field(min_length=1)


class SummarizeInput(TextInput):
    max_words: int = Field(default=60, ge=1, le=300)


class SummarizeOutput(StrictModel):
    summary: str
    word_count: int
    truncated: bool


class Entity(StrictModel):
    name: str
    mentions: int


class EntitiesOutput(StrictModel):
    results: list[Entity]


class Deadline(StrictModel):
    text: str
    kind: Literal["date", "relative", "weekday", "period"]


class DeadlinesOutput(StrictModel):
    results: list[Deadline]


class ActionItem(StrictModel):
    item: str
    owner: str | None = None


class ActionItemsOutput(StrictModel):
    results: list[ActionItem]


class PriorityOutput(StrictModel):
    priority: Priority
    signals: list[str] = Field(default_factory=list)


def summarize(payload: SummarizeInput) -> SummarizeOutput:
    words = payload.text.split()
    return SummarizeOutput(
        summary=" ".join(words[: payload.max_words]),
        word_count=len(words),
        truncated=len(words) > payload.max_words,
    )


def extract_entities(payload: TextInput) -> EntitiesOutput:
    """Capitalized tokens, most mentioned first; ties keep first-seen order."""
    counts = Counter(_ENTITY_RE.findall(payload.text))
    return EntitiesOutput(
        results=[Entity(name=name, mentions=count) for name, count in counts.most_common()]
    )


def extract_deadlines(payload: TextInput) -> DeadlinesOutput:
    claimed: list[tuple[int, int]] = []
    found: list[tuple[int, Deadline]] = []
    seen: set[str] = set()
    for kind, pattern in _DEADLINE_PATTERNS:
        for match in pattern.finditer(payload.text):
            start, end = match.span()
            if any(start < other_end and other_start < end for other_start, other_end in claimed):
                continue
            claimed.append((start, end))
            text = " ".join(match.group(0).split())
            if text.lower() in seen:
                continue
            seen.add(text.lower())
            found.append((start, Deadline(text=text, kind=kind)))
    found.sort(key=lambda pair: pair[0])
    return DeadlinesOutput(results=[deadline for _, deadline in found])


def extract_action_items(payload: TextInput) -> ActionItemsOutput:
    items: list[ActionItem] = []
    seen: set[str] = set()
    for fragment in _SENTENCE_SPLIT_RE.split(payload.text):
        line = " ".join(fragment.strip(" -*\t").split())
        if not line or line.lower() in seen or not _is_action(line):
            continue
        seen.add(line.lower())
        owner = _OWNER_RE.search(line)
        items.append(ActionItem(item=line, owner=owner.group(1) if owner else None))
        if len(items) == MAX_ACTION_ITEMS:
            break
    return ActionItemsOutput(results=items)


def classify_priority(payload: TextInput) -> PriorityOutput:
    lowered = payload.text.lower()
    for level, terms in _PRIORITY_SIGNALS:
        signals = [term for term in terms if term in lowered]
        if signals:
            return PriorityOutput(priority=level, signals=signals)
    return PriorityOutput(priority="low")


def _is_action(line: str) -> bool:
    lowered = line.lower()
    if lowered.startswith(_ACTION_PREFIXES) or _OWNER_RE.search(line):
        return True
    return lowered.split(maxsplit=1)[0] in _ACTION_VERBS


class TextModule(SpecModule):
    """Text tools; compact form is CSV for result rows and plain text otherwise."""

    def __init__(self) -> None:
        super().__init__(
            name="text",
            description="Deterministic text analysis: summaries, entities, deadlines, priority",
            specs={
                "summarize": ToolSpec(
                    input_model=SummarizeInput,
                    output_model=SummarizeOutput,
                    fn=summarize,
                    description="Keep the first max_words words of the text",
                    annotations=READ_ONLY,
                ),
                "extract_entities": ToolSpec(
                    input_model=TextInput,
                    output_model=EntitiesOutput,
                    fn=extract_entities,
                    description="Capitalized names with mention counts",
                    annotations=READ_ONLY,
                ),
                "extract_deadlines": ToolSpec(
                    input_model=TextInput,
                    output_model=DeadlinesOutput,
                    fn=extract_deadlines,
                    description="Dates and relative deadlines in order of appearance",
                    annotations=READ_ONLY,
                ),
                "extract_action_items": ToolSpec(
                    input_model=TextInput,
                    output_model=ActionItemsOutput,
                    fn=extract_action_items,
                    description="Imperative or owner-tagged lines, at most 10",
                    annotations=READ_ONLY,
                ),
                "classify_priority": ToolSpec(
                    input_model=TextInput,
                    output_model=PriorityOutput,
                    fn=classify_priority,
                    description="Urgency as low, medium, high or critical",
                    annotations=READ_ONLY,
                ),
            },
        )

    def to_compact(self, tool_name: str, json_result: str) -> str:
        data = json.loads(json_result)
        if tool_name == "summarize":
            return data["summary"] + (" ..." if data.get("truncated") else "")
        if tool_name == "classify_priority":
            signals = ", ".join(data.get("signals", [])) or "none"
            return f"priority: {data['priority']}\nsignals: {signals}"
        rows = data.get("results")
        if isinstance(rows, list) and rows:
            return rows_to_csv(rows, columns=list(rows[0]))
        return json_result
