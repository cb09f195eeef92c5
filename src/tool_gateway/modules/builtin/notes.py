"""In-memory note store exposed as the ``notes`` module."""

from __future__ import annotations

import csv
import io
import json
import re
import threading
from datetime import UTC, datetime
from uuid import uuid4

from pydantic import Field

from tool_gateway.modules.base import CREATE, READ_ONLY, SpecModule, StrictModel, ToolParams, ToolSpec


class Note(StrictModel):
    id: str
    title: str
    body: str
    tags: list[str] = Field(default_factory=list)
    created_at: datetime


class NoteHit(StrictModel):
    id: str
    title: str
    snippet: str
    score: float = Field(ge=0.0, le=1.0)


class SearchNotesInput(ToolParams):
    query: str = Field(min_length=1)
    limit: int = Field(default=5, ge=1, le=50)
    tag: str | None = None


class SearchNotesOutput(StrictModel):
    results: list[NoteHit]


class GetNoteInput(ToolParams):
    note_id: str = Field(min_length=1)


class CreateNoteInput(ToolParams):
    title: str = Field(min_length=1)
    body: str = ""
    tags: list[str] = Field(default_factory=list)


SEED_NOTES = [
    {
        "title": "Design review checklist",
        "body": "Review the API design with the platform team before the milestone. "
        "Owner: backend lead.",
        "tags": ["design", "process"],
    },
    {
        "title": "Payments outage postmortem",
        "body": "Checkout latency spiked after the cache rollout. Fix connection pool "
        "sizing and add alerting on p99 latency.",
        "tags": ["incident", "payments"],
    },
    {
        "title": "Onboarding guide",
        "body": "New engineers should read the architecture overview and set up the "
        "local environment in the first week.",
        "tags": ["docs"],
    },
]


class NotesStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._notes: dict[str, Note] = {}

    def add(self, *, title: str, body: str, tags: list[str]) -> Note:
        note = Note(
            id=f"note-{uuid4().hex[:8]}",
            title=title,
            body=body,
            tags=tags,
            created_at=datetime.now(UTC),
        )
        with self._lock:
            self._notes[note.id] = note
        return note

    def get(self, note_id: str) -> Note | None:
        with self._lock:
            return self._notes.get(note_id)

    def all(self) -> list[Note]:
        with self._lock:
            return list(self._notes.values())


class NotesModule(SpecModule):
    """Keyword search over notes; compact form is CSV for hits, Markdown for notes."""

    def __init__(self, *, store: NotesStore | None = None, seed: bool = True) -> None:
        self.store = store or NotesStore()
        if seed and store is None:
            for item in SEED_NOTES:
                self.store.add(**item)
        super().__init__(
            name="notes",
            description="Team notes: keyword search, read and create",
            specs={
                "search": ToolSpec(
                    input_model=SearchNotesInput,
                    output_model=SearchNotesOutput,
                    fn=self.search,
                    description="Search notes by keywords; returns results ordered by score",
                    annotations=READ_ONLY,
                ),
                "get_note": ToolSpec(
                    input_model=GetNoteInput,
                    output_model=Note,
                    fn=self.get_note,
                    description="Read one note by id",
                    annotations=READ_ONLY,
                ),
                "create_note": ToolSpec(
                    input_model=CreateNoteInput,
                    output_model=Note,
                    fn=self.create_note,
                    description="Create a note",
                    annotations=CREATE,
                ),
            },
        )

    def search(self, payload: SearchNotesInput) -> SearchNotesOutput:
        terms = _tokens(payload.query)
        hits: list[NoteHit] = []
        for note in self.store.all():
            if payload.tag and payload.tag not in note.tags:
                continue
            haystack = _tokens(f"{note.title} {note.body} {' '.join(note.tags)}")
            matched = terms & haystack
            if not matched:
                continue
            hits.append(
                NoteHit(
                    id=note.id,
                    title=note.title,
                    snippet=_compact(note.body, max_chars=120),
                    score=round(len(matched) / len(terms), 3),
                )
            )
        hits.sort(key=lambda hit: (-hit.score, hit.title))
        return SearchNotesOutput(results=hits[: payload.limit])

    def get_note(self, payload: GetNoteInput) -> Note:
        note = self.store.get(payload.note_id)
        if note is None:
            raise LookupError(f"note not found: {payload.note_id}")
        return note

    def create_note(self, payload: CreateNoteInput) -> Note:
        return self.store.add(title=payload.title, body=payload.body, tags=payload.tags)

    def to_compact(self, tool_name: str, json_result: str) -> str:
        data = json.loads(json_result)
        if tool_name == "search":
            return rows_to_csv(data.get("results", []), columns=["id", "title", "score"])
        if tool_name in {"get_note", "create_note"}:
            tags = ", ".join(data.get("tags", []))
            lines = [f"# {data.get('title', '')}", f"id: {data.get('id', '')}"]
            if tags:
                lines.append(f"tags: {tags}")
            lines.extend(["", str(data.get("body", ""))])
            return "\n".join(lines).rstrip()
        return json_result


def _tokens(text: str) -> set[str]:
    return {token for token in re.findall(r"[a-z0-9]+", text.lower()) if len(token) > 1}


def _compact(text: str, *, max_chars: int) -> str:
    collapsed = " ".join(text.split())
    if len(collapsed) <= max_chars:
        return collapsed
    return collapsed[: max_chars - 3].rstrip() + "..."


def rows_to_csv(rows: list[dict], *, columns: list[str]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([row.get(column, "") for column in columns])
    return buffer.getvalue().rstrip("\n")
