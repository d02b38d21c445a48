"""
Turn an Outline event into a Zulip message.

Message layout:

    **{actor}** {verb} [{title}]({link})

    > {first non-empty line of the document, max 200 chars}

The quote block is omitted for deletions and for documents with no text.
"""

from __future__ import annotations

from outline_relay.models import DocumentModel, EventEnvelope

SNIPPET_MAX_LEN = 200
ELLIPSIS = "…"

VERB_CREATED = "created"
VERB_UPDATED = "updated"
VERB_DELETED = "deleted"
VERB_FALLBACK = "performed an action on"

# Substring match, first hit wins. Unknown event variants still get a verb.
_EVENT_VERBS = (
    ("create", VERB_CREATED),
    ("update", VERB_UPDATED),
    ("delete", VERB_DELETED),
)


def resolve_actor(doc: DocumentModel) -> str:
    return doc.updated_by.name or doc.created_by.name


def resolve_link(doc: DocumentModel, base_url: str) -> str:
    if doc.url:
        return f"{base_url}{doc.url}"
    if doc.document_id:
        return f"{base_url}/doc/{doc.document_id}"
    return ""


def action_verb(event: str) -> str:
    for token, verb in _EVENT_VERBS:
        if token in event:
            return verb
    return VERB_FALLBACK


def extract_snippet(text: str) -> str:
    """Return the first non-blank line of text, stripped, or ""."""
    for line in text.strip().split("\n"):
        line = line.strip()
        if line:
            return line
    return ""


def truncate_snippet(snippet: str, max_len: int = SNIPPET_MAX_LEN) -> str:
    if len(snippet) > max_len:
        return snippet[:max_len] + ELLIPSIS
    return snippet


def format_message(envelope: EventEnvelope, base_url: str) -> str:
    """
    Build the Zulip message for an Outline event.

    Never fails: every missing field falls back to an empty string.
    """
    doc = envelope.document
    verb = action_verb(envelope.event)

    heading = (
        f"**{resolve_actor(doc)}** {verb} [{doc.title}]({resolve_link(doc, base_url)})"
    )

    snippet = truncate_snippet(extract_snippet(doc.text))
    if snippet and verb != VERB_DELETED:
        return f"{heading}\n\n> {snippet}"
    return heading
