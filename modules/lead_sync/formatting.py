"""Card title and description formatting shared by the board client and sync engine."""

import re
from typing import Optional

# Canonical description order; empty values are omitted
DESCRIPTION_KEYS = (
    ('email', 'Email'),
    ('note', 'Note'),
    ('source', 'Source'),
)

EMAIL_RE = re.compile(r'([A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,})')


def build_card_title(name: str, lead_id: str) -> str:
    """Card title carrying the lead id, e.g. 'Jane Doe (LeadID: 42)'."""
    return f"{name} (LeadID: {lead_id})"


def parse_card_title(title: Optional[str]) -> str:
    """Editable name from a card title: everything before the first '('."""
    return (title or '').split('(', 1)[0].strip()


def extract_email(text: str) -> str:
    """First email-shaped substring, or the text unchanged if there is none."""
    match = EMAIL_RE.search(text)
    return match.group(1) if match else text


def render_description(fields: dict[str, Optional[str]]) -> str:
    """
    Render description fields as 'Key: value' lines.

    Keys are matched case-insensitively. Output order is always
    Email, Note, Source; empty fields produce no line.
    """
    lowered = {(k or '').strip().lower(): v for k, v in fields.items()}
    lines = []
    for key, label in DESCRIPTION_KEYS:
        value = lowered.get(key)
        if value:
            lines.append(f"{label}: {value}")
    return "\n".join(lines)


def parse_description(desc: Optional[str]) -> dict[str, str]:
    """
    Parse a card description back into canonical fields.

    Lines split on the first colon; keys are lowercased. Lines without a
    colon, with an empty value, or with an unknown key are ignored.
    """
    result: dict[str, str] = {}
    if not desc:
        return result

    for line in desc.split('\n'):
        if ':' not in line:
            continue

        key, value = line.split(':', 1)
        key = key.strip().lower()
        value = value.strip()

        if not value:
            continue

        if key == 'email':
            result[key] = extract_email(value)
        elif key in ('note', 'source'):
            result[key] = value

    return result


def merge_description(desc: Optional[str], updates: dict[str, Optional[str]]) -> str:
    """Apply field updates to an existing description and re-render it."""
    fields = parse_description(desc)
    for key, value in updates.items():
        if value is not None:
            fields[key.strip().lower()] = value.strip()
    return render_description(fields)
