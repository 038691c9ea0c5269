"""Icon source resolution.

Icons arrive from the admin forms as a single string that can be inline SVG
markup, an image URL, an icon-set identifier, or plain text (an emoji, say).
They are classified once here and stored on the API output as a tagged
object, so clients never have to sniff the string themselves.
"""

import re
from dataclasses import dataclass

_NAMED_ICON = re.compile(r'^[A-Za-z][A-Za-z0-9-]*$')


@dataclass(frozen=True)
class IconSource:
    kind: str
    value: str

    # Field name used in the serialized payload for each kind.
    _PAYLOAD_KEYS = {'svg': 'markup', 'url': 'href', 'named': 'id', 'text': 'value'}

    def as_dict(self):
        return {'kind': self.kind, self._PAYLOAD_KEYS[self.kind]: self.value}


def resolve_icon(raw) -> IconSource | None:
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    if text.lower().startswith('<svg'):
        return IconSource('svg', text)
    if text.startswith(('http://', 'https://', '/')):
        return IconSource('url', text)
    if _NAMED_ICON.match(text):
        return IconSource('named', text)
    return IconSource('text', text)


def icon_payload(raw):
    source = resolve_icon(raw)
    return source.as_dict() if source else None
