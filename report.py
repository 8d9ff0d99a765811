"""
Art-analysis report helpers: data URL parsing, code-fence stripping and
normalization of whatever JSON the model sends back into the fixed schema.
"""
import base64, binascii, json, re
from dataclasses import dataclass

SENTINEL = "—"

META_FIELDS = ("title", "artist", "year", "medium", "region", "notes")
SECTION_FIELDS = ("visual", "genre", "color", "line", "shape",
                  "artifact", "historical", "cultural")

DATA_URL_RE = re.compile(r"^data:(.+?);base64,(.+)$")
_FENCE_OPEN_JSON = re.compile(r"^```json\s*", re.IGNORECASE)
_FENCE_OPEN = re.compile(r"^```\s*")
_FENCE_CLOSE = re.compile(r"```$")


class InvalidDataUrl(ValueError):
    pass


# ── data URL ---------------------------------------------------------------

@dataclass(frozen=True)
class DataUrl:
    mime_type: str
    data: str   # standard, padded base64
    url: str    # data URL carrying `data`

    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.data)


def _decode_payload(data: str) -> bytes:
    # unpadded and URL-safe (-_) payloads are accepted too
    padded = data + "=" * (-len(data) % 4)
    return base64.b64decode(padded, altchars=b"-_", validate=True)


def parse_data_url(url: str) -> DataUrl:
    """
    `data:<mimeType>;base64,<data>` → DataUrl. Raises InvalidDataUrl.

    The payload is re-encoded as standard padded base64; `url` is rebuilt
    only when that changes it.
    """
    m = DATA_URL_RE.match(url or "")
    if not m:
        raise InvalidDataUrl("Invalid dataURL")
    mime_type, data = m.group(1), m.group(2)
    try:
        canonical = base64.b64encode(_decode_payload(data)).decode("ascii")
    except (binascii.Error, ValueError):
        raise InvalidDataUrl("dataURL payload is not valid base64") from None
    if canonical != data:
        url = f"data:{mime_type};base64,{canonical}"
    return DataUrl(mime_type=mime_type, data=canonical, url=url)


# ── model output -----------------------------------------------------------

def strip_code_fence(text):
    """Remove a surrounding ```json ... ``` (or bare ```) fence."""
    if not text:
        return text
    s = text.strip()
    s = _FENCE_OPEN_JSON.sub("", s)
    s = _FENCE_OPEN.sub("", s)
    s = _FENCE_CLOSE.sub("", s)
    return s.strip()


def non_json_result(provider_label: str, raw: str) -> dict:
    return {"error": f"{provider_label} returned non-JSON", "raw": raw}


def _field(group: dict, key: str) -> str:
    val = group.get(key)
    if val is None or val == "" or val is False:
        return SENTINEL
    if isinstance(val, str):
        return val
    if isinstance(val, (dict, list)):
        return json.dumps(val, ensure_ascii=False)
    return str(val)


def normalize_report(parsed) -> dict:
    """
    Map loosely shaped model JSON onto the fixed report schema.

    Every meta/sections field is present in the result; anything the model
    left out (or sent as null/empty) becomes SENTINEL. Never raises, and
    normalize_report(normalize_report(x)) == normalize_report(x).
    """
    parsed = parsed if isinstance(parsed, dict) else {}
    meta = parsed.get("meta")
    sections = parsed.get("sections")
    meta = meta if isinstance(meta, dict) else {}
    sections = sections if isinstance(sections, dict) else {}
    return {
        "meta": {k: _field(meta, k) for k in META_FIELDS},
        "sections": {k: _field(sections, k) for k in SECTION_FIELDS},
    }
