"""
Parser for the batched per-item summary response.

The model is asked for {"summaries": [{"index": 0, "summary": "..."}]} but may wrap it in prose
or Markdown fences, so the payload is taken from the first '{' to the last '}'.
parse_summaries never raises: malformed input is reported through SummaryParseResult.error.
"""
import json
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class SummaryParseResult:
    summaries: Optional[Dict[int, str]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.summaries is not None


def _failure(message: str) -> SummaryParseResult:
    return SummaryParseResult(summaries=None, error=message)


def extract_json_object(text: str) -> Optional[str]:
    if not text:
        return None
    start = text.find('{')
    end = text.rfind('}')
    if start == -1 or end < start:
        return None
    return text[start:end + 1]


def parse_summaries(text: str) -> SummaryParseResult:
    raw = extract_json_object(text)
    if raw is None:
        return _failure("no JSON object found in response")
    try:
        doc = json.loads(raw)
    except ValueError as ex:
        return _failure(f"invalid JSON: {ex}")

    entries = doc.get('summaries') if isinstance(doc, dict) else None
    if not isinstance(entries, list):
        return _failure("response has no 'summaries' list")

    summaries: Dict[int, str] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        index, summary = entry.get('index'), entry.get('summary')
        # bool is an int subclass; reject it explicitly
        if isinstance(index, bool) or not isinstance(summary, str):
            continue
        try:
            summaries.setdefault(int(index), summary.strip())
        except (TypeError, ValueError):
            continue
    return SummaryParseResult(summaries=summaries)
