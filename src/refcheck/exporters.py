"""Export helpers for verification records."""

from __future__ import annotations

import csv
import io
import json
from urllib.parse import quote

from refcheck.models import ProviderResult, VerificationRecord

MANUAL_SEARCH_ENGINES = {
    "google_scholar": "https://scholar.google.com/scholar?q={query}",
    "baidu_xueshu": "https://xueshu.baidu.com/s?wd={query}",
}


def provider_state(result: ProviderResult) -> str:
    """Badge label for one provider outcome."""
    if result.errored:
        return "error"
    if not result.found:
        return "not_found"
    return "matched" if result.matched else "mismatch"


def manual_search_links(query: str) -> dict[str, str]:
    encoded = quote(query, safe="")
    return {name: template.format(query=encoded) for name, template in MANUAL_SEARCH_ENGINES.items()}


def verified_lines(records: list[VerificationRecord]) -> str:
    """Original text of every verified citation, one per line."""
    return "\n".join(record.original for record in records if record.verified)


def record_to_dict(record: VerificationRecord) -> dict:
    payload = record.model_dump(mode="json")
    payload["links"] = manual_search_links(record.query)
    return payload


def records_to_json(records: list[VerificationRecord]) -> str:
    payload = [record_to_dict(record) for record in records]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def records_to_csv(records: list[VerificationRecord]) -> str:
    providers: list[str] = []
    for record in records:
        for name in record.results:
            if name not in providers:
                providers.append(name)
    fieldnames = ["original", "query", "status"]
    for name in providers:
        fieldnames.extend(f"{name}_{field}" for field in ("state", "title", "year", "url"))

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for record in records:
        row = {"original": record.original, "query": record.query, "status": record.status.value}
        for name in providers:
            result = record.results.get(name)
            if result is None:
                continue
            row[f"{name}_state"] = provider_state(result)
            row[f"{name}_title"] = result.title or ""
            row[f"{name}_year"] = result.year or ""
            row[f"{name}_url"] = result.url or ""
        writer.writerow(row)
    return buffer.getvalue()
