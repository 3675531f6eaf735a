"""Analytics: aggregate stored records into chart-ready buckets"""

from collections import Counter
from typing import Iterable, List

from pydantic import BaseModel

from jurisai.db.base import EntityStore

PRINCIPLE_KEYWORDS = {
    "duty", "breach", "negligence", "contract", "damages", "liability",
    "fair", "reasonable", "standard", "test", "burden", "proof", "evidence",
}


class Bucket(BaseModel):
    label: str
    count: int


class AnalyticsReport(BaseModel):
    citation_trends: List[Bucket] = []
    authority_types: List[Bucket] = []
    top_authorities: List[Bucket] = []
    court_distribution: List[Bucket] = []
    matter_types: List[Bucket] = []
    document_status: List[Bucket] = []
    legal_principles: List[Bucket] = []
    total_matters: int = 0
    total_authorities: int = 0
    total_documents: int = 0


def _buckets(counter: Counter) -> List[Bucket]:
    return [Bucket(label=str(label), count=count) for label, count in counter.items()]


def _ranked(counter: Counter, limit: int) -> List[Bucket]:
    # stable: ties keep first-seen order
    ranked = sorted(counter.items(), key=lambda item: -item[1])[:limit]
    return [Bucket(label=str(label), count=count) for label, count in ranked]


def citation_trends(authorities: Iterable[dict], years: int = 10) -> List[Bucket]:
    """Authorities per year, ascending, last `years` years only."""
    counts = Counter(str(a["year"]) for a in authorities if a.get("year"))
    return [Bucket(label=year, count=counts[year]) for year in sorted(counts)[-years:]]


def authority_types(authorities: Iterable[dict]) -> List[Bucket]:
    return _buckets(Counter(a.get("authority_type") or "Other" for a in authorities))


def top_authorities(authorities: Iterable[dict], limit: int = 10) -> List[Bucket]:
    """Most frequently stored titles, truncated to 40 characters plus an ellipsis."""
    counts = Counter(a.get("title", "") for a in authorities)
    return [Bucket(label=b.label[:40] + "...", count=b.count) for b in _ranked(counts, limit)]


def court_distribution(authorities: Iterable[dict], limit: int = 8) -> List[Bucket]:
    counts = Counter(a["court"] for a in authorities if a.get("court"))
    return [Bucket(label=b.label[:30], count=b.count) for b in _ranked(counts, limit)]


def matter_types(matters: Iterable[dict]) -> List[Bucket]:
    return _buckets(Counter(m.get("matter_type") for m in matters))


def document_status(documents: Iterable[dict]) -> List[Bucket]:
    return _buckets(Counter(d.get("status") for d in documents))


def legal_principles(authorities: Iterable[dict], limit: int = 10) -> List[Bucket]:
    """Keyword frequency across legal principles (whitespace-split, lowercased)."""
    counts = Counter()
    for authority in authorities:
        for word in (authority.get("legal_principle") or "").lower().split(" "):
            if word in PRINCIPLE_KEYWORDS:
                counts[word] += 1
    return _ranked(counts, limit)


def build_report(store: EntityStore) -> AnalyticsReport:
    authorities = store.list("LegalAuthority")
    matters = store.list("Matter")
    documents = store.list("Document")
    return AnalyticsReport(
        citation_trends=citation_trends(authorities),
        authority_types=authority_types(authorities),
        top_authorities=top_authorities(authorities),
        court_distribution=court_distribution(authorities),
        matter_types=matter_types(matters),
        document_status=document_status(documents),
        legal_principles=legal_principles(authorities),
        total_matters=len(matters),
        total_authorities=len(authorities),
        total_documents=len(documents),
    )
