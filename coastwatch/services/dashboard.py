"""
Состояние панели сотрудника: список отчётов/алертов, фильтры по срочности и
достоверности, маркеры для карты, применение событий из ленты изменений.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from coastwatch.services.credibility import BANDS, DEFAULT_SCORE, credibility_band

ALL = "all"
URGENCY_FILTERS = (ALL, "low", "medium", "high")
CREDIBILITY_FILTERS = (ALL,) + BANDS

BAND_COLORS = {
    "high": "#059669",
    "medium": "#ea580c",
    "low": "#dc2626",
}
BAND_RADIUS = {"high": 15, "medium": 12, "low": 10}
PULSE_SCORE = 0.8

Record = Union[Mapping[str, Any], Any]


def _get(record: Record, key: str, default=None):
    if isinstance(record, Mapping):
        return record.get(key, default)
    return getattr(record, key, default)


def _value(val):
    return getattr(val, "value", val)


def _score(record: Record) -> float:
    score = _get(record, "credibility_score")
    return float(DEFAULT_SCORE if score is None else score)


def matches_filters(record: Record, urgency: str = ALL, credibility: str = ALL) -> bool:
    if urgency != ALL and (_value(_get(record, "urgency")) or "medium") != urgency:
        return False
    if credibility != ALL and credibility_band(_score(record)) != credibility:
        return False
    return True


def filter_reports(reports: Iterable[Record], urgency: str = ALL, credibility: str = ALL) -> List[Record]:
    if urgency not in URGENCY_FILTERS:
        raise ValueError(f"unknown urgency filter: {urgency}")
    if credibility not in CREDIBILITY_FILTERS:
        raise ValueError(f"unknown credibility filter: {credibility}")
    return [r for r in reports if matches_filters(r, urgency, credibility)]


def band_counts(reports: Iterable[Record]) -> Dict[str, int]:
    counts = {band: 0 for band in BANDS}
    for r in reports:
        counts[credibility_band(_score(r))] += 1
    return counts


def marker_for(report: Record) -> Optional[Dict[str, Any]]:
    """Маркер карты; отчёты без координат на карту не попадают."""
    lat = _get(report, "latitude")
    lon = _get(report, "longitude")
    if lat is None or lon is None:
        return None
    score = _score(report)
    band = credibility_band(score)
    urgency = _value(_get(report, "urgency")) or "medium"
    return {
        "report_id": _get(report, "id"),
        "lat": float(lat),
        "lon": float(lon),
        "color": BAND_COLORS[band],
        "radius": BAND_RADIUS[band],
        "pulse": urgency == "high" or score >= PULSE_SCORE,
        "hazard_type": _value(_get(report, "hazard_type")),
        "location": _get(report, "location"),
        "urgency": urgency,
        "credibility_percent": round(score * 100),
        "image_url": _get(report, "image_url"),
    }


class DashboardState:
    """
    Локальная копия ленты: INSERT в начало списка, UPDATE заменяет по id.
    UPDATE для неизвестного id добавляется (upsert), а не теряется.
    """

    def __init__(self, reports: Optional[List[Dict[str, Any]]] = None,
                 alerts: Optional[List[Dict[str, Any]]] = None) -> None:
        self.reports: List[Dict[str, Any]] = list(reports or [])
        self.alerts: List[Dict[str, Any]] = list(alerts or [])
        self.urgency = ALL
        self.credibility = ALL

    def set_filters(self, urgency: str = ALL, credibility: str = ALL) -> None:
        if urgency not in URGENCY_FILTERS or credibility not in CREDIBILITY_FILTERS:
            raise ValueError("unknown filter value")
        self.urgency = urgency
        self.credibility = credibility

    def visible_reports(self) -> List[Dict[str, Any]]:
        return filter_reports(self.reports, self.urgency, self.credibility)

    def markers(self) -> List[Dict[str, Any]]:
        return [m for m in (marker_for(r) for r in self.visible_reports()) if m is not None]

    def apply_change(self, event: Mapping[str, Any]) -> None:
        table = event.get("table")
        kind = event.get("event")
        record = event.get("new") or {}
        if table == "hazard_reports":
            target = self.reports
        elif table == "alerts":
            target = self.alerts
        else:
            return
        if kind == "INSERT":
            target.insert(0, dict(record))
        elif kind == "UPDATE":
            for i, existing in enumerate(target):
                if str(existing.get("id")) == str(record.get("id")):
                    target[i] = dict(record)
                    break
            else:
                target.insert(0, dict(record))
