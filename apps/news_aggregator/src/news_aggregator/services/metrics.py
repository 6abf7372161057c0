"""In-process metrics registry with Prometheus text rendering."""

from __future__ import annotations

from threading import Lock

LabelKey = tuple[tuple[str, str], ...]
SeriesKey = tuple[str, LabelKey]


class MetricsRegistry:
    def __init__(self) -> None:
        self._lock = Lock()
        self._values: dict[SeriesKey, float] = {}
        self._types: dict[str, str] = {}

    def inc_counter(
        self, name: str, value: float = 1.0, *, labels: dict[str, str] | None = None
    ) -> None:
        key = _series_key(name, labels)
        with self._lock:
            self._types[name] = "counter"
            self._values[key] = self._values.get(key, 0.0) + value

    def set_gauge(
        self, name: str, value: float, *, labels: dict[str, str] | None = None
    ) -> None:
        key = _series_key(name, labels)
        with self._lock:
            self._types[name] = "gauge"
            self._values[key] = float(value)

    def value(self, name: str, *, labels: dict[str, str] | None = None) -> float:
        with self._lock:
            return self._values.get(_series_key(name, labels), 0.0)

    def reset(self) -> None:
        with self._lock:
            self._values.clear()
            self._types.clear()

    def render(self) -> str:
        with self._lock:
            values = dict(self._values)
            types = dict(self._types)

        grouped: dict[str, list[tuple[LabelKey, float]]] = {}
        for (name, labels), value in values.items():
            grouped.setdefault(name, []).append((labels, value))

        lines: list[str] = []
        for name in sorted(grouped):
            lines.append(f"# TYPE {name} {types.get(name, 'untyped')}")
            for labels, value in sorted(grouped[name], key=lambda item: item[0]):
                lines.append(f"{name}{_format_labels(labels)} {value}")
        return "\n".join(lines) + "\n"


def _series_key(name: str, labels: dict[str, str] | None) -> SeriesKey:
    if not labels:
        return name, tuple()
    return name, tuple(sorted((str(k), str(v)) for k, v in labels.items()))


def _format_labels(labels: LabelKey) -> str:
    if not labels:
        return ""
    parts = []
    for key, value in labels:
        safe_value = value.replace("\\", "\\\\").replace('"', '\\"')
        parts.append(f"{key}=\"{safe_value}\"")
    return "{" + ",".join(parts) + "}"


metrics = MetricsRegistry()
