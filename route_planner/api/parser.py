# route_planner/api/parser.py
"""Turn a free-text route completion into structured route points.

The model is asked to answer with a fixed template (see
``route_planner.api.llm.build_system_prompt``)::

    🎯 КРАТКИЙ ОБЗОР МАРШРУТА
    <two or three sentences>

    1. <place name>
       ⏱️ Время: <stay>
       📝 Описание: <description>
       - <activity>
       💡 <tip>
       🚶 Переход: <how to reach the next point>

Model output drifts from that template all the time, so the parser is
lenient: anything it does not recognise is dropped, and it never raises.
Coordinates are not touched here; see ``route_planner.api.geocoding``.
"""

from __future__ import annotations

import enum
import logging
import re
import unicodedata
from dataclasses import dataclass, fields
from typing import Dict, Iterator, List, Optional

from route_planner.api.models import ParsedItinerary, RoutePoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParserMarkers:
    """Leading tokens that identify what a line of model output carries.

    Defaults match the prompt template the service ships with. Each
    ``*_label`` is optional text that may follow the marker and is removed
    together with it.
    """

    overview: str = "🎯 КРАТКИЙ ОБЗОР"
    overview_heading: str = "🎯 КРАТКИЙ ОБЗОР МАРШРУТА"
    duration: str = "⏱️"
    duration_label: str = "Время:"
    description: str = "📝"
    description_label: str = "Описание:"
    activity: str = "-"
    tip: str = "💡"
    transition: str = "🚶"
    transition_label: str = "Переход:"
    max_activities: int = 3

    @classmethod
    def from_overrides(cls, overrides: Optional[Dict[str, object]]) -> "ParserMarkers":
        """Build markers from a dict of field overrides (e.g. from config)."""
        if not overrides:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown parser marker(s): {', '.join(sorted(unknown))}")
        return cls(**overrides)


class ParserState(enum.Enum):
    NO_POINT = "no_point"
    ACCUMULATING = "accumulating"


# A point heading is "<digits>." followed by whitespace (or nothing) and text.
# The digits themselves are never trusted for ordering.
POINT_HEADER_RE = re.compile(r"^\d+\.(?=\s|$)\s*(?P<name>.*)$")


def _marker_pattern(marker: str) -> str:
    """Regex for ``marker`` that tolerates an optional emoji variation selector.

    Models emit "⏱" and "⏱️" (U+FE0F) interchangeably; both must match.
    """
    parts = []
    for ch in marker.replace("\ufe0f", ""):
        parts.append(re.escape(ch))
        if unicodedata.category(ch) == "So":
            parts.append("\ufe0f?")
    return "".join(parts)


def _field_re(marker: str, label: str = "") -> "re.Pattern[str]":
    label_part = rf"(?:\s*{re.escape(label)})?" if label else ""
    return re.compile(rf"^{_marker_pattern(marker)}{label_part}\s*(?P<value>.*)$")


def split_sections(raw_text: str) -> Iterator[List[str]]:
    """Yield maximal runs of non-blank lines."""
    section: List[str] = []
    for line in raw_text.splitlines():
        if line.strip():
            section.append(line)
        elif section:
            yield section
            section = []
    if section:
        yield section


class ResponseParser:
    """Parse model completions into a ``ParsedItinerary``.

    Instances hold only compiled marker patterns, so one parser can be shared
    between requests; every ``parse`` call works on its own local state.
    """

    def __init__(self, markers: Optional[ParserMarkers] = None):
        self.markers = markers or ParserMarkers()
        m = self.markers
        self._overview_re = re.compile(rf"^{_marker_pattern(m.overview)}")
        self._overview_heading_re = re.compile(rf"^{_marker_pattern(m.overview_heading)}")
        self._duration_re = _field_re(m.duration, m.duration_label)
        self._description_re = _field_re(m.description, m.description_label)
        self._activity_re = _field_re(m.activity)
        self._tip_re = _field_re(m.tip)
        self._transition_re = _field_re(m.transition, m.transition_label)

    def parse(self, raw_text: Optional[str]) -> ParsedItinerary:
        """Return the overview and points found in ``raw_text``.

        Unrecognised sections and lines are skipped. Empty or missing text
        yields an empty itinerary.
        """
        overview: Optional[str] = None
        points: List[RoutePoint] = []
        current: Optional[RoutePoint] = None
        state = ParserState.NO_POINT

        for section in split_sections(raw_text or ""):
            first_line = section[0].strip()

            if self._overview_re.match(first_line):
                if overview is None:
                    overview = self._extract_overview(first_line, section[1:])
                else:
                    logger.debug("Ignoring repeated overview section")
                continue

            header = POINT_HEADER_RE.match(first_line)
            if header is None:
                logger.debug("Skipping unrecognised section: %.40r", first_line)
                continue

            if state is ParserState.ACCUMULATING:
                points.append(current)
            current = RoutePoint(sequence_index=len(points) + 1, name=header.group("name").strip())
            state = ParserState.ACCUMULATING

            for line in section[1:]:
                self._apply_line(current, line.strip())

        if state is ParserState.ACCUMULATING:
            points.append(current)

        logger.debug("Parsed %d route points (overview: %s)", len(points), overview is not None)
        return ParsedItinerary(overview_text=overview or "", points=points)

    def _extract_overview(self, first_line: str, rest: List[str]) -> str:
        heading = self._overview_heading_re.match(first_line) or self._overview_re.match(first_line)
        remainder = first_line[heading.end():]
        return "\n".join([remainder] + rest).strip()

    def _apply_line(self, point: RoutePoint, line: str) -> None:
        """Route one line of a point section to the field its marker names."""
        match = self._duration_re.match(line)
        if match:
            point.stay_duration = match.group("value").strip()
            return

        match = self._description_re.match(line)
        if match:
            point.description = match.group("value").strip()
            return

        match = self._activity_re.match(line)
        if match:
            # Bullets past the cap are dropped, not re-read as tips.
            if len(point.activities) < self.markers.max_activities:
                point.activities.append(match.group("value").strip())
            return

        match = self._tip_re.match(line)
        if match:
            point.tips.append(match.group("value").strip())
            return

        match = self._transition_re.match(line)
        if match:
            point.transition_to_next = match.group("value").strip()
