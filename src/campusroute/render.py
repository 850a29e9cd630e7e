"""
Route drawing as a pure function.

render_route() turns a RouteVisualizationModel plus the current surface size
into a list of draw commands. It keeps no state between calls, so the host
can call it on every resize or model change and replay the commands on
whatever canvas it owns (see svg.py for the SVG backend).

Coordinates are surface pixels, origin top-left, y pointing down.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from .models import CampusCoordinate, RouteSegment, RouteVisualizationModel


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def scaled(self, k: float) -> "Point":
        return Point(self.x * k, self.y * k)


ZERO = Point(0.0, 0.0)
EPSILON = 1e-6


def unit_vector(dx: float, dy: float) -> Point:
    length = math.hypot(dx, dy)
    if length < EPSILON:
        return ZERO
    return Point(dx / length, dy / length)


def direction(start: Point, end: Point) -> Point:
    """Unit vector from start to end, or (0, 0) when the points coincide."""
    return unit_vector(end.x - start.x, end.y - start.y)


def perpendicular(start: Point, end: Point) -> Point:
    d = direction(start, end)
    if d == ZERO:
        return ZERO
    return Point(-d.y, d.x)


def canonical_perpendicular(start: Point, end: Point, from_code: str, to_code: str) -> Point:
    """
    Unit perpendicular of the start/end line, always measured from the
    building with the lower code (ignoring case) to the other one. A leg and
    its return trip therefore get the same perpendicular and their offsets
    land on opposite, parallel lines.
    """
    if from_code.lower() <= to_code.lower():
        return perpendicular(start, end)
    return perpendicular(end, start)


def edge_key(from_code: str, to_code: str) -> str:
    a, b = from_code.lower(), to_code.lower()
    return f"{a}->{b}" if a <= b else f"{b}->{a}"


@dataclass(frozen=True)
class BackgroundImage:
    href: str
    width: float
    height: float

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Background image dimensions must be positive")


@dataclass(frozen=True)
class Viewport:
    """Area of the surface the map occupies after letterboxing."""

    offset_x: float
    offset_y: float
    width: float
    height: float


def fit_image(width: float, height: float, background: Optional[BackgroundImage]) -> Viewport:
    if background is None:
        return Viewport(0.0, 0.0, width, height)
    scale = min(width / background.width, height / background.height)
    draw_w = background.width * scale
    draw_h = background.height * scale
    return Viewport((width - draw_w) / 2.0, (height - draw_h) / 2.0, draw_w, draw_h)


def to_surface(coord: Optional[CampusCoordinate], vp: Viewport) -> Point:
    if coord is None:
        return Point(vp.offset_x, vp.offset_y)
    return Point(vp.offset_x + coord.x * vp.width, vp.offset_y + coord.y * vp.height)


def darken(color: str, factor: float = 0.7) -> str:
    """'#rrggbb' with every channel scaled by factor."""
    value = color.lstrip("#")
    channels = [int(value[i : i + 2], 16) for i in (0, 2, 4)]
    return "#" + "".join(f"{int(c * factor):02x}" for c in channels)


@dataclass(frozen=True)
class Clear:
    width: float
    height: float


@dataclass(frozen=True)
class DrawImage:
    href: str
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class StrokeLine:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float


@dataclass(frozen=True)
class FillPolygon:
    points: Tuple[Tuple[float, float], ...]
    fill: str


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float
    fill: str
    stroke: str
    stroke_width: float


@dataclass(frozen=True)
class RoundRect:
    x: float
    y: float
    width: float
    height: float
    radius: float
    fill: str
    fill_opacity: float
    stroke: str


@dataclass(frozen=True)
class Label:
    x: float  # horizontal center
    y: float  # baseline
    text: str
    font_size: float
    fill: str
    bold: bool = True


DrawCommand = Union[Clear, DrawImage, StrokeLine, FillPolygon, Circle, RoundRect, Label]


@dataclass(frozen=True)
class RenderConfig:
    route_thickness: float = 3.5
    segment_offset: float = 8.0
    label_offset: float = 20.0
    palette: Tuple[str, ...] = (
        "#006400",  # dark green
        "#dc143c",  # crimson
        "#4169e1",  # royal blue
        "#ff8c00",  # dark orange
        "#9370db",  # medium purple
        "#008080",  # teal
        "#b8860b",  # dark goldenrod
    )
    tail_stroke_width: float = 1.5

    font_size: float = 13.0
    char_width: float = 0.62  # average bold glyph width, in font sizes
    line_height: float = 1.25
    label_padding: float = 4.0
    label_radius: float = 3.0
    label_fill: str = "#ffffff"
    label_fill_opacity: float = 0.85
    label_border: str = "#a9a9a9"
    label_text: str = "#000000"

    @property
    def head_length(self) -> float:
        return max(18.0, self.route_thickness * 4)

    @property
    def head_half_width(self) -> float:
        return max(8.0, self.route_thickness * 2.5)

    @property
    def tail_radius(self) -> float:
        return max(4.0, self.route_thickness * 0.9)


def arrow_head(start: Point, end: Point, color: str, cfg: RenderConfig) -> Optional[FillPolygon]:
    d = direction(start, end)
    if d == ZERO:
        return None
    base = Point(end.x - d.x * cfg.head_length, end.y - d.y * cfg.head_length)
    normal = Point(-d.y, d.x).scaled(cfg.head_half_width)
    left = base + normal
    right = base + normal.scaled(-1.0)
    return FillPolygon(((end.x, end.y), (left.x, left.y), (right.x, right.y)), color)


def arrow_tail(point: Point, color: str, cfg: RenderConfig) -> Circle:
    return Circle(point.x, point.y, cfg.tail_radius, color, darken(color), cfg.tail_stroke_width)


def callout(text: str, anchor: Point, width: float, height: float, cfg: RenderConfig) -> List[DrawCommand]:
    """
    Rounded box centered above the anchor. Kept on the surface: clamped left
    and right; moved below the anchor when it would leave the top; clamped to
    the bottom edge when it would leave the bottom.
    """
    text_w = len(text) * cfg.font_size * cfg.char_width
    text_h = cfg.font_size * cfg.line_height
    pad = cfg.label_padding
    rect_w = text_w + pad * 2
    rect_h = text_h + pad * 2

    x = anchor.x - text_w / 2 - pad
    y = anchor.y - text_h - pad * 2
    if x < 0:
        x = 0.0
    if x + rect_w > width:
        x = width - rect_w
    if y < 0:
        y = anchor.y + pad
    if y + rect_h > height:
        y = height - rect_h

    return [
        RoundRect(x, y, rect_w, rect_h, cfg.label_radius, cfg.label_fill, cfg.label_fill_opacity, cfg.label_border),
        Label(x + rect_w / 2, y + rect_h - pad, text, cfg.font_size, cfg.label_text),
    ]


def _segment_offsets(segments: Tuple[RouteSegment, ...], cfg: RenderConfig) -> List[float]:
    totals: Dict[str, int] = {}
    for seg in segments:
        key = edge_key(seg.from_building.code, seg.to_building.code)
        totals[key] = totals.get(key, 0) + 1

    seen: Dict[str, int] = {}
    out: List[float] = []
    for seg in segments:
        key = edge_key(seg.from_building.code, seg.to_building.code)
        index = seen.get(key, 0)
        seen[key] = index + 1
        total = totals[key]
        out.append((index - (total - 1) / 2.0) * cfg.segment_offset if total > 1 else 0.0)
    return out


def render_route(
    model: Optional[RouteVisualizationModel],
    width: float,
    height: float,
    background: Optional[BackgroundImage] = None,
    cfg: RenderConfig = RenderConfig(),
) -> List[DrawCommand]:
    if width <= 0 or height <= 0:
        return []

    commands: List[DrawCommand] = [Clear(width, height)]
    vp = fit_image(width, height, background)
    if background is not None:
        commands.append(DrawImage(background.href, vp.offset_x, vp.offset_y, vp.width, vp.height))

    if model is None or model.path is None or model.path.is_empty:
        return commands

    segments = model.path.segments
    offsets = _segment_offsets(segments, cfg)

    for i, seg in enumerate(segments):
        start = to_surface(seg.from_building.location, vp)
        end = to_surface(seg.to_building.location, vp)
        shift = canonical_perpendicular(start, end, seg.from_building.code, seg.to_building.code).scaled(offsets[i])
        a, b = start + shift, end + shift

        color = cfg.palette[i % len(cfg.palette)]
        commands.append(StrokeLine(a.x, a.y, b.x, b.y, color, cfg.route_thickness))
        if i > 0:
            commands.append(arrow_tail(a, color, cfg))
        head = arrow_head(a, b, color, cfg)
        if head is not None:
            commands.append(head)

    stops = model.path.stops
    first = to_surface(stops[0].location, vp)
    if segments:
        toward = to_surface(segments[0].to_building.location, vp)
        start_at = first + direction(toward, first).scaled(cfg.label_offset)
    else:
        start_at = first + Point(0.0, -cfg.label_offset)
    commands.extend(callout("START", start_at, width, height, cfg))

    last = to_surface(stops[-1].location, vp)
    if len(stops) > 1 and segments:
        away_from = to_surface(segments[-1].from_building.location, vp)
        end_at = last + direction(away_from, last).scaled(cfg.label_offset)
    else:
        end_at = last + Point(0.0, cfg.label_offset)
    commands.extend(callout("END", end_at, width, height, cfg))

    return commands
