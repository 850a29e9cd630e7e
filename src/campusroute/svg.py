from __future__ import annotations

from pathlib import Path
from typing import Iterable, List
from xml.sax.saxutils import escape, quoteattr

from .render import Circle, Clear, DrawCommand, DrawImage, FillPolygon, Label, RoundRect, StrokeLine


def _fmt(v: float) -> str:
    return f"{v:.2f}"


def command_to_svg(cmd: DrawCommand) -> str:
    if isinstance(cmd, Clear):
        return f'<rect x="0" y="0" width="{_fmt(cmd.width)}" height="{_fmt(cmd.height)}" fill="#ffffff"/>'
    if isinstance(cmd, DrawImage):
        return (f'<image href={quoteattr(cmd.href)} x="{_fmt(cmd.x)}" y="{_fmt(cmd.y)}"'
                f' width="{_fmt(cmd.width)}" height="{_fmt(cmd.height)}" preserveAspectRatio="none"/>')
    if isinstance(cmd, StrokeLine):
        return (f'<line x1="{_fmt(cmd.x1)}" y1="{_fmt(cmd.y1)}" x2="{_fmt(cmd.x2)}" y2="{_fmt(cmd.y2)}"'
                f' stroke="{cmd.color}" stroke-width="{cmd.width}" stroke-linecap="round"/>')
    if isinstance(cmd, FillPolygon):
        pts = " ".join(f"{_fmt(x)},{_fmt(y)}" for x, y in cmd.points)
        return f'<polygon points="{pts}" fill="{cmd.fill}" stroke="none"/>'
    if isinstance(cmd, Circle):
        return (f'<circle cx="{_fmt(cmd.cx)}" cy="{_fmt(cmd.cy)}" r="{_fmt(cmd.r)}" fill="{cmd.fill}"'
                f' stroke="{cmd.stroke}" stroke-width="{cmd.stroke_width}"/>')
    if isinstance(cmd, RoundRect):
        return (f'<rect x="{_fmt(cmd.x)}" y="{_fmt(cmd.y)}" width="{_fmt(cmd.width)}" height="{_fmt(cmd.height)}"'
                f' rx="{cmd.radius}" ry="{cmd.radius}" fill="{cmd.fill}" fill-opacity="{cmd.fill_opacity}"'
                f' stroke="{cmd.stroke}"/>')
    if isinstance(cmd, Label):
        weight = "bold" if cmd.bold else "normal"
        return (f'<text x="{_fmt(cmd.x)}" y="{_fmt(cmd.y)}" text-anchor="middle" font-family="Arial"'
                f' font-size="{cmd.font_size}" font-weight="{weight}" fill="{cmd.fill}">{escape(cmd.text)}</text>')
    raise ValueError(f"Unsupported draw command: {cmd!r}")


def to_svg(commands: Iterable[DrawCommand], width: float, height: float) -> str:
    lines: List[str] = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{_fmt(width)}" height="{_fmt(height)}"'
        f' viewBox="0 0 {_fmt(width)} {_fmt(height)}">',
    ]
    for cmd in commands:
        lines.append(command_to_svg(cmd))
    lines.append("</svg>")
    return "\n".join(lines) + "\n"


def write_svg(path: str | Path, commands: Iterable[DrawCommand], width: float, height: float) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(to_svg(commands, width, height), encoding="utf-8")
    return p
