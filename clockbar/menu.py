"""
Menu descriptors and the xbar/SwiftBar plugin output format.

Each item becomes one line, ``text | key=value ...``; ``---`` separates groups.
"""
from __future__ import annotations
from typing import List, Optional, Sequence, Union
from pydantic import BaseModel, Field


class MenuItem(BaseModel):
    text: str
    color: Optional[str] = None
    dropdown: Optional[bool] = None
    shell: Optional[str] = None
    params: List[str] = Field(default_factory=list)
    terminal: Optional[bool] = None
    href: Optional[str] = None
    refresh: Optional[bool] = None
    disabled: Optional[bool] = None


class Separator(BaseModel):
    pass


SEPARATOR = Separator()

MenuEntry = Union[MenuItem, Separator]


def _quote(value: str) -> str:
    if any(c in value for c in ' "|='):
        return '"' + value.replace('"', '\\"') + '"'
    return value


def _flag(value: bool) -> str:
    return "true" if value else "false"


def format_item(item: MenuItem) -> str:
    # '|' starts the attribute section, so it cannot appear in the label
    text = item.text.replace("|", "¦").replace("\n", " ")
    attrs: List[str] = []
    if item.color:
        attrs.append(f"color={item.color}")
    if item.dropdown is not None:
        attrs.append(f"dropdown={_flag(item.dropdown)}")
    if item.shell:
        attrs.append(f"shell={_quote(item.shell)}")
        attrs.extend(f"param{i}={_quote(p)}" for i, p in enumerate(item.params, start=1))
        if item.terminal is not None:
            attrs.append(f"terminal={_flag(item.terminal)}")
    if item.href:
        attrs.append(f"href={_quote(item.href)}")
    if item.refresh is not None:
        attrs.append(f"refresh={_flag(item.refresh)}")
    if item.disabled:
        attrs.append("disabled=true")
    if not attrs:
        return text
    return f"{text} | {' '.join(attrs)}"


def format_menu(entries: Sequence[MenuEntry]) -> str:
    lines = ["---" if isinstance(e, Separator) else format_item(e) for e in entries]
    return "\n".join(lines) + "\n"
