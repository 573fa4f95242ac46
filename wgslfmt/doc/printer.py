"""Width-aware layout of document fragments into text.

This is the classic Wadler/Prettier greedy algorithm: a group is laid out
flat if its flat rendering, plus everything up to the next possible line
break after it, fits in the remaining width; otherwise its lines break.
"""

from __future__ import annotations

from wgslfmt.doc.builders import (
    Doc, Indent, Group, Line, IfBreak, BreakParent,
)

MODE_BREAK = "break"
MODE_FLAT = "flat"


def _propagate_breaks(doc: Doc, broken: set[int]) -> bool:
    """Record every group that contains a hard break; return True if doc does."""
    if isinstance(doc, str):
        return False
    if isinstance(doc, list):
        found = False
        for part in doc:
            if _propagate_breaks(part, broken):
                found = True
        return found
    if isinstance(doc, Line):
        return doc.hard
    if isinstance(doc, BreakParent):
        return True
    if isinstance(doc, Indent):
        return _propagate_breaks(doc.contents, broken)
    if isinstance(doc, IfBreak):
        return _propagate_breaks(doc.break_contents, broken)
    if isinstance(doc, Group):
        inner = _propagate_breaks(doc.contents, broken)
        if inner or doc.should_break:
            broken.add(id(doc))
        return inner or doc.should_break
    raise TypeError(f"Unknown document fragment: {type(doc).__name__}")


def _fits(next_cmd, rest: list, width: int, broken: set[int]) -> bool:
    rest_idx = len(rest)
    cmds = [next_cmd]
    while width >= 0:
        if not cmds:
            if rest_idx == 0:
                return True
            rest_idx -= 1
            cmds.append(rest[rest_idx])
            continue
        ind, mode, doc = cmds.pop()
        if isinstance(doc, str):
            width -= len(doc)
        elif isinstance(doc, list):
            for part in reversed(doc):
                cmds.append((ind, mode, part))
        elif isinstance(doc, Indent):
            cmds.append((ind, mode, doc.contents))
        elif isinstance(doc, Group):
            group_mode = MODE_BREAK if id(doc) in broken else mode
            cmds.append((ind, group_mode, doc.contents))
        elif isinstance(doc, IfBreak):
            cmds.append((ind, mode, doc.break_contents if mode == MODE_BREAK else doc.flat_contents))
        elif isinstance(doc, Line):
            if mode == MODE_BREAK or doc.hard:
                return True
            width -= len(doc.flat)
    return False


def resolve(doc: Doc, print_width: int = 80, tab_width: int = 2, use_tabs: bool = False) -> str:
    """Lay out a document into text no wider than print_width where possible."""
    broken: set[int] = set()
    _propagate_breaks(doc, broken)

    unit = "\t" if use_tabs else " " * tab_width
    out: list[str] = []
    pos = 0
    # Stack of (indent level, mode, doc); processed last-in first-out.
    cmds = [(0, MODE_BREAK, doc)]

    while cmds:
        ind, mode, d = cmds.pop()
        if isinstance(d, str):
            out.append(d)
            pos += len(d)
        elif isinstance(d, list):
            for part in reversed(d):
                cmds.append((ind, mode, part))
        elif isinstance(d, Indent):
            cmds.append((ind + 1, mode, d.contents))
        elif isinstance(d, Group):
            if mode == MODE_FLAT and id(d) not in broken:
                cmds.append((ind, MODE_FLAT, d.contents))
            elif id(d) in broken:
                cmds.append((ind, MODE_BREAK, d.contents))
            else:
                flat_cmd = (ind, MODE_FLAT, d.contents)
                if _fits(flat_cmd, cmds, print_width - pos, broken):
                    cmds.append(flat_cmd)
                else:
                    cmds.append((ind, MODE_BREAK, d.contents))
        elif isinstance(d, IfBreak):
            cmds.append((ind, mode, d.break_contents if mode == MODE_BREAK else d.flat_contents))
        elif isinstance(d, Line):
            if mode == MODE_FLAT and not d.hard:
                out.append(d.flat)
                pos += len(d.flat)
                continue
            if d.literal:
                out.append("\n")
                pos = 0
            else:
                _trim_trailing_whitespace(out)
                prefix = unit * ind
                out.append("\n" + prefix)
                pos = ind * tab_width
        elif isinstance(d, BreakParent):
            pass
        else:
            raise TypeError(f"Unknown document fragment: {type(d).__name__}")

    return "".join(out)


def _trim_trailing_whitespace(out: list[str]) -> None:
    while out:
        trimmed = out[-1].rstrip(" \t")
        if trimmed:
            out[-1] = trimmed
            return
        out.pop()
