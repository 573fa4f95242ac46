"""Template-list discovery for WGSL.

WGSL cannot tell `a < b` from `vec2<f32>` with a context-free lexer. The
W3C language definition resolves this with a pass over the token stream
that decides which `<` / `>` pairs delimit template lists. This post-lexer
implements that pass and retypes the delimiters so the grammar can stay unambiguous.
"""

from __future__ import annotations
from collections import deque
from typing import Iterator

from lark import Token
from lark.lark import PostLex

# Tokens after which a `<` may open a template list.
_TEMPLATE_OWNERS = frozenset({"IDENT", "VAR"})

_CLOSING_TYPES = frozenset({"GT", "SHIFT", "RELATIONAL_OP", "COMPOUND_ASSIGN"})

_COMMENT_TYPES = frozenset({"LINE_COMMENT", "BLOCK_COMMENT", "WS"})

# Terminal type for what is left of a split `>>`, `>=` or `>>=`.
_REMAINDER_TYPES = {
    ">": "GT",
    "=": "EQUAL",
    ">=": "RELATIONAL_OP",
}

_EXPRESSION_BREAKERS = frozenset({";", "{", "}", ":", "="})


class TemplateListPostLex(PostLex):
    always_accept = ()

    def process(self, stream: Iterator[Token]) -> Iterator[Token]:
        return iter(discover_template_lists(list(stream)))


def discover_template_lists(tokens: list[Token]) -> list[Token]:
    out: list[Token] = []
    # (index into out of the candidate `<`, bracket depth when it was seen)
    pending: list[tuple[int, int]] = []
    depth = 0
    prev: Token | None = None
    queue = deque(tokens)

    while queue:
        tok = queue.popleft()
        if tok.type in _COMMENT_TYPES:
            out.append(tok)
            continue

        value = str(tok)
        if tok.type == "LT" and prev is not None and prev.type in _TEMPLATE_OWNERS:
            pending.append((len(out), depth))
        elif (
            tok.type in _CLOSING_TYPES
            and value.startswith(">")
            and pending
            and pending[-1][1] == depth
        ):
            start_idx, _ = pending.pop()
            out[start_idx] = Token.new_borrow_pos("TEMPLATE_START", "<", out[start_idx])
            end, rest = _split_closing(tok)
            out.append(end)
            prev = end
            if rest is not None:
                queue.appendleft(rest)
            continue
        elif value in ("(", "["):
            depth += 1
        elif value in (")", "]"):
            while pending and pending[-1][1] >= depth:
                pending.pop()
            depth = max(0, depth - 1)
        elif value in _EXPRESSION_BREAKERS or tok.type == "COMPOUND_ASSIGN":
            pending.clear()
            depth = 0
        elif value in ("&&", "||"):
            while pending and pending[-1][1] == depth:
                pending.pop()

        out.append(tok)
        prev = tok

    return out


def _split_closing(tok: Token) -> tuple[Token, Token | None]:
    """Split a token starting with `>` into TEMPLATE_END and the remainder."""
    end = Token(
        "TEMPLATE_END", ">",
        start_pos=tok.start_pos, line=tok.line, column=tok.column,
        end_line=tok.line, end_column=tok.column + 1, end_pos=tok.start_pos + 1,
    )
    rest_value = str(tok)[1:]
    if not rest_value:
        return end, None
    rest = Token(
        _REMAINDER_TYPES[rest_value], rest_value,
        start_pos=tok.start_pos + 1, line=tok.line, column=tok.column + 1,
        end_line=tok.end_line, end_column=tok.end_column, end_pos=tok.end_pos,
    )
    return end, rest
