"""Whitespace trimming around directives."""

from __future__ import annotations

from tagweave.tokens import Side, TrimMode


def trim(text: str, mode: TrimMode, side: Side) -> str:
    """Trim whitespace from one side of a literal fragment.

    ``SINGLE`` removes at most one line terminator (``\\r\\n`` as a unit,
    otherwise a lone ``\\n`` or ``\\r``) and never touches spaces or tabs.
    ``MULTIPLE`` removes every whitespace character on that side.
    """
    if mode is TrimMode.NONE or not text:
        return text

    if mode is TrimMode.MULTIPLE:
        return text.lstrip() if side is Side.LEADING else text.rstrip()

    if side is Side.LEADING:
        if text.startswith("\r\n"):
            return text[2:]
        if text[0] in "\r\n":
            return text[1:]
        return text

    if text.endswith("\r\n"):
        return text[:-2]
    if text[-1] in "\r\n":
        return text[:-1]
    return text
