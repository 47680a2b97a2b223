"""Package version comparison and highlighting of version differences."""

from __future__ import annotations

from typing import Optional, Tuple

_RED = "\x1b[31m"
_GREEN = "\x1b[32m"
_RESET = "\x1b[0m"

_DIGITS = "0123456789"


def _red(text: str) -> str:
    return f"{_RED}{text}{_RESET}"


def _green(text: str) -> str:
    return f"{_GREEN}{text}{_RESET}"


def _isdigit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _isalpha(ch: str) -> bool:
    return "a" <= ch <= "z" or "A" <= ch <= "Z"


def _isalnum(ch: str) -> bool:
    return _isdigit(ch) or _isalpha(ch)


def _parse_evr(evr: str) -> Tuple[str, str, Optional[str]]:
    """Split ``[epoch:]version[-release]`` into its three parts."""
    head_len = len(evr) - len(evr.lstrip(_DIGITS))
    head, rest = evr[:head_len], evr[head_len:]

    release: Optional[str] = None
    dash = rest.rfind("-")
    if dash >= 0:
        release = rest[dash + 1 :]
        rest = rest[:dash]

    if rest.startswith(":"):
        return head or "0", rest[1:], release
    return "0", head + rest, release


def _rpmvercmp(a: str, b: str) -> int:
    if a == b:
        return 0

    i = j = 0
    len_a, len_b = len(a), len(b)
    while i < len_a and j < len_b:
        start_a, start_b = i, j
        while i < len_a and not _isalnum(a[i]):
            i += 1
        while j < len_b and not _isalnum(b[j]):
            j += 1
        if i >= len_a or j >= len_b:
            break

        sep_a, sep_b = i - start_a, j - start_b
        if sep_a != sep_b:
            return -1 if sep_a < sep_b else 1

        start_a, start_b = i, j
        is_num = _isdigit(a[i])
        segment_char = _isdigit if is_num else _isalpha
        while i < len_a and segment_char(a[i]):
            i += 1
        while j < len_b and segment_char(b[j]):
            j += 1

        seg_a, seg_b = a[start_a:i], b[start_b:j]
        if not seg_b:
            # numeric segments are newer than alphabetic ones
            return 1 if is_num else -1

        if is_num:
            seg_a = seg_a.lstrip("0")
            seg_b = seg_b.lstrip("0")
            if len(seg_a) != len(seg_b):
                return 1 if len(seg_a) > len(seg_b) else -1

        if seg_a != seg_b:
            return -1 if seg_a < seg_b else 1

    a_done = i >= len_a
    b_done = j >= len_b
    if a_done and b_done:
        return 0
    if (a_done and not _isalpha(b[j])) or (not a_done and _isalpha(a[i])):
        return -1
    return 1


def vercmp(a: str, b: str) -> int:
    """Compare two package versions: negative, zero or positive like ``a - b``."""
    if a == b:
        return 0

    epoch_a, version_a, release_a = _parse_evr(a)
    epoch_b, version_b, release_b = _parse_evr(b)

    result = _rpmvercmp(epoch_a, epoch_b)
    if result == 0:
        result = _rpmvercmp(version_a, version_b)
        if result == 0 and release_a is not None and release_b is not None:
            result = _rpmvercmp(release_a, release_b)
    return result


def _followed_by_word(text: str, index: int, *words: str) -> bool:
    nxt = index + 1
    return any(index < len(text) - len(word) and text[nxt : nxt + len(word)] == word for word in words)


def version_diff(old: str, new: str) -> Tuple[str, str]:
    """Return both versions with the differing tail coloured red (old) and green (new)."""
    if old == new:
        return old + _red(""), new + _green("")

    diff_position = 0
    for index, char in enumerate(old):
        special = not (char.isalpha() or char.isnumeric())
        if index >= len(new) or char != new[index]:
            if special:
                diff_position = index
            break

        at_end = index == len(old) - 1 or index == len(new) - 1
        if (
            special
            or (at_end and (len(old) != len(new) or old[index] == new[index]))
            or _followed_by_word(old, index, "rc", "pre", "alpha", "beta")
        ):
            diff_position = index + 1

    same = old[:diff_position]
    return same + _red(old[diff_position:]), same + _green(new[diff_position:])