"""Comment/string classification for JS-family source text.

A lightweight left-to-right re-lexer, not a parser. Classification of an
offset depends only on the text before it.
"""

QUOTE_CHARS = frozenset({"'", '"', "`"})


def is_in_comment(content: str, index: int) -> bool:
    """Return True if ``index`` falls inside a ``//`` or ``/* */`` comment.

    Text inside string literals is skipped when looking for comment
    delimiters, so ``"// not a comment"`` does not comment out the code
    after it. A string literal itself is never "in comment".

    ``'`` and ``"`` strings end at a newline; backtick strings may span
    lines and are opaque, including any ``${...}`` interpolation. A quote
    preceded by an unescaped backslash never opens a string.

    Cost is O(index); call it once per candidate match.
    """
    index = min(index, len(content))
    in_block = False
    quote = None
    i = 0

    while i < index:
        ch = content[i]

        if in_block:
            if content.startswith("*/", i):
                in_block = False
                i += 2
            else:
                i += 1
            continue

        if quote is not None:
            if ch == "\\":
                i += 2
                continue
            if ch == quote or (ch == "\n" and quote != "`"):
                quote = None
            i += 1
            continue

        # an escaped quote outside a string does not open one
        if ch == "\\":
            i += 2
            continue

        if ch in QUOTE_CHARS:
            quote = ch
            i += 1
            continue

        if content.startswith("/*", i):
            in_block = True
            i += 2
            continue

        if content.startswith("//", i):
            newline = content.find("\n", i, index)
            if newline == -1:
                return True
            i = newline + 1
            continue

        i += 1

    return in_block
