"""
Split multi-statement SQL scripts (install/update dumps) for ``Database.import_sql``.
"""

import re

# One token per match: a quoted string or identifier, a comment, a statement
# terminator, or plain text. Unterminated quotes and comments run to the end.
_TOKEN = re.compile(
    r"""
    (?P<quoted>
        '(?:[^'\\]|\\.|'')*(?:'|\Z)
      | "(?:[^"\\]|\\.|"")*(?:"|\Z)
      | `(?:[^`]|``)*(?:`|\Z)
    )
    | (?P<comment>(?:--|\#)[^\n]*\n? | /\*.*?(?:\*/|\Z))
    | (?P<end>;)
    | (?P<text>[^'"`;\#/-]+ | .)
    """,
    re.VERBOSE | re.DOTALL,
)


def split_statements(sql: str) -> list[str]:
    """Split SQL into statements on ``;`` while respecting quoted strings and comments.

    Semicolons inside ``'...'``, ``"..."`` (backslash escapes and doubled
    quotes allowed) and backtick identifiers don't end a statement. ``--`` /
    ``#`` line comments and ``/* */`` block comments stay with the statement
    they precede; segments made only of comments and whitespace are dropped.
    """
    statements: list[str] = []
    tokens: list[str] = []
    has_code = False

    for match in _TOKEN.finditer(sql):
        kind, token = match.lastgroup, match.group()
        if kind == "end":
            if has_code:
                statements.append("".join(tokens).strip())
            tokens, has_code = [], False
            continue
        tokens.append(token)
        if kind == "quoted" or (kind == "text" and not token.isspace()):
            has_code = True

    if has_code:
        statements.append("".join(tokens).strip())
    return statements
