"""Split TypeQL seed scripts into individually executable statements.

Seed scripts mix two kinds of write statements:

    insert $p isa person, has name "Alice";

    match
      $a isa person, has name "Alice";
      $b isa person, has name "Bob";
    insert
      (friend: $a, friend: $b) isa friendship;

A standalone ``insert`` starts a new statement only when no match-insert
block is open and the keyword is followed by a space on the same line.
A bare ``insert`` line outside a match block therefore continues whatever
statement is pending. Seed scripts are hand-authored against this rule;
keep it as is.
"""

COMMENT_MARKER = "#"
WRITE_KEYWORD = "insert"
MATCH_KEYWORD = "match"
TERMINATOR = ";"


def _flush(lines: list[str], statements: list[str]) -> None:
    """Append the pending lines as one statement unless empty or a comment."""
    if not lines:
        return
    statement = "\n".join(lines).strip()
    if statement and not statement.startswith(COMMENT_MARKER):
        statements.append(statement)


def split_statements(script: str) -> list[str]:
    """
    Split a TypeQL script into its top-level write statements.

    Comment lines are dropped while no statement is pending. Once a
    statement has started, comment lines are kept verbatim as part of it
    until the next statement begins.

    Args:
        script: Raw seed script content

    Returns:
        Statements in input order
    """
    statements: list[str] = []
    current: list[str] = []
    in_match_insert = False

    for line in script.split("\n"):
        trimmed = line.strip()

        # Comments between statements
        if trimmed.startswith(COMMENT_MARKER) and not current:
            continue

        if trimmed.startswith(WRITE_KEYWORD + " ") and not in_match_insert:
            _flush(current, statements)
            current = []
        elif trimmed.startswith(MATCH_KEYWORD):
            _flush(current, statements)
            current = []
            in_match_insert = True

        if trimmed:
            current.append(line)

        # A match-insert ends on the first terminated line once its insert
        # clause has been seen
        if in_match_insert and trimmed.endswith(TERMINATOR):
            if WRITE_KEYWORD in "\n".join(current):
                in_match_insert = False

    _flush(current, statements)
    return statements


def strip_comment_lines(text: str) -> str:
    """Remove lines that are comments once trimmed."""
    return "\n".join(
        line for line in text.split("\n")
        if not line.strip().startswith(COMMENT_MARKER)
    )
