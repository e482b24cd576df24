"""Output adapters: one finding, two presentations."""

from protogetter.analyzers.base import Diagnostic, Finding, SuggestedFix, TextEdit
from protogetter.schemas.analysis import InlineFix, Issue, Position

MSG_FORMAT = "avoid direct access to proto field {from_} use {to}"

_SHORT_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def go_quote(value: str) -> str:
    """Double-quoted string literal, as Go's %q verb prints it."""
    parts = ['"']
    for ch in value:
        code = ord(ch)
        if ch in _SHORT_ESCAPES:
            parts.append(_SHORT_ESCAPES[ch])
        elif ch.isprintable():
            # str.isprintable and unicode.IsPrint agree: letters, marks,
            # numbers, punctuation, symbols and the ASCII space
            parts.append(ch)
        elif code < 0x20 or code == 0x7F:
            parts.append(f"\\x{code:02x}")
        elif code < 0x10000:
            parts.append(f"\\u{code:04x}")
        else:
            parts.append(f"\\U{code:08x}")
    parts.append('"')
    return "".join(parts)


def format_message(finding: Finding) -> str:
    return MSG_FORMAT.format(from_=go_quote(finding.from_text), to=go_quote(finding.to_text))


class Report:
    """Accepted finding, ready to be rendered for either consumer."""

    def __init__(self, finding: Finding):
        self.finding = finding

    @property
    def message(self) -> str:
        return format_message(self.finding)

    def to_diagnostic(self) -> Diagnostic:
        finding = self.finding
        msg = self.message
        return Diagnostic(
            path=finding.path,
            pos=finding.span.start,
            end=finding.span.end,
            line=finding.line,
            column=finding.column,
            message=msg,
            suggested_fixes=(
                SuggestedFix(
                    message=msg,
                    text_edits=(
                        TextEdit(
                            path=finding.path,
                            pos=finding.span.start,
                            end=finding.span.end,
                            new_text=finding.to_text,
                        ),
                    ),
                ),
            ),
        )

    def to_issue(self) -> Issue:
        finding = self.finding
        return Issue(
            pos=Position(
                filename=finding.path,
                offset=finding.span.start,
                line=finding.line,
                column=finding.column,
            ),
            message=self.message,
            inline_fix=InlineFix(
                start_col=finding.column - 1,
                length=len(finding.from_text.encode("utf-8")),
                new_string=finding.to_text,
            ),
        )
