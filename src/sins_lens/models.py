from enum import IntEnum

from pydantic import BaseModel


class Position(BaseModel):
    line: int
    character: int


class Range(BaseModel):
    start: Position
    end: Position

    @classmethod
    def empty(cls) -> "Range":
        return cls(start=Position(line=0, character=0), end=Position(line=0, character=0))


class DiagnosticSeverity(IntEnum):
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


class Diagnostic(BaseModel):
    range: Range
    severity: DiagnosticSeverity
    message: str
    source: str


class CompletionItemKind(IntEnum):
    VALUE = 12
    VARIABLE = 6
    ENUM = 13
    FILE = 17


class TextEdit(BaseModel):
    range: Range
    new_text: str


class CompletionItem(BaseModel):
    label: str
    kind: CompletionItemKind
    detail: str | None = None
    text_edit: TextEdit | None = None


class CompletionList(BaseModel):
    is_incomplete: bool = False
    items: list[CompletionItem]


class Location(BaseModel):
    uri: str
    range: Range


class MarkupContent(BaseModel):
    kind: str = "markdown"
    value: str


class Hover(BaseModel):
    contents: MarkupContent

    @classmethod
    def markdown(cls, lines: list[str], separator: str = "\n") -> "Hover":
        return cls(contents=MarkupContent(value=separator.join(lines)))
