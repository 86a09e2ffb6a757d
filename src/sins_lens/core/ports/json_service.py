from typing import Protocol

from sins_lens.core.document import TextDocument
from sins_lens.core.json_ast import JsonDocument
from sins_lens.core.schema_match import MatchingSchema
from sins_lens.models import CompletionList, Diagnostic, Hover


class JsonService(Protocol):
    def parse_document(self, document: TextDocument) -> JsonDocument: ...

    def get_matching_schemas(self, document: TextDocument, json_document: JsonDocument) -> list[MatchingSchema]: ...

    def do_validation(self, document: TextDocument, json_document: JsonDocument) -> list[Diagnostic]: ...

    def do_hover(self, document: TextDocument, json_document: JsonDocument, offset: int) -> Hover | None: ...

    def do_complete(
        self, document: TextDocument, json_document: JsonDocument, offset: int
    ) -> CompletionList | None: ...
