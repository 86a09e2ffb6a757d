import re
from collections.abc import Iterable
from dataclasses import dataclass

from sins_lens.core.document import TextDocument
from sins_lens.core.json_ast import JsonNode, is_value_node
from sins_lens.core.pointers import PointerType
from sins_lens.index import IndexSet
from sins_lens.models import CompletionItem, CompletionItemKind, CompletionList, Range, TextEdit

# Upper bound on suggestions per response.
MAX_SUGGESTIONS = 1000

ICON_TOKEN = re.compile(r"{icon:(\w*)$")


@dataclass(frozen=True)
class CompletionStyle:
    kind: CompletionItemKind
    detail: str | None = None


DEFAULT_STYLE = CompletionStyle(CompletionItemKind.ENUM)

STYLES: dict[PointerType, CompletionStyle] = {
    PointerType.LOCALIZED_TEXT: CompletionStyle(CompletionItemKind.VARIABLE),
    PointerType.BRUSH: CompletionStyle(CompletionItemKind.FILE, ".png"),
    PointerType.UNIT_SKIN: CompletionStyle(CompletionItemKind.ENUM),
    PointerType.UNIT_ITEM: CompletionStyle(CompletionItemKind.ENUM),
    PointerType.UNIT: CompletionStyle(CompletionItemKind.ENUM, ".unit"),
    PointerType.MESH: CompletionStyle(CompletionItemKind.FILE, ".mesh"),
    PointerType.WEAPON_TAG: CompletionStyle(CompletionItemKind.VARIABLE),
    PointerType.WEAPON: CompletionStyle(CompletionItemKind.VARIABLE, ".weapon"),
    PointerType.MESH_MATERIAL: CompletionStyle(CompletionItemKind.VARIABLE, ".mesh_material"),
    PointerType.TTF_FONT: CompletionStyle(CompletionItemKind.FILE, ".ttf"),
}


def _matching(identifiers: Iterable[str], prefix: str) -> list[str]:
    # Labels are case-folded for every category. Localization keys and weapon tags
    # are matched exactly by the validator, so a mixed-case key completes to a
    # value that is then reported as missing.
    prefix = prefix.lower()
    return sorted({i.lower() for i in identifiers if i.lower().startswith(prefix)})


def _items(labels: list[str], edit_range: Range, style: CompletionStyle) -> CompletionList:
    return CompletionList(
        items=[
            CompletionItem(
                label=label,
                kind=style.kind,
                detail=style.detail,
                text_edit=TextEdit(range=edit_range, new_text=label),
            )
            for label in labels[:MAX_SUGGESTIONS]
        ]
    )


class CompletionProvider:
    def __init__(self, indices: IndexSet) -> None:
        self.indices = indices

    def complete(
        self,
        context: PointerType,
        current_entity: PointerType,
        document: TextDocument,
        node: JsonNode | None,
        offset: int,
    ) -> CompletionList | None:
        """Suggest identifiers of ``context`` for the string value under the cursor.

        Returns ``None`` when the category has nothing to offer so the caller can
        fall back to schema-driven completion.
        """
        if node is None or node.type != "string" or not is_value_node(node) or context is PointerType.NONE:
            return None
        start = node.offset + 1
        end = max(start, node.end - 1)
        edit_range = document.range_of(start, end - start)
        typed = document.get_text(start, max(start, min(offset, end)))

        if context is PointerType.LOCALIZED_TEXT and current_entity is PointerType.LOCALIZED_TEXT:
            match = ICON_TOKEN.search(typed)
            if match is None:
                return None
            token = match.group(1)
            token_range = Range(start=document.position_at(offset - len(token)), end=document.position_at(offset))
            return self.brushes(token, token_range)

        if context is PointerType.BRUSH:
            return self.brushes(typed, edit_range)

        identifiers = self.indices.lookup(context)
        if identifiers is None:
            return None
        return _items(_matching(identifiers, typed), edit_range, STYLES.get(context, DEFAULT_STYLE))

    def brushes(self, prefix: str, edit_range: Range) -> CompletionList:
        """Image-backed brushes only, offered without their extension."""
        images = [i for i in _matching(self.indices.existence.get(PointerType.BRUSH), prefix) if i.endswith(".png")]
        labels = sorted({image[: -len(".png")] for image in images})
        return _items(labels, edit_range, STYLES[PointerType.BRUSH])
