import logging

from sins_lens.core.document import TextDocument
from sins_lens.core.json_ast import JsonDocument, JsonNode, enclosing_property, is_key_node, is_within
from sins_lens.core.pointers import PointerType
from sins_lens.core.ports.json_service import JsonService

logger = logging.getLogger(__name__)


def resolve_context(
    service: JsonService,
    document: TextDocument,
    json_document: JsonDocument,
    node: JsonNode | None,
) -> PointerType:
    """Return the pointer type governing ``node``, or ``PointerType.NONE``.

    Keys never carry pointer semantics. The first matching schema covering the node
    whose ``properties`` entry for the enclosing key carries a marker wins; failing
    that, the first marked ``patternProperties`` entry of that schema.
    """
    if node is None or is_key_node(node):
        return PointerType.NONE
    prop = enclosing_property(node)
    if prop is None or prop.key is None:
        return PointerType.NONE

    for match in service.get_matching_schemas(document, json_document):
        if not is_within(node.offset, match.node):
            continue
        candidate = match.fragment.properties.get(prop.key)
        if candidate is not None and candidate.pointer is not PointerType.NONE:
            return candidate.pointer
        for _, pattern_fragment in match.fragment.pattern_properties:
            if pattern_fragment.pointer is not PointerType.NONE:
                return pattern_fragment.pointer

    logger.debug("No pointer for key %r in %s", prop.key, document.uri)
    return PointerType.NONE
