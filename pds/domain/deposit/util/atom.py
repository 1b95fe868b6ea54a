"""Reading SWORDv2 Atom statements."""

import logging

from lxml import etree

logger = logging.getLogger(__name__)

ATOM_NS = "http://www.w3.org/2005/Atom"
NSMAP = {"atom": ATOM_NS}

SWORD_STATE_SCHEME = "http://purl.org/net/sword/terms/state"

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


class StatementParseError(ValueError):
    """The statement is not well-formed XML."""


def parse_sword_state(document: bytes) -> str | None:
    """Return the SWORD state term declared by an Atom statement.

    The state is the ``term`` of the first feed-level ``atom:category`` whose
    scheme is the SWORD state scheme. Returns ``None`` when the document is
    not an Atom feed or declares no state.

    Raises:
        StatementParseError: If the document is not well-formed XML.
    """
    try:
        root = etree.fromstring(document, parser=_PARSER)
    except etree.XMLSyntaxError as e:
        raise StatementParseError(f"Invalid XML in SWORD statement: {e}") from e

    if root.tag != f"{{{ATOM_NS}}}feed":
        logger.warning("SWORD statement is not an Atom feed (root element %s)", root.tag)
        return None

    for category in root.findall("atom:category", namespaces=NSMAP):
        if category.get("scheme") == SWORD_STATE_SCHEME:
            term = category.get("term")
            if term:
                return term.strip()

    logger.warning("SWORD statement has no category with scheme %s", SWORD_STATE_SCHEME)
    return None
