from __future__ import annotations

from collections.abc import Iterable
import logging

from lxml import etree

from cat_core.exchange.errors import ExchangeFormatError
from cat_core.exchange.xmltext import xml_safe_text
from cat_core.tm.models import TMEntry

logger = logging.getLogger(__name__)

TMX_VERSION = "1.4"
CREATION_TOOL = "catkit"
_XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"


def generate_tmx(entries: Iterable[TMEntry], source_lang: str, target_lang: str) -> str:
    """Serialise source/target pairs as a TMX document. Context anchors are not written."""
    root = etree.Element("tmx", version=TMX_VERSION)
    etree.SubElement(
        root,
        "header",
        creationtool=CREATION_TOOL,
        srclang=source_lang,
        adminlang="en",
        datatype="plaintext",
        segtype="sentence",
        **{"o-tmf": CREATION_TOOL},
    )
    body = etree.SubElement(root, "body")
    for entry in entries:
        tu = etree.SubElement(body, "tu")
        for lang, value in ((source_lang, entry.source), (target_lang, entry.target)):
            tuv = etree.SubElement(tu, "tuv", {_XML_LANG: lang})
            seg = etree.SubElement(tuv, "seg")
            seg.text = xml_safe_text(value)

    payload = etree.tostring(root, xml_declaration=True, encoding="UTF-8", pretty_print=True)
    return payload.decode("utf-8")


def _local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def _seg_text(tuv: etree._Element) -> str:
    for child in tuv:
        if isinstance(child.tag, str) and _local_name(child) == "seg":
            return "".join(child.itertext())
    return ""


def parse_tmx(content: str | bytes) -> list[TMEntry]:
    """Read the first two variants of each translation unit as source and target.

    Units with an empty source or target are skipped.
    """
    raw = content.encode("utf-8") if isinstance(content, str) else content
    try:
        root = etree.fromstring(raw, parser=etree.XMLParser(resolve_entities=False))
    except etree.XMLSyntaxError as exc:
        raise ExchangeFormatError(f"Invalid TMX document: {exc}") from exc

    imported: list[TMEntry] = []
    for tu in root.iter("{*}tu"):
        variants = [child for child in tu if isinstance(child.tag, str) and _local_name(child) == "tuv"]
        if len(variants) < 2:
            continue
        source = _seg_text(variants[0])
        target = _seg_text(variants[1])
        if source and target:
            imported.append(TMEntry(source=source, target=target))

    logger.debug("Parsed %d TMX translation units", len(imported))
    return imported
