from __future__ import annotations

from collections.abc import Iterable
import logging

from lxml import etree

from cat_core.exchange.errors import ExchangeFormatError
from cat_core.exchange.xmltext import xml_safe_text
from cat_core.segments.models import Segment, SegmentStatus

logger = logging.getLogger(__name__)

XLIFF_NAMESPACE = "urn:oasis:names:tc:xliff:document:1.2"
_NSMAP = {None: XLIFF_NAMESPACE}

_STATE_BY_STATUS = {
    SegmentStatus.CONFIRMED: "final",
    SegmentStatus.TRANSLATED: "translated",
    SegmentStatus.NEW: "new",
}


def _q(tag: str) -> str:
    return f"{{{XLIFF_NAMESPACE}}}{tag}"


def generate_xliff(
    segments: Iterable[Segment],
    source_lang: str,
    target_lang: str,
    file_name: str,
) -> str:
    root = etree.Element(_q("xliff"), version="1.2", nsmap=_NSMAP)
    file_element = etree.SubElement(
        root,
        _q("file"),
        {
            "source-language": source_lang,
            "target-language": target_lang,
            "datatype": "plaintext",
            "original": xml_safe_text(file_name),
        },
    )
    body = etree.SubElement(file_element, _q("body"))
    for segment in segments:
        unit = etree.SubElement(body, _q("trans-unit"), id=str(segment.id + 1))
        if segment.status == SegmentStatus.CONFIRMED:
            unit.set("approved", "yes")
        source = etree.SubElement(unit, _q("source"))
        source.text = xml_safe_text(segment.source)
        target = etree.SubElement(unit, _q("target"), state=_STATE_BY_STATUS[segment.status])
        target.text = xml_safe_text(segment.target)

    payload = etree.tostring(root, xml_declaration=True, encoding="UTF-8", pretty_print=True)
    return payload.decode("utf-8")


def _child(element: etree._Element, name: str) -> etree._Element | None:
    for child in element.iter():
        if child is element or not isinstance(child.tag, str):
            continue
        if etree.QName(child).localname == name:
            return child
    return None


def status_from_xliff(*, target: str, state: str, approved: bool) -> SegmentStatus:
    if approved or state == "final":
        return SegmentStatus.CONFIRMED
    if target and state in ("translated", ""):
        return SegmentStatus.TRANSLATED
    return SegmentStatus.NEW


def parse_xliff(content: str | bytes) -> list[Segment]:
    """Rebuild segments from a resumed project.

    Match rates are left at 0; callers recompute them against the current TM.
    """
    raw = content.encode("utf-8") if isinstance(content, str) else content
    try:
        root = etree.fromstring(raw, parser=etree.XMLParser(resolve_entities=False))
    except etree.XMLSyntaxError as exc:
        raise ExchangeFormatError(f"Invalid XLIFF document: {exc}") from exc

    segments: list[Segment] = []
    for unit in root.iter("{*}trans-unit"):
        source_element = _child(unit, "source")
        target_element = _child(unit, "target")
        source = "".join(source_element.itertext()) if source_element is not None else ""
        target = "".join(target_element.itertext()) if target_element is not None else ""
        state = target_element.get("state", "") if target_element is not None else ""
        approved = unit.get("approved") == "yes"

        if not source:
            continue
        segments.append(
            Segment(
                id=len(segments),
                source=source,
                target=target,
                status=status_from_xliff(target=target, state=state, approved=approved),
                match_rate=0,
            )
        )

    logger.debug("Parsed %d XLIFF translation units", len(segments))
    return segments
