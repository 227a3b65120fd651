"""
Modelo dos elementos de documento copiados entre Google Docs.

Cada elemento estrutural retornado pela Docs API (``documents.get``) é
convertido para uma variante fechada:

    ParagraphElement | TableElement | ListItemElement |
    RuleElement | PageBreakElement | ImageElement | UnsupportedElement

``UnsupportedElement`` torna explícito o caso "tipo não suportado", que
é descartado na hora de copiar.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional, Union
import logging

logger = logging.getLogger(__name__)

NORMAL_TEXT = 'NORMAL_TEXT'

# Glyphs que indicam lista sem numeração
UNORDERED_GLYPH_TYPES = {None, '', 'GLYPH_TYPE_UNSPECIFIED', 'NONE'}


class SegmentType(Enum):
    """Segmentos de um documento que recebem conteúdo"""
    BODY = 'body'
    HEADER = 'header'
    FOOTER = 'footer'


@dataclass
class TextRun:
    text: str
    style: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ParagraphElement:
    runs: List[TextRun] = field(default_factory=list)
    named_style: str = NORMAL_TEXT
    alignment: Optional[str] = None

    @property
    def text(self) -> str:
        return ''.join(run.text for run in self.runs)


@dataclass
class ListItemElement:
    runs: List[TextRun] = field(default_factory=list)
    nesting_level: int = 0
    ordered: bool = False
    named_style: str = NORMAL_TEXT

    @property
    def text(self) -> str:
        return ''.join(run.text for run in self.runs)


@dataclass
class TableElement:
    rows: List[List[str]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.rows), default=0)

    def normalized_rows(self) -> List[List[str]]:
        """Linhas completadas com células vazias até formar um retângulo"""
        columns = self.column_count
        return [row + [''] * (columns - len(row)) for row in self.rows]


@dataclass
class RuleElement:
    pass


@dataclass
class PageBreakElement:
    pass


@dataclass
class ImageElement:
    uri: str
    width_pt: Optional[float] = None
    height_pt: Optional[float] = None


@dataclass
class UnsupportedElement:
    kind: str


DocumentElement = Union[
    ParagraphElement,
    TableElement,
    ListItemElement,
    RuleElement,
    PageBreakElement,
    ImageElement,
    UnsupportedElement,
]

# Tipos aceitos em cada segmento. Quebra de página não é válida em header/footer.
SEGMENT_ELEMENT_TYPES = {
    SegmentType.BODY: (
        ParagraphElement, TableElement, ListItemElement,
        RuleElement, PageBreakElement, ImageElement,
    ),
    SegmentType.HEADER: (
        ParagraphElement, TableElement, ListItemElement,
        RuleElement, ImageElement,
    ),
    SegmentType.FOOTER: (
        ParagraphElement, TableElement, ListItemElement,
        RuleElement, ImageElement,
    ),
}


def is_supported(element: DocumentElement, segment: SegmentType = SegmentType.BODY) -> bool:
    return isinstance(element, SEGMENT_ELEMENT_TYPES[segment])


def supported_elements(
    elements: List[DocumentElement],
    segment: SegmentType = SegmentType.BODY,
) -> List[DocumentElement]:
    """
    Filtra os elementos que podem ser copiados para o segmento.

    A ordem é preservada; elementos não suportados são descartados e
    registrados no log.
    """
    kept = []
    for element in elements:
        if is_supported(element, segment):
            kept.append(element)
        else:
            kind = element.kind if isinstance(element, UnsupportedElement) else type(element).__name__
            logger.info(f"Ignorando elemento não suportado em {segment.value}: {kind}")
    return kept


@dataclass
class Segment:
    segment_id: Optional[str]
    elements: List[DocumentElement] = field(default_factory=list)


@dataclass
class Document:
    document_id: str
    title: str = ''
    body: List[DocumentElement] = field(default_factory=list)
    header: Optional[Segment] = None
    footer: Optional[Segment] = None

    def segment(self, segment_type: SegmentType) -> Optional[Segment]:
        if segment_type == SegmentType.HEADER:
            return self.header
        if segment_type == SegmentType.FOOTER:
            return self.footer
        return Segment(segment_id=None, elements=self.body)


# =============================================================================
# PARSER - JSON da Docs API -> elementos
# =============================================================================

def parse_document(data: Dict[str, Any]) -> Document:
    """Converte a resposta de ``documents().get()`` em um Document"""
    inline_objects = data.get('inlineObjects', {})
    lists = data.get('lists', {})
    document_style = data.get('documentStyle', {})

    body = parse_content(data.get('body', {}).get('content', []), inline_objects, lists)

    header = None
    header_id = document_style.get('defaultHeaderId')
    if header_id and header_id in data.get('headers', {}):
        header = Segment(
            segment_id=header_id,
            elements=parse_content(data['headers'][header_id].get('content', []), inline_objects, lists),
        )

    footer = None
    footer_id = document_style.get('defaultFooterId')
    if footer_id and footer_id in data.get('footers', {}):
        footer = Segment(
            segment_id=footer_id,
            elements=parse_content(data['footers'][footer_id].get('content', []), inline_objects, lists),
        )

    return Document(
        document_id=data.get('documentId', ''),
        title=data.get('title', ''),
        body=body,
        header=header,
        footer=footer,
    )


def parse_content(
    content: List[Dict[str, Any]],
    inline_objects: Dict[str, Any] = None,
    lists: Dict[str, Any] = None,
) -> List[DocumentElement]:
    """Converte uma lista de StructuralElement em elementos, na mesma ordem"""
    inline_objects = inline_objects or {}
    lists = lists or {}
    elements: List[DocumentElement] = []

    for structural in content:
        if 'sectionBreak' in structural:
            continue
        if 'paragraph' in structural:
            elements.extend(_parse_paragraph(structural['paragraph'], inline_objects, lists))
        elif 'table' in structural:
            elements.append(_parse_table(structural['table']))
        else:
            kind = next((key for key in structural if key not in ('startIndex', 'endIndex')), 'unknown')
            elements.append(UnsupportedElement(kind=kind))

    return elements


def _parse_paragraph(paragraph, inline_objects, lists) -> List[DocumentElement]:
    children = paragraph.get('elements', [])

    if any('pageBreak' in child for child in children):
        return [PageBreakElement()]
    if any('horizontalRule' in child for child in children):
        return [RuleElement()]

    runs = []
    images = []
    for child in children:
        if 'textRun' in child:
            text_run = child['textRun']
            runs.append(TextRun(text=text_run.get('content', ''), style=text_run.get('textStyle', {})))
        elif 'inlineObjectElement' in child:
            image = _parse_image(child['inlineObjectElement'].get('inlineObjectId'), inline_objects)
            if image:
                images.append(image)

    runs = _strip_paragraph_end(runs)
    text = ''.join(run.text for run in runs)

    if images and not text.strip():
        return images

    style = paragraph.get('paragraphStyle', {})
    named_style = style.get('namedStyleType', NORMAL_TEXT)

    bullet = paragraph.get('bullet')
    if bullet:
        nesting_level = bullet.get('nestingLevel', 0)
        return [ListItemElement(
            runs=runs,
            nesting_level=nesting_level,
            ordered=_is_ordered_list(lists.get(bullet.get('listId'), {}), nesting_level),
            named_style=named_style,
        )]

    return [ParagraphElement(runs=runs, named_style=named_style, alignment=style.get('alignment'))]


def _strip_paragraph_end(runs: List[TextRun]) -> List[TextRun]:
    """Remove o '\\n' que encerra todo parágrafo na Docs API"""
    if runs and runs[-1].text.endswith('\n'):
        last = runs[-1]
        trimmed = last.text[:-1]
        runs = runs[:-1]
        if trimmed:
            runs.append(TextRun(text=trimmed, style=last.style))
    return [run for run in runs if run.text]


def _is_ordered_list(list_data, nesting_level) -> bool:
    levels = list_data.get('listProperties', {}).get('nestingLevels', [])
    if nesting_level >= len(levels):
        return False
    return levels[nesting_level].get('glyphType') not in UNORDERED_GLYPH_TYPES


def _parse_image(inline_object_id, inline_objects) -> Optional[ImageElement]:
    inline_object = inline_objects.get(inline_object_id)
    if not inline_object:
        return None

    embedded = inline_object.get('inlineObjectProperties', {}).get('embeddedObject', {})
    image_properties = embedded.get('imageProperties', {})
    uri = image_properties.get('sourceUri') or image_properties.get('contentUri')
    if not uri:
        return None

    size = embedded.get('size', {})
    return ImageElement(
        uri=uri,
        width_pt=size.get('width', {}).get('magnitude'),
        height_pt=size.get('height', {}).get('magnitude'),
    )


def _parse_table(table) -> TableElement:
    rows = []
    for row in table.get('tableRows', []):
        cells = []
        for cell in row.get('tableCells', []):
            texts = []
            for structural in cell.get('content', []):
                for child in structural.get('paragraph', {}).get('elements', []):
                    texts.append(child.get('textRun', {}).get('content', ''))
            cells.append(''.join(texts).rstrip('\n'))
        rows.append(cells)
    return TableElement(rows=rows)
