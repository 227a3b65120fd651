"""
Montagem de requests de ``documents.batchUpdate`` para anexar elementos.

Todos os elementos são inseridos no mesmo índice (início do segmento) em
ordem reversa. Assim cada request usa índices fixos e a ordem final do
documento é a mesma da lista original.

Os índices da Docs API são contados em unidades UTF-16.
"""

from typing import Dict, Any, List, Optional
import logging

from .elements import (
    DocumentElement, ParagraphElement, ListItemElement, TableElement,
    RuleElement, PageBreakElement, ImageElement, UnsupportedElement,
    TextRun, NORMAL_TEXT,
)

logger = logging.getLogger(__name__)

BODY_START_INDEX = 1
HEADER_FOOTER_START_INDEX = 0

ORDERED_BULLET_PRESET = 'NUMBERED_DECIMAL_ALPHA_ROMAN'
UNORDERED_BULLET_PRESET = 'BULLET_DISC_CIRCLE_SQUARE'

RULE_BORDER = {
    'color': {'color': {'rgbColor': {'red': 0.6, 'green': 0.6, 'blue': 0.6}}},
    'width': {'magnitude': 1, 'unit': 'PT'},
    'padding': {'magnitude': 1, 'unit': 'PT'},
    'dashStyle': 'SOLID',
}


def utf16_len(text: str) -> int:
    return len(text.encode('utf-16-le')) // 2


def _location(index: int, segment_id: Optional[str]) -> Dict[str, Any]:
    location = {'index': index}
    if segment_id:
        location['segmentId'] = segment_id
    return location


def _range(start: int, end: int, segment_id: Optional[str]) -> Dict[str, Any]:
    text_range = {'startIndex': start, 'endIndex': end}
    if segment_id:
        text_range['segmentId'] = segment_id
    return text_range


def group_elements(elements: List[DocumentElement]) -> List[List[DocumentElement]]:
    """
    Agrupa os elementos em blocos de inserção.

    Itens de lista consecutivos do mesmo tipo (ordenada ou não) formam um
    único bloco, que recebe um só ``createParagraphBullets``. Os demais
    elementos ficam em blocos de um elemento. Elementos não suportados são
    descartados aqui porque não geram requests.
    """
    blocks: List[List[DocumentElement]] = []
    for element in elements:
        if isinstance(element, UnsupportedElement):
            logger.debug(f"Sem request para elemento não suportado: {element.kind}")
            continue
        previous = blocks[-1][-1] if blocks else None
        if (isinstance(element, ListItemElement)
                and isinstance(previous, ListItemElement)
                and previous.ordered == element.ordered):
            blocks[-1].append(element)
        else:
            blocks.append([element])
    return blocks


def _inserts_table(element: Optional[DocumentElement]) -> bool:
    return (
        isinstance(element, TableElement)
        and bool(element.normalized_rows())
        and bool(element.column_count)
    )


def build_insert_requests(
    elements: List[DocumentElement],
    index: int,
    segment_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Requests que inserem ``elements`` em ``index`` preservando a ordem"""
    requests: List[Dict[str, Any]] = []
    blocks = group_elements(elements)
    for position in reversed(range(len(blocks))):
        block = blocks[position]
        following = blocks[position + 1][0] if position + 1 < len(blocks) else None
        # insertTable deixa um parágrafo vazio antes da tabela; o elemento anterior passa a ocupá-lo
        fill_paragraph = _inserts_table(following)
        if isinstance(block[0], ListItemElement):
            requests.extend(_list_requests(block, index, segment_id, fill_paragraph))
        else:
            requests.extend(element_requests(block[0], index, segment_id, fill_paragraph))
    return requests


def element_requests(
    element: DocumentElement,
    index: int,
    segment_id: Optional[str] = None,
    fill_paragraph: bool = False,
) -> List[Dict[str, Any]]:
    """
    Requests de um único elemento.

    Com ``fill_paragraph`` o elemento é escrito no parágrafo vazio que já
    existe em ``index`` em vez de inserir um '\\n' próprio.
    """
    if isinstance(element, ParagraphElement):
        return _paragraph_requests(element, index, segment_id, fill_paragraph)
    if isinstance(element, ListItemElement):
        return _list_requests([element], index, segment_id, fill_paragraph)
    if isinstance(element, TableElement):
        return _table_requests(element, index, segment_id)
    if isinstance(element, RuleElement):
        return _rule_requests(index, segment_id, fill_paragraph)
    if isinstance(element, PageBreakElement):
        return [{'insertPageBreak': {'location': _location(index, segment_id)}}]
    if isinstance(element, ImageElement):
        return _image_requests(element, index, segment_id, fill_paragraph)
    if isinstance(element, UnsupportedElement):
        logger.debug(f"Sem request para elemento não suportado: {element.kind}")
        return []
    raise TypeError(f"Unknown document element: {element!r}")


def _insert_text(text: str, index, segment_id, fill_paragraph) -> List[Dict[str, Any]]:
    if not fill_paragraph:
        text += '\n'
    if not text:
        return []
    return [{'insertText': {'location': _location(index, segment_id), 'text': text}}]


def _text_style_requests(
    runs: List[TextRun],
    start: int,
    segment_id: Optional[str],
) -> List[Dict[str, Any]]:
    """Zera o estilo herdado e aplica o estilo de cada run"""
    total = sum(utf16_len(run.text) for run in runs)
    if not total:
        return []

    requests = [{
        'updateTextStyle': {
            'range': _range(start, start + total, segment_id),
            'textStyle': {},
            'fields': '*',
        }
    }]

    offset = start
    for run in runs:
        length = utf16_len(run.text)
        if run.style and length:
            requests.append({
                'updateTextStyle': {
                    'range': _range(offset, offset + length, segment_id),
                    'textStyle': run.style,
                    'fields': ','.join(sorted(run.style.keys())),
                }
            })
        offset += length
    return requests


def _paragraph_requests(element: ParagraphElement, index, segment_id, fill_paragraph=False):
    text = element.text
    end = index + utf16_len(text) + 1

    paragraph_style = {'namedStyleType': element.named_style or NORMAL_TEXT}
    fields = ['namedStyleType']
    if element.alignment:
        paragraph_style['alignment'] = element.alignment
        fields.append('alignment')

    requests = _insert_text(text, index, segment_id, fill_paragraph)
    requests.extend([
        {
            'updateParagraphStyle': {
                'range': _range(index, end, segment_id),
                'paragraphStyle': paragraph_style,
                'fields': ','.join(fields),
            }
        },
        {'deleteParagraphBullets': {'range': _range(index, end, segment_id)}},
    ])
    requests.extend(_text_style_requests(element.runs, index, segment_id))
    return requests


def _list_requests(items: List[ListItemElement], index, segment_id, fill_paragraph=False):
    """
    Bloco de itens consecutivos da mesma lista.

    Os itens são inseridos em ordem reversa e os bullets são criados uma
    única vez sobre o bloco inteiro, assim a numeração segue de um item
    para o outro. Bullets herdados do parágrafo seguinte são removidos antes.
    """
    requests: List[Dict[str, Any]] = []
    end = index
    last = len(items) - 1
    for position in reversed(range(len(items))):
        item = items[position]
        # Tabs no início definem o nível de aninhamento e são removidos pelo createParagraphBullets
        tabs = '\t' * max(item.nesting_level, 0)
        text = tabs + item.text
        length = utf16_len(text) + 1

        requests.extend(_insert_text(text, index, segment_id, fill_paragraph and position == last))
        requests.append({
            'updateParagraphStyle': {
                'range': _range(index, index + length, segment_id),
                'paragraphStyle': {'namedStyleType': item.named_style or NORMAL_TEXT},
                'fields': 'namedStyleType',
            }
        })
        requests.extend(_text_style_requests(item.runs, index + len(tabs), segment_id))
        end += length

    requests.extend([
        {'deleteParagraphBullets': {'range': _range(index, end, segment_id)}},
        {
            'createParagraphBullets': {
                'range': _range(index, end, segment_id),
                'bulletPreset': ORDERED_BULLET_PRESET if items[0].ordered else UNORDERED_BULLET_PRESET,
            }
        },
    ])
    return requests


def table_cell_index(table_index: int, row: int, column: int, columns: int) -> int:
    """
    Índice do parágrafo de uma célula em uma tabela recém inserida.

    ``insertTable`` insere uma quebra de linha antes da tabela, então a
    tabela começa em ``table_index + 1``; cada linha ocupa 1 + 2 * colunas.
    """
    table_start = table_index + 1
    return table_start + 3 + row * (1 + 2 * columns) + 2 * column


def _table_requests(element: TableElement, index, segment_id):
    rows = element.normalized_rows()
    columns = element.column_count
    if not rows or not columns:
        logger.info("Tabela vazia ignorada")
        return []

    requests = [{
        'insertTable': {
            'rows': len(rows),
            'columns': columns,
            'location': _location(index, segment_id),
        }
    }]

    # Última célula primeiro para não deslocar os índices das anteriores
    for row in reversed(range(len(rows))):
        for column in reversed(range(columns)):
            text = rows[row][column]
            if not text:
                continue
            requests.append({
                'insertText': {
                    'location': _location(table_cell_index(index, row, column, columns), segment_id),
                    'text': text,
                }
            })
    return requests


def _rule_requests(index, segment_id, fill_paragraph=False):
    requests = _insert_text('', index, segment_id, fill_paragraph)
    requests.extend([
        {
            'updateParagraphStyle': {
                'range': _range(index, index + 1, segment_id),
                'paragraphStyle': {'namedStyleType': NORMAL_TEXT, 'borderBottom': RULE_BORDER},
                'fields': 'namedStyleType,borderBottom',
            }
        },
        {'deleteParagraphBullets': {'range': _range(index, index + 1, segment_id)}},
    ])
    return requests


def _image_requests(element: ImageElement, index, segment_id, fill_paragraph=False):
    insert_image = {
        'uri': element.uri,
        'location': _location(index, segment_id),
    }
    if element.width_pt and element.height_pt:
        insert_image['objectSize'] = {
            'width': {'magnitude': element.width_pt, 'unit': 'PT'},
            'height': {'magnitude': element.height_pt, 'unit': 'PT'},
        }

    requests = _insert_text('', index, segment_id, fill_paragraph)
    requests.append({'insertInlineImage': insert_image})
    return requests


def clear_requests(
    start: int,
    end: int,
    segment_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Remove o conteúdo de ``start`` até ``end``.

    ``end`` é o endIndex do último elemento do segmento; o último '\\n' não
    pode ser removido e o parágrafo restante volta ao estilo normal.
    """
    requests = []
    if end - 1 > start:
        requests.append({'deleteContentRange': {'range': _range(start, end - 1, segment_id)}})
    requests.extend([
        {
            'updateParagraphStyle': {
                'range': _range(start, start + 1, segment_id),
                'paragraphStyle': {'namedStyleType': NORMAL_TEXT},
                'fields': 'namedStyleType',
            }
        },
        {'deleteParagraphBullets': {'range': _range(start, start + 1, segment_id)}},
    ])
    return requests
