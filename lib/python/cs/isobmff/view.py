#!/usr/bin/env python3

''' Tabular views of a box tree for human consumption.
'''

from typing import Iterable, List

from cs.lex import cropped_repr, printt

from .boxes import Box, walk_boxes
from .errors import FieldDecodeError, ShortReadError
from .reader import BoxReader

def box_table(
    reader: BoxReader,
    boxes: Iterable[Box] = None,
    *,
    with_fields=False,
    indent='',
    subindent='  ',
) -> List[List[str]]:
  ''' Describe `boxes` (default `reader.boxes`) as a table.
      Return a list of `[title,description]` rows
      suitable for use with `cs.lex.printt()`.

      If `with_fields` is true,
      each box with a decoder is followed by a row per decoded field.
  '''
  if boxes is None:
    boxes = reader.boxes
  table = []
  for box, _ in walk_boxes(boxes):
    row_indent = indent + subindent * box.depth
    table.append([f'{row_indent}{box.box_type_s}', str(box)])
    if not with_fields:
      continue
    field_indent = row_indent + subindent
    try:
      record = reader.decode(box)
    except (FieldDecodeError, ShortReadError) as e:
      table.append([f'{field_indent}!', e.detail])
      continue
    if record is None:
      continue
    for field_name, value in zip(record._fields, record):
      # plain sequences such as the ftyp brands, not records like LanguageCode
      if isinstance(value, (list, tuple)) and not hasattr(value, '_fields'):
        value = ','.join(
            cropped_repr(item) if isinstance(item, bytes) else str(item)
            for item in value
        )
      elif isinstance(value, bytes):
        value = cropped_repr(value)
      table.append([f'{field_indent}.{field_name}', str(value)])
  return table

def dump_boxes(reader: BoxReader, boxes=None, *, file=None, **box_table_kw):
  ''' Print the box table from `box_table` to `file`,
      default `sys.stdout` per `cs.lex.printt`.
  '''
  printt(*box_table(reader, boxes, **box_table_kw), file=file)
