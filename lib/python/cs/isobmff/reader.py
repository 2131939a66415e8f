#!/usr/bin/env python3

''' `BoxReader`: a box tree over a `ByteSource`
    with on demand payload reads and decodes.
'''

from contextlib import contextmanager
from functools import cached_property
from typing import Iterable, Optional, Tuple

from cs.deco import promote
from cs.logutils import warning
from cs.pfx import Pfx, pfx_method

from .boxes import Box, read_payload, scan_boxes, walk_boxes
from .errors import FieldDecodeError, ISOBMFFError, ShortReadError
from .fields import decode_payload, default_decoders
from .source import ByteSource, FileSource

@promote
def decode_boxes(
    source: ByteSource,
    boxes: Iterable[Box],
    decoders=None,
) -> Iterable[Tuple[Box, Optional[tuple], Optional[ISOBMFFError]]]:
  ''' Walk `boxes` and decode each box with a decoder in `decoders`,
      default from `default_decoders()`.

      Yield `(box,record,exception)` 3-tuples:
      `record` is the decoded record or `None` if the decode failed,
      in which case `exception` is the `FieldDecodeError`,
      or the `ShortReadError` if the payload overshoots the source.
      A failed read or decode is logged and the walk continues.
  '''
  if decoders is None:
    decoders = default_decoders()
  for box, _ in walk_boxes(boxes):
    if box.box_type not in decoders:
      continue
    record, exc = None, None
    with Pfx(box):
      try:
        payload = read_payload(source, box)
        record = decode_payload(box.box_type, payload, decoders)
      except (FieldDecodeError, ShortReadError) as e:
        # str(e) already carries the Pfx prefix
        warning("skipping: %s", e.detail)
        exc = e
    yield box, record, exc

class BoxReader:
  ''' A reader for the box tree of a `ByteSource`.

      The tree is scanned on first access to `.boxes`.
      Payloads are read and decoded on request and never cached.
  '''

  def __init__(
      self,
      source: ByteSource,
      *,
      container_types=None,
      decoders=None,
      strict=False,
      max_depth=None,
  ):
    ''' Initialise the reader.

        Parameters:
        * `source`: the `ByteSource`, or a bytes-like object
        * `container_types`: optional collection of container box types
          passed to `scan_boxes`
        * `decoders`: optional mapping of box type to decoder,
          default from `default_decoders()`
        * `strict`: passed to `scan_boxes`
        * `max_depth`: passed to `scan_boxes`
    '''
    if decoders is None:
      decoders = default_decoders()
    self.source = ByteSource.promote(source)
    self.container_types = container_types
    self.decoders = decoders
    self.strict = strict
    self.max_depth = max_depth

  def __str__(self):
    return f'{self.__class__.__name__}({self.source})'

  @classmethod
  @contextmanager
  def from_filename(cls, path: str, **reader_kw):
    ''' Context manager yielding a `BoxReader` for the file at `path`.
        The file is closed on exit.
    '''
    with FileSource.from_filename(path) as source:
      with Pfx(path):
        yield cls(source, **reader_kw)

  @cached_property
  @pfx_method
  def boxes(self) -> Tuple[Box, ...]:
    ''' The top level `Box`es of the source.
    '''
    return scan_boxes(
        self.source,
        container_types=self.container_types,
        strict=self.strict,
        max_depth=self.max_depth,
    )

  def __iter__(self):
    return iter(self.boxes)

  def walk(self):
    ''' Walk the box tree in depth first preorder,
        yielding `(box,subboxes)` 2-tuples as for `Box.walk`.
    '''
    return walk_boxes(self.boxes)

  def descendants(self, box_types: str):
    ''' Yield the boxes matching the dotted type path `box_types`,
        for example `'moov.trak.mdia.mdhd'`.
    '''
    top_type, *tail_types = box_types.split('.')
    for box in self.boxes:
      if box.box_type_s == top_type:
        if tail_types:
          yield from box.descendants(tail_types)
        else:
          yield box

  def read_payload(self, box: Box) -> bytes:
    ''' Read the payload bytes of `box`.
    '''
    return read_payload(self.source, box)

  def decode(self, box: Box):
    ''' Read and decode the payload of `box`.
        Return the record, or `None` if there is no decoder for its type.
    '''
    if box.box_type not in self.decoders:
      return None
    with Pfx(box):
      return decode_payload(
          box.box_type, self.read_payload(box), self.decoders
      )

  def decode_all(self):
    ''' Decode every decodable box in the tree,
        yielding `(box,record,exception)` 3-tuples as for `decode_boxes`.
    '''
    return decode_boxes(self.source, self.boxes, self.decoders)
