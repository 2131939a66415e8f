#!/usr/bin/env python3

''' The box tree: box headers, the recursive box scan
    and access to box payloads.

    An ISOBMFF file is a sequence of boxes,
    each with an 8 byte header:

        +--------------------------+
        | size (4) | type (4)      |  header, 8 bytes
        +--------------------------+
        | payload (size - 8)       |
        +--------------------------+

    The size is a big endian unsigned 32 bit value
    and includes the header itself.
    Container boxes have a payload which is itself a sequence of boxes.
'''

from collections import namedtuple
from typing import Iterable, List, Optional, Tuple

from icontract import require

from cs.binary import BinaryStruct
from cs.deco import promote
from cs.logutils import debug
from cs.pfx import Pfx

from .errors import HeaderTooSmallError, MalformedTreeError, TreeTooDeepError
from .source import ByteSource

BOX_HEADER_LENGTH = 8

# the boxes whose payloads are scanned for child boxes by default
DEFAULT_CONTAINER_TYPES = frozenset(
    (b'moov', b'trak', b'mdia', b'minf', b'stbl', b'edts')
)

# the deepest level of child boxes a scan will descend to
DEFAULT_MAX_DEPTH = 64

class BoxHeader(BinaryStruct('BoxHeader', '>L4s', 'box_size box_type')):
  ''' An ISOBMFF box header: a 32 bit big endian size and a 4 byte type.

      `bytes(BoxHeader(box_size=16, box_type=b'free'))` transcribes
      the 8 byte binary form.
  '''

  @property
  def payload_length(self):
    ''' The length of the payload following this header.
    '''
    return self.box_size - BOX_HEADER_LENGTH

@promote
@require(lambda offset: offset >= 0)
def read_box_header(source: ByteSource, offset: int) -> BoxHeader:
  ''' Read the `BoxHeader` at `offset` in `source`.

      Raises `ShortReadError` if fewer than 8 bytes are available
      and `HeaderTooSmallError` if the declared size is less than 8.
  '''
  bs = source.read_at(offset, BOX_HEADER_LENGTH)
  header = BoxHeader.from_bytes(bs)
  if header.box_size < BOX_HEADER_LENGTH:
    raise HeaderTooSmallError(offset, header.box_size, header.box_type)
  return header

class Range(namedtuple('Range', 'start end')):
  ''' A half open byte range `[start,end)`.
  '''

  @property
  def size(self):
    ''' The number of bytes in the range.
    '''
    return self.end - self.start

  def __str__(self):
    return f'[{self.start} (+{self.size}), {self.end})'

  def __contains__(self, other):
    ''' A `Range` contains another `Range` lying within it.
    '''
    return self.start <= other.start and other.end <= self.end

class Box(namedtuple('Box', 'box_type size offset depth children')):
  ''' A parsed box.

      Attributes:
      * `box_type`: the 4 byte type tag, a `bytes`
      * `size`: the total size of the box including its header
      * `offset`: the offset of the box header in the source
      * `depth`: the nesting level, `0` for top level boxes
      * `children`: a tuple of the child `Box`es,
        empty unless the box type is a container type
  '''

  def __str__(self):
    return f'box {self.box_type_s} @{self.offset}: data ~ {self.payload_range()}'

  @property
  def end_offset(self):
    ''' The offset of the end of this box.
    '''
    return self.offset + self.size

  @property
  def box_type_s(self) -> str:
    ''' The box type as a string.

        If the type bytes decode as printable ASCII, return that.
        Otherwise return the `repr` of the type bytes.
    '''
    try:
      box_type_s = self.box_type.decode('ascii')
    except UnicodeDecodeError:
      return repr(self.box_type)
    if not box_type_s.isprintable():
      return repr(self.box_type)
    return box_type_s

  def payload_range(self) -> Range:
    ''' The `Range` of this box's payload.
    '''
    return payload_range(self)

  def walk(self) -> Iterable[Tuple["Box", List["Box"]]]:
    ''' Walk this box hierarchy in depth first preorder.

        Yield `(box,subboxes)` 2-tuples starting with `self`.
        As with `os.walk`, the `subboxes` list
        may be modified in place to prune the subsequent walk.
    '''
    subboxes = list(self.children)
    yield self, subboxes
    for subbox in subboxes:
      yield from subbox.walk()

  def descendants(self, sub_box_types):
    ''' A generator yielding the descendants of this box
        matching `sub_box_types`,
        a dot separated string such as `'mdia.mdhd'` or a list of type strings.
    '''
    if isinstance(sub_box_types, str):
      sub_box_types = sub_box_types.split('.')
    box_type_s, *tail_box_types = sub_box_types
    for subbox in self.children:
      if subbox.box_type_s == box_type_s:
        if tail_box_types:
          yield from subbox.descendants(tail_box_types)
        else:
          yield subbox

def walk_boxes(boxes: Iterable[Box]):
  ''' Walk a sequence of sibling boxes in depth first preorder,
      yielding `(box,subboxes)` 2-tuples as for `Box.walk`.
  '''
  for box in boxes:
    yield from box.walk()

def payload_range(box: Box) -> Range:
  ''' Return the `Range` of the payload of `box`, excluding its header.
  '''
  return Range(box.offset + BOX_HEADER_LENGTH, box.offset + box.size)

@promote
def scan_boxes(
    source: ByteSource,
    span: Optional[Range] = None,
    *,
    depth=0,
    container_types=None,
    strict=False,
    max_depth=None,
) -> Tuple[Box, ...]:
  ''' Scan the boxes in `span` of `source`, default the whole source.
      Return a tuple of the `Box`es in file order.

      Parameters:
      * `source`: the `ByteSource`
      * `span`: optional `Range` to scan
      * `depth`: the depth of the boxes in `span`, default `0`
      * `container_types`: optional collection of box types
        whose payloads are scanned for child boxes,
        default `DEFAULT_CONTAINER_TYPES`
      * `strict`: if true, raise `MalformedTreeError`
        for a box which overshoots the end of `span`;
        the default is to accept it and stop the scan after that box
      * `max_depth`: the deepest permitted level of child boxes,
        default `DEFAULT_MAX_DEPTH`;
        a container whose children would lie deeper
        raises `TreeTooDeepError`

      A failed header read aborts the scan:
      once one box size is wrong the following boundaries are unknowable.
  '''
  if span is None:
    span = Range(0, len(source))
  if container_types is None:
    container_types = DEFAULT_CONTAINER_TYPES
  if max_depth is None:
    max_depth = DEFAULT_MAX_DEPTH
  boxes = []
  offset = span.start
  while offset < span.end:
    with Pfx("@%d", offset):
      header = read_box_header(source, offset)
      end_offset = offset + header.box_size
      if strict and end_offset > span.end:
        raise MalformedTreeError(offset, end_offset, span.end)
      children = ()
      if header.box_type in container_types:
        if depth + 1 > max_depth:
          raise TreeTooDeepError(offset, depth + 1, max_depth)
        debug(
            "scan %r children [%d:%d] depth %d", header.box_type,
            offset + BOX_HEADER_LENGTH, end_offset, depth + 1
        )
        children = scan_boxes(
            source,
            Range(offset + BOX_HEADER_LENGTH, end_offset),
            depth=depth + 1,
            container_types=container_types,
            strict=strict,
            max_depth=max_depth,
        )
      boxes.append(
          Box(
              box_type=header.box_type,
              size=header.box_size,
              offset=offset,
              depth=depth,
              children=children,
          )
      )
    offset = end_offset
  return tuple(boxes)

@promote
def read_payload(source: ByteSource, box: Box) -> bytes:
  ''' Read the payload bytes of `box` from `source`.
      Raises `ShortReadError` if the source is truncated.

      Nothing is cached: each call reads from the source.
  '''
  data_range = payload_range(box)
  with Pfx("read_payload(%s)", box.box_type_s):
    return source.read_at(data_range.start, data_range.size)
