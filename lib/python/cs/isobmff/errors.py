#!/usr/bin/env python3

''' Exceptions raised by the `cs.isobmff` modules.

    All exceptions subclass `ISOBMFFError`.
    The I/O and header errors abort a box tree scan;
    the `FieldDecodeError`s only affect the decode of a single box payload.
'''

class ISOBMFFError(Exception):
  ''' Base class for all the `cs.isobmff` exceptions.

      The `detail` attribute holds the message without
      any `cs.pfx` context prefix.
  '''

  def __init__(self, detail: str):
    super().__init__(detail)
    self.detail = detail

class ShortReadError(ISOBMFFError, EOFError):
  ''' Fewer bytes were available than requested.
  '''

  def __init__(self, offset: int, length: int, got: int):
    super().__init__(
        f'short read at offset {offset}: wanted {length} bytes, got {got}'
    )
    self.offset = offset
    self.length = length
    self.got = got

class HeaderTooSmallError(ISOBMFFError, ValueError):
  ''' A box header declared a size smaller than the header itself.
  '''

  def __init__(self, offset: int, box_size: int, box_type: bytes):
    super().__init__(
        f'box {box_type!r} at offset {offset}: declared size {box_size} < 8'
    )
    self.offset = offset
    self.box_size = box_size
    self.box_type = box_type

class MalformedTreeError(ISOBMFFError, ValueError):
  ''' A box overshoots the range of its container (strict scans only).
  '''

  def __init__(self, offset: int, end_offset: int, range_end: int):
    super().__init__(
        f'box at offset {offset} ends at {end_offset},'
        f' beyond the enclosing range end {range_end}'
    )
    self.offset = offset
    self.end_offset = end_offset
    self.range_end = range_end

class FieldDecodeError(ISOBMFFError, ValueError):
  ''' A box payload could not be decoded.
  '''

  def __init__(self, box_type: bytes, msg: str):
    super().__init__(f'{box_type.decode("latin-1")!r}: {msg}')
    self.box_type = box_type

class TruncatedError(FieldDecodeError):
  ''' A field decoder needed more payload bytes than were supplied.
  '''

  def __init__(self, box_type: bytes, payload_length: int, reason=None):
    msg = f'truncated payload of {payload_length} bytes'
    if reason:
      msg += f': {reason}'
    super().__init__(box_type, msg)
    self.payload_length = payload_length

class UnsupportedVersionError(FieldDecodeError):
  ''' A full box declared a version we do not know how to decode.
  '''

  def __init__(self, box_type: bytes, version: int):
    super().__init__(box_type, f'unsupported version {version}')
    self.version = version

class TreeTooDeepError(ISOBMFFError, ValueError):
  ''' Container boxes were nested more deeply than a scan permits.
  '''

  def __init__(self, offset: int, depth: int, max_depth: int):
    super().__init__(
        f'box at offset {offset}: children at depth {depth}'
        f' exceed the maximum depth {max_depth}'
    )
    self.offset = offset
    self.depth = depth
    self.max_depth = max_depth
