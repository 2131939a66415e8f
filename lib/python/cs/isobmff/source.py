#!/usr/bin/env python3

''' Random access byte sources for the box parser.

    A `ByteSource` is a finite, randomly addressable range of bytes
    with a known length.
    All reads are positional: there is no shared cursor,
    so a source may be read from several threads at once
    if the underlying storage permits it.
'''

from abc import ABC, abstractmethod
import os

from icontract import require

from cs.logutils import debug
from cs.pfx import Pfx, pfx_call

from .errors import ShortReadError

class ByteSource(ABC):
  ''' Abstract base class for random access byte storage of known length.

      Subclasses implement `__len__` and `pread`.
  '''

  @abstractmethod
  def __len__(self):
    raise NotImplementedError('__len__')

  @abstractmethod
  def pread(self, offset: int, length: int) -> bytes:
    ''' Read up to `length` bytes from `offset`.
        This may return fewer bytes at the end of the source.
    '''
    raise NotImplementedError('pread')

  @require(lambda offset: offset >= 0)
  @require(lambda length: length >= 0)
  def read_at(self, offset: int, length: int) -> bytes:
    ''' Return exactly `length` bytes from `offset`.
        Raise `ShortReadError` if fewer bytes are available.

        A zero length read always succeeds, even at the end of the source.
    '''
    if length == 0:
      return b''
    bs = self.pread(offset, length)
    if len(bs) != length:
      raise ShortReadError(offset, length, len(bs))
    return bs

  def close(self):
    ''' Release any resources. This base implementation does nothing.
    '''

  def __enter__(self):
    return self

  def __exit__(self, *_):
    self.close()
    return False

  @classmethod
  def promote(cls, obj):
    ''' Promote a bytes-like `obj` to a `BytesSource`.
    '''
    if isinstance(obj, cls):
      return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
      return BytesSource(obj)
    raise TypeError(
        f'{cls.__name__}.promote: cannot promote {obj.__class__.__name__}:{obj!r}'
    )

class BytesSource(ByteSource):
  ''' A `ByteSource` over an in memory bytes-like object.
  '''

  def __init__(self, bs):
    self._mv = memoryview(bs).cast('B')

  def __str__(self):
    return f'{self.__class__.__name__}[{len(self)}]'

  def __len__(self):
    return len(self._mv)

  def pread(self, offset: int, length: int) -> bytes:
    return bytes(self._mv[offset:offset + length])

class FileSource(ByteSource):
  ''' A `ByteSource` reading from an open file descriptor with `os.pread`.
  '''

  def __init__(self, fd: int, *, length=None, closefd=False, path=None):
    ''' Initialise the source.

        Parameters:
        * `fd`: the file descriptor
        * `length`: optional length of the source,
          default from `os.fstat(fd).st_size`
        * `closefd`: if true, close `fd` when the source is closed
        * `path`: optional pathname, used for messages
    '''
    if length is None:
      length = os.fstat(fd).st_size
    self.fd = fd
    self.length = length
    self.closefd = closefd
    self.path = path

  def __str__(self):
    return f'{self.__class__.__name__}({self.path or self.fd},length={self.length})'

  @classmethod
  def from_filename(cls, path: str):
    ''' Open `path` for read and return a `FileSource` owning the descriptor.
    '''
    fd = pfx_call(os.open, path, os.O_RDONLY)
    return cls(fd, closefd=True, path=path)

  def __len__(self):
    return self.length

  def pread(self, offset: int, length: int) -> bytes:
    chunks = []
    while length > 0:
      with Pfx("pread(fd=%d,%d,%d)", self.fd, length, offset):
        bs = os.pread(self.fd, length, offset)
      if not bs:
        break
      chunks.append(bs)
      offset += len(bs)
      length -= len(bs)
    return b''.join(chunks)

  def close(self):
    ''' Close the file descriptor if we own it.
    '''
    if self.closefd and self.fd is not None:
      debug("%s: close fd %d", self, self.fd)
      os.close(self.fd)
      self.fd = None
