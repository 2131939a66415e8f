#!/usr/bin/env python3

''' Unit tests for cs.isobmff.source.
'''

import os
import sys
from tempfile import NamedTemporaryFile
import unittest

from icontract import ViolationError

from .errors import ShortReadError
from .source import ByteSource, BytesSource, FileSource

DATA = bytes(range(256)) * 4

class TestBytesSource(unittest.TestCase):
  ''' Tests for `BytesSource`.
  '''

  def setUp(self):
    self.source = BytesSource(DATA)

  def test_len(self):
    ''' The length is the length of the data.
    '''
    self.assertEqual(len(self.source), len(DATA))

  def test_read_at(self):
    ''' Reads at arbitrary offsets in any order.
    '''
    for offset, length in ((1000, 24), (0, 8), (512, 1), (300, 200)):
      with self.subTest(offset=offset, length=length):
        self.assertEqual(
            self.source.read_at(offset, length),
            DATA[offset:offset + length],
        )

  def test_read_to_end(self):
    ''' A read ending exactly at the end of the source is not short.
    '''
    self.assertEqual(self.source.read_at(len(DATA) - 8, 8), DATA[-8:])
    self.assertEqual(self.source.read_at(len(DATA), 0), b'')

  def test_short_read(self):
    ''' A read past the end raises `ShortReadError`.
    '''
    with self.assertRaises(ShortReadError) as cm:
      self.source.read_at(len(DATA) - 4, 8)
    e = cm.exception
    self.assertEqual(e.offset, len(DATA) - 4)
    self.assertEqual(e.length, 8)
    self.assertEqual(e.got, 4)
    self.assertIsInstance(e, EOFError)

  def test_negative_offset(self):
    ''' Negative offsets violate the precondition.
    '''
    with self.assertRaises(ViolationError):
      self.source.read_at(-1, 8)

  def test_promote(self):
    ''' Bytes-like objects promote to `BytesSource`, other things do not.
    '''
    for obj in DATA, bytearray(DATA), memoryview(DATA):
      with self.subTest(type=type(obj).__name__):
        source = ByteSource.promote(obj)
        self.assertIsInstance(source, BytesSource)
        self.assertEqual(source.read_at(0, 4), DATA[:4])
    self.assertIs(ByteSource.promote(self.source), self.source)
    with self.assertRaises(TypeError):
      ByteSource.promote('some/file.mp4')

class TestFileSource(unittest.TestCase):
  ''' Tests for `FileSource`.
  '''

  def setUp(self):
    # pylint: disable=consider-using-with
    self.tmpf = NamedTemporaryFile(prefix='source_tests-', suffix='.mp4')
    self.tmpf.write(DATA)
    self.tmpf.flush()

  def tearDown(self):
    self.tmpf.close()

  def test_from_filename(self):
    ''' Read from a named file, close the descriptor on exit.
    '''
    with FileSource.from_filename(self.tmpf.name) as source:
      self.assertEqual(len(source), len(DATA))
      self.assertEqual(source.read_at(100, 10), DATA[100:110])
      self.assertEqual(source.read_at(0, 3), DATA[:3])
      fd = source.fd
    self.assertIsNone(source.fd)
    with self.assertRaises(OSError):
      os.fstat(fd)

  def test_short_read(self):
    ''' A read past the end of the file raises `ShortReadError`.
    '''
    with FileSource.from_filename(self.tmpf.name) as source:
      with self.assertRaises(ShortReadError):
        source.read_at(len(DATA) - 1, 2)

  def test_borrowed_fd(self):
    ''' A source over a supplied descriptor does not close it.
    '''
    fd = os.open(self.tmpf.name, os.O_RDONLY)
    try:
      with FileSource(fd) as source:
        self.assertEqual(source.read_at(8, 8), DATA[8:16])
      os.fstat(fd)
    finally:
      os.close(fd)

def selftest(argv):
  ''' Run the unit tests.
  '''
  unittest.main(__name__, None, argv)

if __name__ == '__main__':
  selftest(sys.argv)
