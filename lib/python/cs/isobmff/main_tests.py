#!/usr/bin/env python3

''' Unit tests for the cs.isobmff command line.
'''

from contextlib import redirect_stderr, redirect_stdout
from io import StringIO
import sys
from tempfile import NamedTemporaryFile
import unittest

from .__main__ import ISOBMFFCommand
from .testsutil import make_box, make_container, sample_mp4

class TestISOBMFFCommand(unittest.TestCase):
  ''' Tests for the `scan` and `info` subcommands.
  '''

  def setUp(self):
    # pylint: disable=consider-using-with
    self.tmpf = NamedTemporaryFile(prefix='main_tests-', suffix='.mp4')
    self.tmpf.write(sample_mp4())
    self.tmpf.flush()

  def tearDown(self):
    self.tmpf.close()

  def run_command(self, *argv):
    ''' Run the command with `argv`, return `(exit_status,output_lines)`.
    '''
    out = StringIO()
    with redirect_stdout(out):
      xit = ISOBMFFCommand(['isobmff', *argv]).run()
    return xit, out.getvalue().splitlines()

  def test_scan(self):
    ''' One line per box.
    '''
    xit, lines = self.run_command('scan', self.tmpf.name)
    self.assertEqual(xit, 0)
    self.assertEqual(len(lines), 10)
    self.assertTrue(lines[1].startswith('moov'))

  def test_scan_with_fields(self):
    ''' Field lines follow the decodable boxes.
    '''
    xit, lines = self.run_command(
        'scan', '--strict', '--with-fields', self.tmpf.name
    )
    self.assertEqual(xit, 0)
    self.assertGreater(len(lines), 10)
    self.assertTrue(any('.language' in line for line in lines))

  def test_info(self):
    ''' The decoded records.
    '''
    xit, lines = self.run_command('info', self.tmpf.name)
    self.assertEqual(xit, 0)
    self.assertTrue(lines[0].startswith('ftyp'))
    self.assertTrue(any('MediaHeader' in line for line in lines))

  def write_file(self, data: bytes) -> str:
    ''' Write `data` to a new temporary file, return its path.
    '''
    # pylint: disable=consider-using-with
    tmpf = NamedTemporaryFile(prefix='main_tests-', suffix='.mp4')
    self.addCleanup(tmpf.close)
    tmpf.write(data)
    tmpf.flush()
    return tmpf.name

  def test_info_decode_failure(self):
    ''' A record which fails to decode gives exit status 1.
    '''
    path = self.write_file(
        make_container(b'moov', make_box(b'mvhd', bytes(6)))
    )
    xit, lines = self.run_command('info', path)
    self.assertEqual(xit, 1)
    self.assertTrue(lines[0].startswith('mvhd'))
    self.assertIn('truncated', lines[0])

  def test_scan_bad_header(self):
    ''' A tree which cannot be built gives exit status 1.
    '''
    path = self.write_file(
        make_container(b'moov', make_box(b'mvhd', box_size=4))
    )
    xit, lines = self.run_command('scan', path)
    self.assertEqual(xit, 1)
    self.assertEqual(lines, [])

  def test_missing_file(self):
    ''' A missing file gives exit status 1.
    '''
    path = self.tmpf.name + '-missing'
    for subcmd in 'scan', 'info':
      with self.subTest(subcmd=subcmd):
        xit, _ = self.run_command(subcmd, path)
        self.assertEqual(xit, 1)

  def test_usage(self):
    ''' Missing or extra arguments give exit status 2.
    '''
    for argv in (
        ('scan',),
        ('info',),
        ('scan', self.tmpf.name, 'extra'),
    ):
      with self.subTest(argv=argv):
        with redirect_stderr(StringIO()):
          xit, _ = self.run_command(*argv)
        self.assertEqual(xit, 2)

def selftest(argv):
  ''' Run the unit tests.
  '''
  unittest.main(__name__, None, argv)

if __name__ == '__main__':
  selftest(sys.argv)
