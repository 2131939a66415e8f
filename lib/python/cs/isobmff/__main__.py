#!/usr/bin/env python3

''' Command line access to the `cs.isobmff` box parser.
'''

from getopt import GetoptError
import sys

from cs.cmdutils import BaseCommand, popopts
from cs.lex import printt
from cs.logutils import error

from .errors import ISOBMFFError
from .reader import BoxReader
from .view import dump_boxes

def main(argv=None):
  ''' Command line mode.
  '''
  return ISOBMFFCommand(argv).run()

class ISOBMFFCommand(BaseCommand):
  ''' Report on the box structure of ISO Base Media files such as MP4.
  '''

  GETOPT_SPEC = ''

  @popopts(
      strict='Reject boxes which overshoot their container.',
      with_fields='Include a line for each decoded box field.',
  )
  def cmd_scan(self, argv):
    ''' Usage: {cmd} [--strict] [--with-fields] filename
          Print the box tree of filename.
    '''
    options = self.options
    if not argv:
      raise GetoptError("missing filename")
    filename = argv.pop(0)
    if argv:
      raise GetoptError(f'extra arguments after filename: {argv!r}')
    try:
      with BoxReader.from_filename(filename,
                                   strict=bool(options.strict)) as reader:
        dump_boxes(reader, with_fields=bool(options.with_fields))
    except ISOBMFFError as e:
      error("scan failed: %s", e.detail)
      return 1
    except OSError as e:
      error("%s", e)
      return 1
    return 0

  def cmd_info(self, argv):
    ''' Usage: {cmd} filename
          Print the decoded file type, movie, track and media headers.
    '''
    if not argv:
      raise GetoptError("missing filename")
    filename = argv.pop(0)
    if argv:
      raise GetoptError(f'extra arguments after filename: {argv!r}')
    try:
      with BoxReader.from_filename(filename) as reader:
        decoded = list(reader.decode_all())
    except ISOBMFFError as e:
      error("scan failed: %s", e.detail)
      return 1
    except OSError as e:
      error("%s", e)
      return 1
    xit = 0
    table = []
    for box, record, e in decoded:
      if e is not None:
        table.append([box.box_type_s, f'! {e.detail}'])
        xit = 1
        continue
      table.append([box.box_type_s, type(record).__name__])
      for field_name, value in zip(record._fields, record):
        table.append([f'  {field_name}', str(value)])
    printt(*table)
    return xit

if __name__ == '__main__':
  sys.exit(main(sys.argv))
