#!/usr/bin/env python3
#
# ISO Base Media File Format box parser.
#

''' A parser for the box structure of ISO Base Media File Format files
    (ISO/IEC 14496-12), the basis for MP4, MOV and others.

    An ISOBMFF file is a sequence of size prefixed "boxes",
    some of which contain further boxes.
    This package scans the box tree from a random access `ByteSource`
    without reading the box payloads,
    which can then be read and decoded on demand.

    Example:

        from cs.isobmff import BoxReader
        with BoxReader.from_filename('movie.mp4') as reader:
            for mdhd in reader.descendants('moov.trak.mdia.mdhd'):
                print(mdhd, reader.decode(mdhd).language)

    Writing or modifying files is not supported,
    nor are the 64 bit and "to end of file" box size encodings
    or fragmented MP4 layouts.
'''

from .boxes import (
    BOX_HEADER_LENGTH,
    DEFAULT_CONTAINER_TYPES,
    DEFAULT_MAX_DEPTH,
    Box,
    BoxHeader,
    Range,
    payload_range,
    read_box_header,
    read_payload,
    scan_boxes,
    walk_boxes,
)
from .errors import (
    ISOBMFFError,
    FieldDecodeError,
    HeaderTooSmallError,
    MalformedTreeError,
    ShortReadError,
    TreeTooDeepError,
    TruncatedError,
    UnsupportedVersionError,
)
from .fields import (
    FileType,
    LanguageCode,
    MediaHeader,
    MovieHeader,
    TrackHeader,
    decode_ftyp,
    decode_language,
    decode_mdhd,
    decode_mvhd,
    decode_payload,
    decode_tkhd,
    default_decoders,
    encode_language,
)
from .reader import BoxReader, decode_boxes
from .source import ByteSource, BytesSource, FileSource
from .view import box_table, dump_boxes

__version__ = '20261018'

DISTINFO = {
    'keywords': ["python3"],
    'classifiers': [
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Topic :: Multimedia :: Video",
    ],
    'install_requires': [
        'cs.binary',
        'cs.buffer',
        'cs.cmdutils',
        'cs.deco',
        'cs.lex',
        'cs.logutils',
        'cs.pfx',
        'icontract',
        'typeguard',
    ],
    'entry_points': {
        'console_scripts': {
            'isobmff': 'cs.isobmff.__main__:main',
        },
    },
}
