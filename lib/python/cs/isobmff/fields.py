#!/usr/bin/env python3

''' Decoders for the payloads of specific box types.

    Each decoder is a function accepting the payload bytes of a box
    and returning an immutable record.
    Decoders are selected by box type from a mapping
    such as that returned by `default_decoders()`;
    callers may supply their own mapping to add or replace decoders.

    A decoder given a short payload raises `TruncatedError`.
'''

from collections import namedtuple
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Callable, Mapping, Optional

from icontract import require
from typeguard import typechecked

from cs.binary import BinaryStruct, UInt16BE, UInt32BE
from cs.buffer import CornuCopyBuffer
from cs.logutils import warning
from cs.pfx import Pfx

from .errors import TruncatedError, UnsupportedVersionError

# ISO14496 timestamps count seconds from the start of 1904, UTC
EPOCH_1904 = datetime(1904, 1, 1, tzinfo=timezone.utc)

# timestamp values which mean "unknown"
TIMESTAMP_SENTINELS = (
    0xffffffff,
    0x7fffffffffffffff,
    0x8000000000000000,
    0xfffffffffffffffe,
    0xffffffffffffffff,
)

# reserved, layer, alternate_group, volume, reserved, matrix in a 'tkhd'
TKHD_SKIP_LENGTH = 4 * 2 + 2 + 2 + 2 + 2 + 4 * 9

# the full box prefix: a version byte and 3 bytes of flags
VersionFlags = BinaryStruct('VersionFlags', '>B3s', 'version flags_bs')

# the timestamp block shared by 'mvhd' and 'mdhd', one class per version
HeaderTimesV0 = BinaryStruct(
    'HeaderTimesV0', '>LLLL',
    'creation_time modification_time timescale duration'
)
HeaderTimesV1 = BinaryStruct(
    'HeaderTimesV1', '>QQLQ',
    'creation_time modification_time timescale duration'
)
HEADER_TIMES_BY_VERSION = {0: HeaderTimesV0, 1: HeaderTimesV1}

# the leading fields of a 'tkhd' after the full box prefix
TrackTimesV0 = BinaryStruct(
    'TrackTimesV0', '>LLLLL',
    'creation_time modification_time track_id reserved1_ duration'
)
TrackTimesV1 = BinaryStruct(
    'TrackTimesV1', '>QQLLQ',
    'creation_time modification_time track_id reserved1_ duration'
)
TRACK_TIMES_BY_VERSION = {0: TrackTimesV0, 1: TrackTimesV1}

TrackDimensions = BinaryStruct('TrackDimensions', '>LL', 'width height')

def timestamp_datetime(seconds: int) -> Optional[datetime]:
  ''' Convert an ISO14496 timestamp to a UTC `datetime`.
      Return `None` for the sentinel values or unrepresentable timestamps.
  '''
  if seconds in TIMESTAMP_SENTINELS:
    return None
  try:
    return EPOCH_1904 + timedelta(seconds=seconds)
  except OverflowError as e:
    warning("timestamp %d: %s, returning None", seconds, e)
    return None

class TimesMixin:
  ''' Convenience properties for records with
      `creation_time` and `modification_time` fields.
  '''

  @property
  def creation_datetime(self):
    ''' The `creation_time` as a UTC `datetime`, or `None`.
    '''
    return timestamp_datetime(self.creation_time)

  @property
  def modification_datetime(self):
    ''' The `modification_time` as a UTC `datetime`, or `None`.
    '''
    return timestamp_datetime(self.modification_time)

class TimescaleMixin(TimesMixin):
  ''' Convenience properties for records which also have
      `timescale` and `duration` fields.
  '''

  @property
  def duration_seconds(self):
    ''' The duration in seconds as a `float`,
        or `None` if the timescale is `0`.
    '''
    if self.timescale == 0:
      return None
    return self.duration / self.timescale

class FileType(namedtuple('FileType',
                          'major_brand minor_version compatible_brands')):
  ''' The decoded payload of an 'ftyp' File Type box - ISO14496 section 4.3.
      `compatible_brands` is a tuple of 4 byte brands.
  '''

  @property
  def brands_s(self):
    ''' The compatible brands as a comma separated string.
    '''
    return ','.join(
        brand.decode('latin-1') for brand in self.compatible_brands
    )

class MovieHeader(
    namedtuple(
        'MovieHeader',
        'version flags creation_time modification_time timescale duration',
    ),
    TimescaleMixin,
):
  ''' The decoded payload of an 'mvhd' Movie Header box - ISO14496 section 8.2.2.
      Only the leading timestamp fields are decoded.
  '''

class TrackHeader(
    namedtuple(
        'TrackHeader',
        'version flags creation_time modification_time track_id duration width height',
    ),
    TimesMixin,
):
  ''' The decoded payload of a 'tkhd' Track Header box - ISO14496 section 8.3.2.

      The `width` and `height` are the raw 16.16 fixed point values.
  '''

  @property
  def track_enabled(self):
    ''' Test flags bit 0, 0x1, track_enabled.
    '''
    return (self.flags & 0x1) != 0

class MediaHeader(
    namedtuple(
        'MediaHeader',
        'version flags creation_time modification_time timescale duration language',
    ),
    TimescaleMixin,
):
  ''' The decoded payload of an 'mdhd' Media Header box - ISO14496 section 8.4.2.
  '''

class LanguageCode(namedtuple('LanguageCode', 'code raw')):
  ''' A packed ISO 639-2/T language code:
      `code` is the 3 letter string and `raw` the packed 16 bit value.
  '''

  def __str__(self):
    return self.code

@contextmanager
def truncation_as_error(box_type: bytes, payload):
  ''' Context manager to run a decode of `payload`,
      converting an `EOFError` from the buffer into a `TruncatedError`.
  '''
  with Pfx("decode %r", box_type):
    try:
      yield
    except EOFError as e:
      raise TruncatedError(box_type, len(payload), str(e)) from e

def parse_version_flags(bfr: CornuCopyBuffer, box_type: bytes):
  ''' Parse the full box prefix from `bfr`.
      Return `(version,flags)`.

      Raises `UnsupportedVersionError` for versions other than 0 or 1.
  '''
  prefix = VersionFlags.parse(bfr)
  if prefix.version not in HEADER_TIMES_BY_VERSION:
    raise UnsupportedVersionError(box_type, prefix.version)
  return prefix.version, int.from_bytes(prefix.flags_bs, 'big')

def parse_header_times(bfr: CornuCopyBuffer, version: int):
  ''' Parse the timestamp block for `version` from `bfr`,
      returning a `HeaderTimesV0` or `HeaderTimesV1`.

      The block is 16 bytes for version 0 and 28 bytes for version 1,
      so with the full box prefix the following field
      is at offset 20 or 32 respectively.
  '''
  return HEADER_TIMES_BY_VERSION[version].parse(bfr)

def decode_ftyp(payload: bytes) -> FileType:
  ''' Decode the payload of an 'ftyp' box.

      The payload is a 4 byte major brand, a 32 bit minor version
      and a list of 4 byte compatible brands to the end of the payload.
      A trailing partial brand shorter than 4 bytes is ignored.
  '''
  with truncation_as_error(b'ftyp', payload):
    bfr = CornuCopyBuffer.from_bytes(payload)
    major_brand = bfr.take(4)
    minor_version = UInt32BE.parse_value(bfr)
  brands_bs = payload[8:]
  compatible_brands = tuple(
      bytes(brands_bs[offset:offset + 4])
      for offset in range(0, len(brands_bs) - 3, 4)
  )
  return FileType(
      major_brand=major_brand,
      minor_version=minor_version,
      compatible_brands=compatible_brands,
  )

def decode_mvhd(payload: bytes) -> MovieHeader:
  ''' Decode the payload of an 'mvhd' box.
  '''
  with truncation_as_error(b'mvhd', payload):
    bfr = CornuCopyBuffer.from_bytes(payload)
    version, flags = parse_version_flags(bfr, b'mvhd')
    times = parse_header_times(bfr, version)
  return MovieHeader(version, flags, *times)

def decode_tkhd(payload: bytes) -> TrackHeader:
  ''' Decode the payload of a 'tkhd' box.

      After the timestamps, track id and duration
      come 52 bytes of reserved, layer, alternate group, volume
      and matrix fields which are skipped,
      then the width and height.
  '''
  with truncation_as_error(b'tkhd', payload):
    bfr = CornuCopyBuffer.from_bytes(payload)
    version, flags = parse_version_flags(bfr, b'tkhd')
    times = TRACK_TIMES_BY_VERSION[version].parse(bfr)
    bfr.take(TKHD_SKIP_LENGTH)
    dimensions = TrackDimensions.parse(bfr)
  return TrackHeader(
      version=version,
      flags=flags,
      creation_time=times.creation_time,
      modification_time=times.modification_time,
      track_id=times.track_id,
      duration=times.duration,
      width=dimensions.width,
      height=dimensions.height,
  )

@typechecked
def decode_language(raw: int) -> LanguageCode:
  ''' Decode a packed 16 bit language code.

      The value is a pad bit and three 5 bit fields,
      each a lower case letter less `0x60`.
  '''
  code = ''.join(
      chr(((raw >> shift) & 0x1f) + 0x60) for shift in (10, 5, 0)
  )
  return LanguageCode(code=code, raw=raw)

@require(
    lambda code: len(code) == 3 and all(0x60 <= ord(c) < 0x80 for c in code)
)
@typechecked
def encode_language(code: str) -> int:
  ''' Pack the 3 letter language `code` into its 16 bit form.
  '''
  raw = 0
  for c in code:
    raw = (raw << 5) | (ord(c) - 0x60)
  return raw

def decode_mdhd(payload: bytes) -> MediaHeader:
  ''' Decode the payload of an 'mdhd' box.
      The packed language code follows the version dependent timestamps.
  '''
  with truncation_as_error(b'mdhd', payload):
    bfr = CornuCopyBuffer.from_bytes(payload)
    version, flags = parse_version_flags(bfr, b'mdhd')
    times = parse_header_times(bfr, version)
    language = decode_language(UInt16BE.parse_value(bfr))
  return MediaHeader(version, flags, *times, language)

def default_decoders() -> Mapping[bytes, Callable]:
  ''' Return a new `dict` mapping box types to their decoder functions.
  '''
  return {
      b'ftyp': decode_ftyp,
      b'mvhd': decode_mvhd,
      b'tkhd': decode_tkhd,
      b'mdhd': decode_mdhd,
  }

def decode_payload(box_type: bytes, payload: bytes, decoders=None):
  ''' Decode `payload` using the decoder for `box_type` from `decoders`,
      default from `default_decoders()`.
      Return the record, or `None` if there is no decoder for `box_type`.
  '''
  if decoders is None:
    decoders = default_decoders()
  decoder = decoders.get(box_type)
  if decoder is None:
    return None
  return decoder(payload)
