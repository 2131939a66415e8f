#!/usr/bin/env python3

''' Builders for synthetic ISOBMFF data used by the unit tests.
'''

from cs.binary import UInt16BE, UInt32BE

from .boxes import BOX_HEADER_LENGTH, BoxHeader
from .fields import (
    HEADER_TIMES_BY_VERSION,
    TKHD_SKIP_LENGTH,
    TRACK_TIMES_BY_VERSION,
    TrackDimensions,
    VersionFlags,
    encode_language,
)

def make_box(box_type: bytes, payload=b'', *, box_size=None) -> bytes:
  ''' Return the binary form of a box of type `box_type` with `payload`.
      `box_size` overrides the computed size in the header.
  '''
  if box_size is None:
    box_size = BOX_HEADER_LENGTH + len(payload)
  return bytes(BoxHeader(box_size=box_size, box_type=box_type)) + payload

def make_container(box_type: bytes, *boxes_bs) -> bytes:
  ''' Return the binary form of a box whose payload is the boxes `boxes_bs`.
  '''
  return make_box(box_type, b''.join(boxes_bs))

def version_flags(version, flags=0) -> bytes:
  ''' The full box prefix for `version` and `flags`.
  '''
  return bytes(VersionFlags(version=version, flags_bs=flags.to_bytes(3, 'big')))

def ftyp_payload(major_brand, minor_version, brands=()) -> bytes:
  ''' An 'ftyp' payload.
  '''
  return (
      major_brand + UInt32BE.transcribe_value(minor_version) +
      b''.join(brands)
  )

def mvhd_payload(
    version,
    creation_time,
    modification_time,
    timescale,
    duration,
    *,
    flags=0,
) -> bytes:
  ''' An 'mvhd' payload with zeroed trailing fields.
  '''
  times = HEADER_TIMES_BY_VERSION[version](
      creation_time, modification_time, timescale, duration
  )
  # rate, volume, reserved, matrix, pre_defined, next_track_ID
  return version_flags(version, flags) + bytes(times) + bytes(80)

def mdhd_payload(
    version,
    creation_time,
    modification_time,
    timescale,
    duration,
    language='und',
) -> bytes:
  ''' An 'mdhd' payload.
  '''
  times = HEADER_TIMES_BY_VERSION[version](
      creation_time, modification_time, timescale, duration
  )
  return (
      version_flags(version) + bytes(times) +
      UInt16BE.transcribe_value(encode_language(language)) + bytes(2)
  )

def tkhd_payload(
    version,
    creation_time,
    modification_time,
    track_id,
    duration,
    width,
    height,
    *,
    flags=0x7,
) -> bytes:
  ''' A 'tkhd' payload.
  '''
  times = TRACK_TIMES_BY_VERSION[version](
      creation_time, modification_time, track_id, 0, duration
  )
  return (
      version_flags(version, flags) + bytes(times) +
      bytes(TKHD_SKIP_LENGTH) + bytes(TrackDimensions(width, height))
  )

def sample_mp4(*, version=0) -> bytes:
  ''' A small but plausible MP4 file with one video track.
  '''
  return b''.join(
      (
          make_box(
              b'ftyp',
              ftyp_payload(b'isom', 512, (b'isom', b'iso2', b'avc1', b'mp41')),
          ),
          make_container(
              b'moov',
              make_box(
                  b'mvhd', mvhd_payload(version, 3600, 3700, 1000, 10000)
              ),
              make_container(
                  b'trak',
                  make_box(
                      b'tkhd',
                      tkhd_payload(
                          version, 3600, 3700, 1, 10000, 640 << 16, 480 << 16
                      ),
                  ),
                  make_container(
                      b'mdia',
                      make_box(
                          b'mdhd',
                          mdhd_payload(version, 3600, 3700, 90000, 900000, 'eng'),
                      ),
                      make_box(b'hdlr', bytes(25)),
                  ),
              ),
          ),
          make_box(b'free', bytes(8)),
          make_box(b'mdat', b'frame data'),
      )
  )
