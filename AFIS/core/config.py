#!/usr/bin/python
# -*- coding: UTF-8 -*-

################################################################################
#
#    Canonical model limits
#
################################################################################

MAX_SIZE = 65535
MAX_RESOLUTION = 65535
MAX_QUALITY = 100
MAX_RIDGE_COUNT = 255

#    Directions are stored in 1/256 of a full turn
DIRECTION_STEPS = 256

################################################################################
#
#    Compact format
#
################################################################################

COMPACT_MAGIC = b"AFC"
COMPACT_VERSION = 1

COMPACT_HEADER_SIZE = 7
COMPACT_MINUTIA_SIZE = 7
COMPACT_RIDGE_COUNT_SIZE = 5

################################################################################
#
#    ISO/IEC 19794-2:2005
#
################################################################################

ISO_MAGIC = b"FMR\x00"
ISO_VERSION = b" 20\x00"

ISO_HEADER_SIZE = 24
ISO_MINUTIA_SIZE = 6
ISO_EXTENDED_HEADER_SIZE = 4

ISO_MAX_MINUTIAE = 255
ISO_MAX_COORDINATE = 0x3FFF
ISO_MAX_FINGER = 10

ISO_AREA_RIDGE_COUNT = 0x0001
ISO_AREA_PATTERN = 0x0A01

#    Ridge count extraction method (non-specific)
ISO_RIDGE_COUNT_METHOD = 0

################################################################################
#
#    XML format
#
################################################################################

XML_ROOT = "FingerprintTemplate"
XML_VERSION = "1"

################################################################################
#
#    Runtime template and Fingerprint
#
################################################################################

BUCKET_SIZE = 32
MIN_IMAGE_SIZE = 100
