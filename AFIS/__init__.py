#!/usr/bin/python
# -*- coding: UTF-8 -*-

################################################################################
#
#    Python library for:
#
#                   Fingerprint template encoding and decoding
#
#
#    The aim of the python library is to convert the features of a
#    fingerprint (minutiae, ridge counts, pattern class) between the formats
#    used to store and exchange them:
#
#        compact : native dense binary format
#        ISO     : ISO/IEC 19794-2 (2005) finger minutiae record
#        XML     : human readable XML document
#        runtime : compiled in-memory template used by the matching engines
#
#    All the conversions go through the format-neutral Template object; the
#    Fingerprint object stores the compiled template, the image and the
#    finger position of one fingerprint.
#
################################################################################

from .core import Template, Minutia, MinutiaType, PatternClass, RidgeCount
from .core.exceptions import AFISError, DecodeError, EncodeError, ValidationError
from .fingerprint import Fingerprint, Formats, DEFAULT_FORMATS
from .fingerprint.labels import Finger

try:
    from .version import __version__
except ImportError:
    __version__ = "dev"
