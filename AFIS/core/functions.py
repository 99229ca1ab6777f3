#!/usr/bin/python
# -*- coding: UTF-8 -*-

import struct

from .config import DIRECTION_STEPS
from .exceptions import DecodeError

################################################################################
#
#    Generic functions
#
################################################################################

def hexformat( x ):
    return format( x, '02x' )

#    Binary print
def bindump( data, n = 8 ):
    """
        Return the first and last n bytes of a binary data.

            >>> from AFIS.core.functions import bindump
            >>> bindump( b"\\xff" * 250000 )
            'ffffffff ... ffffffff (250000 bytes)'

        Short data is returned in full:

            >>> bindump( b"AFC\\x01" )
            '41464301 (4 bytes)'
    """
    data = bytes( data )

    if len( data ) <= n:
        return "%s (%d bytes)" % ( "".join( map( hexformat, data ) ), len( data ) )

    pre = "".join( map( hexformat, data[ : n // 2 ] ) )
    post = "".join( map( hexformat, data[ -( n // 2 ) : ] ) )

    return "%s ... %s (%d bytes)" % ( pre, post, len( data ) )

################################################################################
#
#    Resolution changes
#
################################################################################

def dpi2ppcm( dpi ):
    """
        Convert a resolution in DPI to pixels per centimeter (unit used in the
        ISO/IEC 19794-2 records and in the Template object).

            >>> from AFIS.core.functions import dpi2ppcm
            >>> dpi2ppcm( 500 )
            197
            >>> dpi2ppcm( 1000 )
            394
    """
    return int( round( dpi / 2.54 ) )

def ppcm2dpi( ppcm ):
    """
        Convert a resolution in pixels per centimeter to DPI.

            >>> from AFIS.core.functions import ppcm2dpi
            >>> ppcm2dpi( 197 )
            500
            >>> ppcm2dpi( 394 )
            1001
    """
    return int( round( ppcm * 2.54 ) )

################################################################################
#
#    Direction changes
#
################################################################################

def deg2dir( angle ):
    """
        Convert an angle in degrees to the direction unit of the templates
        (1/256 of a full turn, counter-clockwise).

            >>> from AFIS.core.functions import deg2dir
            >>> deg2dir( 0 ), deg2dir( 90 ), deg2dir( 180 ), deg2dir( 270 )
            (0, 64, 128, 192)
            >>> deg2dir( 360 )
            0
            >>> deg2dir( -90 )
            192
    """
    return int( round( angle * DIRECTION_STEPS / 360.0 ) ) % DIRECTION_STEPS

def dir2deg( direction ):
    """
        Convert a direction to degrees.

            >>> from AFIS.core.functions import dir2deg
            >>> dir2deg( 64 )
            90.0
            >>> dir2deg( 1 )
            1.40625
    """
    return ( direction % DIRECTION_STEPS ) * 360.0 / DIRECTION_STEPS

################################################################################
#
#    Binary reader
#
################################################################################

class ByteReader( object ):
    """
        Sequential reader over a binary buffer. All the reads are bounds
        checked; reading after the end of the buffer raises a DecodeError
        with the offset and the name of the field being read.

            >>> from AFIS.core.functions import ByteReader
            >>> r = ByteReader( b"\\x00\\x10\\x20" )
            >>> r.unpack( ">H", "width" )
            (16,)
            >>> r.offset, r.remaining()
            (2, 1)
            >>> r.take( 2, "height" )
            Traceback (most recent call last):
            ...
            AFIS.core.exceptions.DecodeError: truncated data: 2 bytes expected, 1 available (field: height, offset: 2)
    """
    def __init__( self, data, offset = 0 ):
        self.data = data
        self.offset = offset

    def remaining( self ):
        return len( self.data ) - self.offset

    def take( self, n, field = None ):
        if n > self.remaining():
            raise DecodeError(
                "truncated data: %d bytes expected, %d available" % ( n, self.remaining() ),
                field,
                self.offset
            )

        ret = self.data[ self.offset : self.offset + n ]
        self.offset += n
        return ret

    def skip( self, n, field = None ):
        self.take( n, field )

    def unpack( self, fmt, field = None ):
        return struct.unpack( fmt, self.take( struct.calcsize( fmt ), field ) )
