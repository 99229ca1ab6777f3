#!/usr/bin/python
# -*- coding: UTF-8 -*-

import logging
import struct

from ..core import TemplateFormat, Minutia
from ..core.config import COMPACT_MAGIC, COMPACT_VERSION, COMPACT_HEADER_SIZE, COMPACT_MINUTIA_SIZE, COMPACT_RIDGE_COUNT_SIZE
from ..core.exceptions import DecodeError, EncodeError, ValidationError
from ..core.functions import ByteReader, bindump

logger = logging.getLogger( __name__ )

#    magic, version and header length
MINIMAL_SIZE = len( COMPACT_MAGIC ) + 3

class CompactFormat( TemplateFormat ):
    """
        Native dense binary format. All the integers are stored big-endian.
        Each block (header, minutia record) is prefixed by its length, so that
        the fields added in later versions of the format are skipped by the
        older readers.

        Usage:

            >>> from AFIS.core import Template, Minutia
            >>> from AFIS.compact import CompactFormat
            >>> t = Template(
            ...     200, 200, dpi = 500,
            ...     minutiae = [
            ...         Minutia.from_degrees( 10, 10, 0, "ending" ),
            ...         Minutia.from_degrees( 50, 60, 90, "bifurcation" ),
            ...         Minutia.from_degrees( 80, 20, 180, "ending" )
            ...     ]
            ... )
            >>> fmt = CompactFormat()
            >>> data = fmt.export_template( t )
            >>> data[ 0:4 ], len( data )
            (b'AFC\\x01', 39)
            >>> fmt.import_template( data ) == t
            True

        Truncated data is detected before any read:

            >>> fmt.import_template( data[ 0:2 ] )
            Traceback (most recent call last):
            ...
            AFIS.core.exceptions.DecodeError: too short for a compact template: 2 bytes (field: header, offset: 0)
    """

    ############################################################################
    #
    #    Export
    #
    ############################################################################

    def export_template( self, template ):
        self.check_template( template )

        minutiae = template.minutiae
        if len( minutiae ) > 0xFFFF:
            raise EncodeError( "too many minutiae for the compact format: %d" % len( minutiae ), "minutiae" )

        ridge_counts = [
            ( i, rc.neighbor, rc.count )
            for i, m in enumerate( minutiae )
            for rc in m.ridge_counts
        ]
        if len( ridge_counts ) > 0xFFFF:
            raise EncodeError( "too many ridge counts for the compact format: %d" % len( ridge_counts ), "ridge_counts" )

        out = [
            COMPACT_MAGIC,
            struct.pack( ">BH", COMPACT_VERSION, COMPACT_HEADER_SIZE ),
            struct.pack( ">HHHB", template.width, template.height, template.resolution, template.pattern ),
            struct.pack( ">HB", len( minutiae ), COMPACT_MINUTIA_SIZE )
        ]

        for m in minutiae:
            out.append( struct.pack( ">HHBBB", m.x, m.y, m.direction, m.type, m.quality or 0 ) )

        out.append( struct.pack( ">H", len( ridge_counts ) ) )
        for rc in ridge_counts:
            out.append( struct.pack( ">HHB", *rc ) )

        data = b"".join( out )
        logger.debug( "Compact template exported: %s" % bindump( data ) )

        return data

    ############################################################################
    #
    #    Import
    #
    ############################################################################

    def import_template( self, data ):
        data = self.as_bytes( data )

        logger.debug( "Compact template import: %s" % bindump( data ) )

        if len( data ) < MINIMAL_SIZE:
            raise DecodeError( "too short for a compact template: %d bytes" % len( data ), "header", 0 )

        reader = ByteReader( data )

        magic = reader.take( len( COMPACT_MAGIC ), "magic" )
        if magic != COMPACT_MAGIC:
            raise DecodeError( "invalid magic: %r" % magic, "magic", 0 )

        version, header_size = reader.unpack( ">BH", "version" )
        logger.debug( "version: %d" % version )

        if version == 0:
            raise DecodeError( "unsupported compact format version: 0", "version", 3 )

        elif version > COMPACT_VERSION:
            logger.debug( "version %d is newer than %d, unknown fields will be skipped" % ( version, COMPACT_VERSION ) )

        if header_size < COMPACT_HEADER_SIZE:
            raise DecodeError( "header too short: %d bytes" % header_size, "header", 4 )

        header = reader.take( header_size, "header" )
        width, height, resolution, pattern = struct.unpack_from( ">HHHB", header )

        logger.debug( "width: %d" % width )
        logger.debug( "height: %d" % height )
        logger.debug( "resolution: %d" % resolution )
        logger.debug( "pattern: %d" % pattern )

        count_offset = reader.offset
        count, record_size = reader.unpack( ">HB", "minutiae count" )
        logger.debug( "minutiae: %d (%d bytes each)" % ( count, record_size ) )

        if record_size < COMPACT_MINUTIA_SIZE:
            raise DecodeError( "minutia record too short: %d bytes" % record_size, "minutia record size", count_offset + 2 )

        if count * record_size > reader.remaining():
            raise DecodeError(
                "%d minutiae declared, only %d bytes available" % ( count, reader.remaining() ),
                "minutiae count",
                count_offset
            )

        records = []
        for i in range( count ):
            offset = reader.offset
            x, y, direction, type, quality = struct.unpack_from( ">HHBBB", reader.take( record_size, "minutia %d" % i ) )
            records.append( ( offset, [ x, y, direction, type, quality or None, [] ] ) )

        entries_offset = reader.offset
        entries, = reader.unpack( ">H", "ridge count entries" )

        if entries * COMPACT_RIDGE_COUNT_SIZE > reader.remaining():
            raise DecodeError(
                "%d ridge counts declared, only %d bytes available" % ( entries, reader.remaining() ),
                "ridge count entries",
                entries_offset
            )

        for _ in range( entries ):
            offset = reader.offset
            i, neighbor, value = reader.unpack( ">HHB", "ridge count" )

            if i >= count:
                raise DecodeError( "ridge count for the unknown minutia %d" % i, "ridge count", offset )

            records[ i ][ 1 ][ 5 ].append( ( neighbor, value ) )

        if reader.remaining() > 0:
            logger.debug( "%d trailing bytes skipped" % reader.remaining() )

        minutiae = []
        for offset, fields in records:
            try:
                minutiae.append( Minutia( *fields ) )
            except ValidationError as e:
                raise DecodeError( e.msg, e.field, offset ) from e

        return self.build( width, height, resolution, minutiae, pattern )
