#!/usr/bin/python
# -*- coding: UTF-8 -*-

import logging
import struct

from ..core import TemplateFormat, Minutia, PatternClass
from ..core.config import (
    ISO_MAGIC, ISO_VERSION, ISO_HEADER_SIZE, ISO_MINUTIA_SIZE,
    ISO_EXTENDED_HEADER_SIZE, ISO_MAX_MINUTIAE, ISO_MAX_COORDINATE, ISO_MAX_FINGER,
    ISO_AREA_RIDGE_COUNT, ISO_AREA_PATTERN, ISO_RIDGE_COUNT_METHOD, MAX_QUALITY
)
from ..core.exceptions import DecodeError, EncodeError, ValidationError
from ..core.functions import ByteReader, bindump

logger = logging.getLogger( __name__ )

class IsoFormat( TemplateFormat ):
    """
        Partial implementation of the ISO/IEC 19794-2 (2005) standard (finger
        minutiae record format). Only single finger records are supported;
        multi-finger records have to be split before the import.

        The minutiae angles are stored in the same unit as the Template
        (1/256 of a turn), and the resolution in pixels per centimeter, so the
        conversion is lossless. The ridge counts are stored in the standard
        extended data area, the pattern class in a vendor-defined one.

        Usage:

            >>> from AFIS.core import Template, Minutia
            >>> from AFIS.ISO import IsoFormat
            >>> t = Template(
            ...     200, 200, dpi = 500,
            ...     minutiae = [
            ...         Minutia( 10, 10, 0, "ending", 60 ),
            ...         Minutia( 50, 60, 64, "bifurcation", ridge_counts = [ ( 0, 3 ) ] )
            ...     ]
            ... )
            >>> iso = IsoFormat()
            >>> data = iso.export_template( t )
            >>> data[ 0:8 ]
            b'FMR\\x00 20\\x00'
            >>> len( data )
            50
            >>> iso.import_template( data ) == t
            True

        The record length has to match the data length:

            >>> iso.import_template( data[ :-1 ] )
            Traceback (most recent call last):
            ...
            AFIS.core.exceptions.DecodeError: record length 50 does not match the data length 49 (field: record length, offset: 8)
    """

    ############################################################################
    #
    #    Export
    #
    ############################################################################

    def export_template( self, template ):
        self.check_template( template )

        minutiae = template.minutiae

        if len( minutiae ) > ISO_MAX_MINUTIAE:
            raise EncodeError( "too many minutiae for an ISO record: %d" % len( minutiae ), "minutiae" )

        body = [
            #    Finger position, view number and impression type, finger quality
            struct.pack( ">BBBB", 0, 0, 0, len( minutiae ) )
        ]

        for i, m in enumerate( minutiae ):
            if m.x > ISO_MAX_COORDINATE or m.y > ISO_MAX_COORDINATE:
                raise EncodeError( "minutia %d can not be stored in an ISO record: (%d, %d)" % ( i, m.x, m.y ), "minutiae" )

            body.append( struct.pack(
                ">HHBB",
                ( int( m.type ) << 14 ) | m.x,
                m.y,
                m.direction,
                m.quality or 0
            ) )

        body.append( self.export_extended( template ) )
        body = b"".join( body )

        length = ISO_HEADER_SIZE + len( body )

        header = b"".join( [
            ISO_MAGIC,
            ISO_VERSION,
            struct.pack(
                ">IHHHHHBB",
                length,
                0,
                template.width,
                template.height,
                template.resolution,
                template.resolution,
                1,
                0
            )
        ] )

        data = header + body
        logger.debug( "ISO template exported: %s" % bindump( data ) )

        return data

    def export_extended( self, template ):
        """
            Build the extended data block (length included).
        """
        areas = []

        ridge_counts = [
            struct.pack( ">BBB", i + 1, rc.neighbor + 1, rc.count )
            for i, m in enumerate( template.minutiae )
            for rc in m.ridge_counts
        ]

        if ridge_counts:
            areas.append( self.area( ISO_AREA_RIDGE_COUNT, struct.pack( ">B", ISO_RIDGE_COUNT_METHOD ) + b"".join( ridge_counts ) ) )

        if template.pattern != PatternClass.UNKNOWN:
            areas.append( self.area( ISO_AREA_PATTERN, struct.pack( ">B", template.pattern ) ) )

        areas = b"".join( areas )

        if len( areas ) > 0xFFFF:
            raise EncodeError( "extended data too long for an ISO record: %d bytes" % len( areas ), "ridge_counts" )

        return struct.pack( ">H", len( areas ) ) + areas

    def area( self, code, data ):
        length = ISO_EXTENDED_HEADER_SIZE + len( data )

        if length > 0xFFFF:
            raise EncodeError( "extended data area 0x%04X too long: %d bytes" % ( code, length ), "ridge_counts" )

        return struct.pack( ">HH", code, length ) + data

    ############################################################################
    #
    #    Import
    #
    ############################################################################

    def import_template( self, data ):
        data = self.as_bytes( data )

        logger.debug( "ISO template import: %s" % bindump( data ) )

        if len( data ) < ISO_HEADER_SIZE:
            raise DecodeError( "too short for an ISO record: %d bytes" % len( data ), "header", 0 )

        reader = ByteReader( data )

        magic = reader.take( 4, "format identifier" )
        if magic != ISO_MAGIC:
            raise DecodeError( "invalid format identifier: %r" % magic, "format identifier", 0 )

        version = reader.take( 4, "version" )
        if version != ISO_VERSION:
            raise DecodeError( "unsupported version: %r" % version, "version", 4 )

        length, equipment, width, height, xres, yres, views, _ = reader.unpack( ">IHHHHHBB", "header" )

        logger.debug( "record length: %d" % length )
        logger.debug( "capture equipment: 0x%04X" % equipment )
        logger.debug( "size: %dx%d" % ( width, height ) )
        logger.debug( "resolution: %dx%d px/cm" % ( xres, yres ) )
        logger.debug( "finger views: %d" % views )

        if length != len( data ):
            raise DecodeError( "record length %d does not match the data length %d" % ( length, len( data ) ), "record length", 8 )

        if views != 1:
            raise DecodeError( "%d finger views in the record, only single finger records are supported" % views, "finger views", 22 )

        position, impression, quality, count = reader.unpack( ">BBBB", "finger view" )

        logger.debug( "finger position: %d" % position )
        logger.debug( "view/impression: 0x%02X" % impression )
        logger.debug( "finger quality: %d" % quality )
        logger.debug( "minutiae: %d" % count )

        if position > ISO_MAX_FINGER:
            raise DecodeError( "invalid finger position: %d" % position, "finger position", ISO_HEADER_SIZE )

        if quality > MAX_QUALITY:
            raise DecodeError( "invalid finger quality: %d" % quality, "finger quality", ISO_HEADER_SIZE + 2 )

        if count * ISO_MINUTIA_SIZE > reader.remaining():
            raise DecodeError(
                "%d minutiae declared, only %d bytes available" % ( count, reader.remaining() ),
                "minutiae count",
                ISO_HEADER_SIZE + 3
            )

        records = []
        for i in range( count ):
            offset = reader.offset
            tx, ry, direction, mquality = reader.unpack( ">HHBB", "minutia %d" % i )

            type = tx >> 14
            if type == 3:
                raise DecodeError( "reserved minutia type for minutia %d" % i, "minutia type", offset )

            records.append( ( offset, [ tx & ISO_MAX_COORDINATE, ry & ISO_MAX_COORDINATE, direction, type, mquality or None, [] ] ) )

        pattern = self.import_extended( reader, records )

        minutiae = []
        for offset, fields in records:
            try:
                minutiae.append( Minutia( *fields ) )
            except ValidationError as e:
                raise DecodeError( e.msg, e.field, offset ) from e

        if xres == 0:
            raise DecodeError( "invalid resolution: 0", "resolution", 18 )

        return self.build( width, height, xres, minutiae, pattern )

    def import_extended( self, reader, records ):
        """
            Parse the extended data block. The ridge counts are added to the
            minutiae records; the pattern class is returned.
        """
        block_offset = reader.offset
        block_length, = reader.unpack( ">H", "extended data length" )

        if block_length != reader.remaining():
            raise DecodeError(
                "extended data length %d does not match the %d remaining bytes" % ( block_length, reader.remaining() ),
                "extended data length",
                block_offset
            )

        pattern = PatternClass.UNKNOWN

        while reader.remaining() > 0:
            offset = reader.offset
            code, length = reader.unpack( ">HH", "extended data area" )

            if length < ISO_EXTENDED_HEADER_SIZE:
                raise DecodeError( "invalid extended data area length: %d" % length, "extended data area", offset )

            area = reader.take( length - ISO_EXTENDED_HEADER_SIZE, "extended data area 0x%04X" % code )

            logger.debug( "extended data area 0x%04X: %s" % ( code, bindump( area ) ) )

            if code == ISO_AREA_RIDGE_COUNT:
                self.import_ridge_counts( area, offset + ISO_EXTENDED_HEADER_SIZE, records )

            elif code == ISO_AREA_PATTERN:
                if len( area ) != 1:
                    raise DecodeError( "invalid pattern class area length: %d" % len( area ), "pattern", offset )

                try:
                    pattern = PatternClass.parse( area[ 0 ], "pattern" )
                except ValidationError as e:
                    raise DecodeError( e.msg, e.field, offset + ISO_EXTENDED_HEADER_SIZE ) from e

            else:
                logger.debug( "extended data area 0x%04X skipped" % code )

        return pattern

    def import_ridge_counts( self, area, offset, records ):
        if len( area ) < 1 or ( len( area ) - 1 ) % 3 != 0:
            raise DecodeError( "invalid ridge count area length: %d" % len( area ), "ridge counts", offset )

        logger.debug( "ridge count extraction method: %d" % area[ 0 ] )

        for pos in range( 1, len( area ), 3 ):
            first, second, count = struct.unpack_from( ">BBB", area, pos )

            if not 1 <= first <= len( records ) or not 1 <= second <= len( records ):
                raise DecodeError( "ridge count between unknown minutiae %d and %d" % ( first, second ), "ridge counts", offset + pos )

            records[ first - 1 ][ 1 ][ 5 ].append( ( second - 1, count ) )
