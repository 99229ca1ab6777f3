#!/usr/bin/python
# -*- coding: UTF-8 -*-

import struct
import unittest

from AFIS.compact import CompactFormat
from AFIS.core import Template, Minutia, PatternClass
from AFIS.core.exceptions import DecodeError, EncodeError

def sample_template():
    return Template(
        200, 200, dpi = 500,
        minutiae = [
            Minutia.from_degrees( 10, 10, 0, "ending" ),
            Minutia.from_degrees( 50, 60, 90, "bifurcation" ),
            Minutia.from_degrees( 80, 20, 180, "ending" )
        ]
    )

def rich_template():
    return Template(
        400, 500, resolution = 394, pattern = PatternClass.RIGHT_LOOP,
        minutiae = [
            Minutia( 10, 10, 3, "ending", 80, [ ( 1, 4 ), ( 2, 7 ) ] ),
            Minutia( 399, 499, 255, "other", 1 ),
            Minutia( 0, 0, 128, "bifurcation", 100, [ ( 0, 0 ) ] )
        ]
    )

class CompactFormatTestCase( unittest.TestCase ):
    def setUp( self ):
        self.fmt = CompactFormat()

    def test_layout( self ):
        data = self.fmt.export_template( sample_template() )

        self.assertEqual( data[ 0:3 ], b"AFC" )
        self.assertEqual( data[ 3 ], 1 )
        self.assertEqual( struct.unpack( ">HHHHB", data[ 4:13 ] ), ( 7, 200, 200, 197, 0 ) )
        self.assertEqual( struct.unpack( ">HB", data[ 13:16 ] ), ( 3, 7 ) )
        self.assertEqual( struct.unpack( ">HHBBB", data[ 23:30 ] ), ( 50, 60, 64, 2, 0 ) )
        self.assertEqual( data[ -2: ], b"\x00\x00" )
        self.assertEqual( len( data ), 39 )

    def test_round_trip( self ):
        for t in [ sample_template(), rich_template(), Template( 100, 100 ) ]:
            self.assertEqual( self.fmt.import_template( self.fmt.export_template( t ) ), t )

    def test_byte_round_trip( self ):
        data = self.fmt.export_template( rich_template() )
        self.assertEqual( self.fmt.export_template( self.fmt.import_template( data ) ), data )

    def test_deterministic( self ):
        self.assertEqual(
            self.fmt.export_template( rich_template() ),
            self.fmt.export_template( rich_template().copy() )
        )

    def test_accepts_bytearray( self ):
        data = bytearray( self.fmt.export_template( sample_template() ) )
        self.assertEqual( self.fmt.import_template( data ), sample_template() )

    def test_too_short( self ):
        data = self.fmt.export_template( sample_template() )

        with self.assertRaises( DecodeError ) as cm:
            self.fmt.import_template( data[ 0:2 ] )

        self.assertEqual( cm.exception.offset, 0 )

    def test_truncated( self ):
        data = self.fmt.export_template( sample_template() )

        for n in range( 6, len( data ) ):
            with self.assertRaises( DecodeError ):
                self.fmt.import_template( data[ :n ] )

    def test_bad_magic( self ):
        data = self.fmt.export_template( sample_template() )

        with self.assertRaises( DecodeError ) as cm:
            self.fmt.import_template( b"XYZ" + data[ 3: ] )

        self.assertEqual( cm.exception.field, "magic" )

    def test_version_zero( self ):
        data = bytearray( self.fmt.export_template( sample_template() ) )
        data[ 3 ] = 0

        with self.assertRaises( DecodeError ):
            self.fmt.import_template( data )

    def test_newer_version( self ):
        # longer header and records, and trailing data, are skipped
        t = sample_template()
        data = b"".join( [
            b"AFC",
            struct.pack( ">BH", 2, 9 ),
            struct.pack( ">HHHBH", 200, 200, 197, 0, 0xFFFF ),
            struct.pack( ">HB", 3, 8 ),
            b"".join(
                struct.pack( ">HHBBBB", m.x, m.y, m.direction, m.type, 0, 0xAA )
                for m in t.minutiae
            ),
            struct.pack( ">H", 0 ),
            b"extra"
        ] )

        self.assertEqual( self.fmt.import_template( data ), t )

    def test_invalid_values( self ):
        data = bytearray( self.fmt.export_template( sample_template() ) )

        #    pattern class
        invalid = bytearray( data )
        invalid[ 12 ] = 9
        with self.assertRaises( DecodeError ):
            self.fmt.import_template( invalid )

        #    minutia type
        invalid = bytearray( data )
        invalid[ 21 ] = 7
        with self.assertRaises( DecodeError ) as cm:
            self.fmt.import_template( invalid )
        self.assertEqual( cm.exception.offset, 16 )

        #    minutia outside of the image
        invalid = bytearray( data )
        invalid[ 16:18 ] = struct.pack( ">H", 200 )
        with self.assertRaises( DecodeError ):
            self.fmt.import_template( invalid )

    def test_ridge_count_unknown_minutia( self ):
        data = self.fmt.export_template( sample_template() )
        data = data[ :-2 ] + struct.pack( ">HHHB", 1, 5, 0, 3 )

        with self.assertRaises( DecodeError ):
            self.fmt.import_template( data )

    def test_too_many_minutiae( self ):
        t = Template( 300, 300, minutiae = [ Minutia( x, y ) for x in range( 300 ) for y in range( 219 ) ] )
        self.assertEqual( len( t ), 65700 )

        with self.assertRaises( EncodeError ):
            self.fmt.export_template( t )

    def test_not_a_template( self ):
        with self.assertRaises( TypeError ):
            self.fmt.export_template( b"AFC" )

        with self.assertRaises( TypeError ):
            self.fmt.import_template( "AFC" )

if __name__ == "__main__":
    unittest.main()
