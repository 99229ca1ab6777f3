#!/usr/bin/python
# -*- coding: UTF-8 -*-

import unittest

import numpy as np

from AFIS.core import Template, Minutia, PatternClass
from AFIS.core.exceptions import DecodeError, ValidationError
from AFIS.runtime import RuntimeFormat, RuntimeTemplate

def sample_template():
    return Template(
        300, 400, resolution = 394, pattern = PatternClass.ARCH,
        minutiae = [
            Minutia( 10, 10, 0, "ending", 80, [ ( 1, 4 ) ] ),
            Minutia( 50, 60, 64, "bifurcation", None, [ ( 0, 4 ), ( 2, 9 ) ] ),
            Minutia( 250, 390, 200, "other", 1 ),
            Minutia( 40, 12, 12, "ending" )
        ]
    )

class RuntimeFormatTestCase( unittest.TestCase ):
    def setUp( self ):
        self.fmt = RuntimeFormat()

    def test_compile( self ):
        rt = self.fmt.export_template( sample_template() )

        self.assertEqual( ( rt.width, rt.height, rt.resolution ), ( 300, 400, 394 ) )
        self.assertIs( rt.pattern, PatternClass.ARCH )
        self.assertEqual( rt.positions.tolist(), [ [ 10, 10 ], [ 50, 60 ], [ 250, 390 ], [ 40, 12 ] ] )
        self.assertEqual( rt.directions.tolist(), [ 0, 64, 200, 12 ] )
        self.assertEqual( rt.types.tolist(), [ 1, 2, 0, 1 ] )
        self.assertEqual( rt.qualities.tolist(), [ 80, 0, 1, 0 ] )
        self.assertEqual( rt.ridge_counts.tolist(), [ [ 0, 1, 4 ], [ 1, 0, 4 ], [ 1, 2, 9 ] ] )
        self.assertEqual( len( rt ), 4 )

    def test_buckets( self ):
        rt = self.fmt.export_template( sample_template() )

        self.assertEqual( sorted( rt.buckets ), [ ( 0, 0 ), ( 1, 0 ), ( 1, 1 ), ( 7, 12 ) ] )
        self.assertEqual( rt.buckets[ ( 1, 0 ) ].tolist(), [ 3 ] )
        self.assertEqual( sum( len( v ) for v in rt.buckets.values() ), len( rt ) )

    def test_read_only( self ):
        rt = self.fmt.export_template( sample_template() )

        with self.assertRaises( ValueError ):
            rt.positions[ 0, 0 ] = 1

        with self.assertRaises( ValueError ):
            rt.buckets[ ( 0, 0 ) ][ 0 ] = 1

    def test_round_trip( self ):
        for t in [ sample_template(), Template( 100, 100 ) ]:
            self.assertEqual( self.fmt.import_template( self.fmt.export_template( t ) ), t )

    def test_neighbors( self ):
        rt = self.fmt.export_template( sample_template() )

        self.assertEqual( rt.neighbors( 10, 10, 0 ), [ 0 ] )
        self.assertEqual( rt.neighbors( 25, 10, 16 ), [ 0, 3 ] )
        self.assertEqual( rt.neighbors( 250, 390, 500 ), [ 0, 1, 2, 3 ] )
        self.assertEqual( rt.neighbors( 150, 200, 5 ), [] )
        self.assertEqual( self.fmt.export_template( Template( 100, 100 ) ).neighbors( 0, 0, 10 ), [] )

    def test_clone( self ):
        rt = self.fmt.export_template( sample_template() )
        c = rt.clone()

        self.assertEqual( c, rt )
        self.assertIsNot( c, rt )

        for name in [ "positions", "directions", "types", "qualities", "ridge_counts" ]:
            self.assertFalse( np.shares_memory( getattr( c, name ), getattr( rt, name ) ) )

    def test_equality( self ):
        a = self.fmt.export_template( sample_template() )
        b = self.fmt.export_template( sample_template().replace( pattern = "whorl" ) )

        self.assertNotEqual( a, b )
        self.assertNotEqual( a, "template" )

    def test_coincident_minutiae( self ):
        t = Template( 100, 100, minutiae = [ Minutia( 10, 10 ), Minutia( 20, 20 ), Minutia( 10, 10, 128 ) ] )

        with self.assertRaises( DecodeError ) as cm:
            self.fmt.export_template( t )

        self.assertEqual( cm.exception.field, "minutiae" )

    def test_wrong_types( self ):
        with self.assertRaises( TypeError ):
            self.fmt.export_template( None )

        with self.assertRaises( TypeError ):
            self.fmt.import_template( sample_template() )

    def test_direct_construction( self ):
        rt = RuntimeTemplate( 100, 100, 197, 0, [], [], [], [], [] )

        self.assertEqual( len( rt ), 0 )
        self.assertEqual( rt.buckets, {} )
        self.assertEqual( self.fmt.import_template( rt ), Template( 100, 100, 197 ) )

        rt = RuntimeTemplate( 200, 200, 197, 3, [ ( 1, 1 ), ( 5, 6 ) ], [ 0, 64 ], [ 1, 2 ], [ 0, 30 ], [ ( 1, 0, 2 ) ] )
        t = self.fmt.import_template( rt )

        self.assertIs( t.pattern, PatternClass.LEFT_LOOP )
        self.assertEqual( t.minutiae[ 1 ], Minutia( 5, 6, 64, "bifurcation", 30, [ ( 0, 2 ) ] ) )

    def test_invalid_construction( self ):
        valid = dict(
            width = 200,
            height = 200,
            resolution = 197,
            pattern = 0,
            positions = [ ( 1, 1 ), ( 5, 6 ) ],
            directions = [ 0, 64 ],
            types = [ 1, 2 ],
            qualities = [ 0, 30 ],
            ridge_counts = [ ( 0, 1, 4 ) ]
        )
        RuntimeTemplate( **valid )

        for field, value in [
            ( "ridge_counts", [ ( 5, 0, 1 ) ] ),
            ( "ridge_counts", [ ( 0, 2, 1 ) ] ),
            ( "ridge_counts", [ ( -1, 0, 1 ) ] ),
            ( "ridge_counts", [ ( 1, 1, 1 ) ] ),
            ( "ridge_counts", [ ( 0, 1, 256 ) ] ),
            ( "pattern", 9 ),
            ( "width", 0 ),
            ( "directions", [ 0 ] ),
            ( "types", [ 1, 3 ] ),
            ( "qualities", [ 0, 101 ] ),
            ( "positions", [ ( 1, 1 ), ( 200, 6 ) ] ),
        ]:
            args = dict( valid )
            args[ field ] = value

            with self.assertRaises( ValidationError ):
                RuntimeTemplate( **args )

if __name__ == "__main__":
    unittest.main()
