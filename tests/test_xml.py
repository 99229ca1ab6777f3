#!/usr/bin/python
# -*- coding: UTF-8 -*-

import unittest

import xmltodict

from AFIS.core import Template, Minutia, PatternClass
from AFIS.core.exceptions import DecodeError
from AFIS.XML import XmlFormat

def sample_template():
    return Template(
        200, 200, dpi = 500, pattern = PatternClass.LEFT_LOOP,
        minutiae = [
            Minutia( 10, 10, 0, "ending", 80, [ ( 1, 4 ), ( 2, 0 ) ] ),
            Minutia( 50, 60, 64, "bifurcation" ),
            Minutia( 80, 20, 128, "other", 1 )
        ]
    )

class XmlFormatTestCase( unittest.TestCase ):
    def setUp( self ):
        self.xml = XmlFormat()

    def test_document( self ):
        tree = xmltodict.parse( self.xml.export_template( sample_template() ) )
        root = tree[ "FingerprintTemplate" ]

        self.assertEqual( root[ "@Version" ], "1" )
        self.assertEqual( root[ "Header" ][ "@Resolution" ], "197" )
        self.assertEqual( root[ "Header" ][ "@Dpi" ], "500" )
        self.assertEqual( root[ "Header" ][ "@Pattern" ], "left loop" )
        self.assertEqual( len( root[ "Minutia" ] ), 3 )
        self.assertEqual( root[ "Minutia" ][ 1 ][ "@Type" ], "bifurcation" )
        self.assertNotIn( "@Quality", root[ "Minutia" ][ 1 ] )
        self.assertNotIn( "RidgeCount", root[ "Minutia" ][ 1 ] )
        self.assertEqual( root[ "Minutia" ][ 0 ][ "RidgeCount" ][ 1 ][ "@Count" ], "0" )

    def test_round_trip( self ):
        for t in [ sample_template(), Template( 100, 100 ), Template( 100, 100, minutiae = [ Minutia( 1, 2 ) ] ) ]:
            self.assertEqual( self.xml.import_template( self.xml.export_template( t ) ), t )

    def test_tree_round_trip( self ):
        t = sample_template()
        self.assertEqual( self.xml.import_template( self.xml.export_tree( t ) ), t )

    def test_bytes_input( self ):
        doc = self.xml.export_template( sample_template() ).encode( "utf-8" )
        self.assertEqual( self.xml.import_template( doc ), sample_template() )

    def test_dpi_only( self ):
        doc = '<FingerprintTemplate><Header Width="200" Height="100" Dpi="1000"/></FingerprintTemplate>'
        t = self.xml.import_template( doc )

        self.assertEqual( t.resolution, 394 )
        self.assertEqual( len( t ), 0 )
        self.assertIs( t.pattern, PatternClass.UNKNOWN )

    def test_unknown_elements_ignored( self ):
        doc = (
            '<FingerprintTemplate Version="2">'
            '<Header Width="200" Height="100" Resolution="197" Sensor="x"/>'
            '<Core X="5" Y="5"/>'
            '<Minutia X="1" Y="2" Direction="3" Type="ending" Angle="12"/>'
            '</FingerprintTemplate>'
        )
        t = self.xml.import_template( doc )

        self.assertEqual( t.minutiae, ( Minutia( 1, 2, 3, "ending" ), ) )

    def test_malformed( self ):
        with self.assertRaises( DecodeError ) as cm:
            self.xml.import_template( "<FingerprintTemplate><Header" )

        self.assertEqual( cm.exception.field, "xml" )

    def test_wrong_root( self ):
        with self.assertRaises( DecodeError ):
            self.xml.import_template( '<Template><Header Width="200" Height="100"/></Template>' )

    def test_missing_header( self ):
        with self.assertRaises( DecodeError ) as cm:
            self.xml.import_template( '<FingerprintTemplate Version="1"></FingerprintTemplate>' )

        self.assertEqual( cm.exception.field, "header" )

        with self.assertRaises( DecodeError ) as cm:
            self.xml.import_template( '<FingerprintTemplate/>' )

        self.assertEqual( cm.exception.field, "root" )

    def test_missing_attribute( self ):
        with self.assertRaises( DecodeError ) as cm:
            self.xml.import_template(
                '<FingerprintTemplate><Header Width="200" Height="100" Resolution="197"/>'
                '<Minutia X="1" Y="2" Type="ending"/></FingerprintTemplate>'
            )

        self.assertEqual( cm.exception.field, "minutia 0" )

    def test_invalid_values( self ):
        for minutia in [
            '<Minutia X="1" Y="2" Direction="256" Type="ending"/>',
            '<Minutia X="1" Y="2" Direction="0" Type="loop"/>',
            '<Minutia X="1" Y="2" Direction="0" Type="ending" Quality="0"/>',
            '<Minutia X="300" Y="2" Direction="0" Type="ending"/>',
            '<Minutia X="1" Y="2" Direction="0" Type="ending"><RidgeCount Neighbor="0" Count="1"/></Minutia>',
            '<Minutia/>',
            '<Minutia/><Minutia/>',
            '<Minutia X="1" Y="2" Direction="0" Type="ending"/><Minutia/>',
            '<Minutia X="1" Y="2" Direction="0" Type="ending"><RidgeCount/></Minutia>',
        ]:
            with self.assertRaises( DecodeError ):
                self.xml.import_template(
                    '<FingerprintTemplate><Header Width="200" Height="100" Resolution="197"/>%s</FingerprintTemplate>' % minutia
                )

    def test_empty_minutia( self ):
        with self.assertRaises( DecodeError ) as cm:
            self.xml.import_template(
                '<FingerprintTemplate><Header Width="200" Height="100" Resolution="197"/>'
                '<Minutia/></FingerprintTemplate>'
            )

        self.assertEqual( cm.exception.field, "minutia 0" )

    def test_wrong_input_type( self ):
        with self.assertRaises( TypeError ):
            self.xml.import_template( 12 )

if __name__ == "__main__":
    unittest.main()
