#!/usr/bin/python
# -*- coding: UTF-8 -*-

from collections import OrderedDict
from xml.parsers.expat import ExpatError

import logging
import xmltodict

from ..core import TemplateFormat, Minutia, MinutiaType, PatternClass
from ..core.config import XML_ROOT, XML_VERSION, DIRECTION_STEPS
from ..core.exceptions import DecodeError, ValidationError

logger = logging.getLogger( __name__ )

_missing = object()

################################################################################
#
#    Helpers to read the xmltodict tree
#
################################################################################

def get_children( node, name ):
    """
        Return the `name` children of the node as list. xmltodict returns a
        single child as dict, multiple children as list and an empty element
        as None; the empty elements are kept, so they are rejected later.

            >>> from AFIS.XML import get_children
            >>> get_children( {}, "Minutia" )
            []
            >>> get_children( { "Minutia": None }, "Minutia" )
            [None]
            >>> get_children( { "Minutia": { "@X": "1" } }, "Minutia" )
            [{'@X': '1'}]
    """
    if name not in node:
        return []

    children = node[ name ]

    if isinstance( children, list ):
        return children

    else:
        return [ children ]

def get_attribute( node, name, field, default = _missing ):
    if not isinstance( node, dict ) or "@" + name not in node:
        if default is _missing:
            raise DecodeError( "missing attribute '%s'" % name, field )
        return default

    return node[ "@" + name ]

def get_int( node, name, field, default = _missing ):
    value = get_attribute( node, name, field, default )
    if value is default:
        return value

    try:
        return int( value )
    except ( TypeError, ValueError ):
        raise DecodeError( "attribute '%s' is not an integer: %r" % ( name, value ), field )

################################################################################
#
#    XML format
#
################################################################################

class XmlFormat( TemplateFormat ):
    """
        Human readable XML format. The document has a root element, an header
        element and one element per minutia:

            <FingerprintTemplate Version="1">
              <Header Width="200" Height="200" Resolution="197" Dpi="500" Pattern="unknown"/>
              <Minutia X="10" Y="10" Direction="0" Type="ending" Quality="80">
                <RidgeCount Neighbor="1" Count="4"/>
              </Minutia>
            </FingerprintTemplate>

        The optional fields (quality, ridge counts) are omitted if not set.

        Usage:

            >>> from AFIS.core import Template, Minutia
            >>> from AFIS.XML import XmlFormat
            >>> t = Template(
            ...     200, 200, dpi = 500, pattern = "whorl",
            ...     minutiae = [
            ...         Minutia( 10, 10, 0, "ending", 80, [ ( 1, 4 ) ] ),
            ...         Minutia( 50, 60, 64, "bifurcation" )
            ...     ]
            ... )
            >>> xml = XmlFormat()
            >>> doc = xml.export_template( t )
            >>> 'Pattern="whorl"' in doc, 'Quality="80"' in doc
            (True, True)
            >>> xml.import_template( doc ) == t
            True

        The import reports the faulty field:

            >>> xml.import_template( '<FingerprintTemplate><Header Width="200" Height="200" Resolution="197"/><Minutia X="10" Y="a"/></FingerprintTemplate>' )
            Traceback (most recent call last):
            ...
            AFIS.core.exceptions.DecodeError: attribute 'Y' is not an integer: 'a' (field: minutia 0)
    """

    ############################################################################
    #
    #    Export
    #
    ############################################################################

    def export_tree( self, template ):
        """
            Return the xmltodict tree of the template.
        """
        self.check_template( template )

        root = OrderedDict()
        root[ "@Version" ] = XML_VERSION
        root[ "Header" ] = OrderedDict( [
            ( "@Width", str( template.width ) ),
            ( "@Height", str( template.height ) ),
            ( "@Resolution", str( template.resolution ) ),
            ( "@Dpi", str( template.dpi ) ),
            ( "@Pattern", template.pattern.label )
        ] )

        minutiae = []
        for m in template.minutiae:
            node = OrderedDict( [
                ( "@X", str( m.x ) ),
                ( "@Y", str( m.y ) ),
                ( "@Direction", str( m.direction ) ),
                ( "@Type", m.type.label )
            ] )

            if m.quality is not None:
                node[ "@Quality" ] = str( m.quality )

            if m.ridge_counts:
                node[ "RidgeCount" ] = [
                    OrderedDict( [
                        ( "@Neighbor", str( rc.neighbor ) ),
                        ( "@Count", str( rc.count ) )
                    ] )
                    for rc in m.ridge_counts
                ]

            minutiae.append( node )

        if minutiae:
            root[ "Minutia" ] = minutiae

        return OrderedDict( [ ( XML_ROOT, root ) ] )

    def export_template( self, template ):
        doc = xmltodict.unparse( self.export_tree( template ), pretty = True, indent = "  " )
        logger.debug( "XML template exported (%d minutiae)" % len( template.minutiae ) )
        return doc

    ############################################################################
    #
    #    Import
    #
    ############################################################################

    def import_template( self, data ):
        if isinstance( data, dict ):
            tree = data

        elif isinstance( data, ( str, bytes, bytearray ) ):
            try:
                tree = xmltodict.parse( bytes( data ) if isinstance( data, bytearray ) else data )
            except ExpatError as e:
                raise DecodeError( "malformed XML: %s" % e, "xml" ) from e

        else:
            raise TypeError( "XML text or tree expected, got %s" % type( data ).__name__ )

        if XML_ROOT not in tree:
            raise DecodeError( "missing root element '%s'" % XML_ROOT, "root" )

        root = tree[ XML_ROOT ]
        if not isinstance( root, dict ):
            raise DecodeError( "empty root element", "root" )

        version = get_attribute( root, "Version", "version", None )
        logger.debug( "XML template version: %s" % version )

        if version is not None and version != XML_VERSION:
            logger.debug( "XML version %s differs from %s, unknown elements will be ignored" % ( version, XML_VERSION ) )

        header = root.get( "Header" )
        if not isinstance( header, dict ):
            raise DecodeError( "missing or duplicated header element", "header" )

        width = get_int( header, "Width", "width" )
        height = get_int( header, "Height", "height" )
        resolution = get_int( header, "Resolution", "resolution", None )
        dpi = None

        if resolution is None:
            dpi = get_int( header, "Dpi", "resolution" )

        pattern = get_attribute( header, "Pattern", "pattern", PatternClass.UNKNOWN )

        logger.debug( "size: %dx%d" % ( width, height ) )
        logger.debug( "resolution: %s px/cm, %s dpi" % ( resolution, dpi ) )
        logger.debug( "pattern: %s" % pattern )

        minutiae = [
            self.import_minutia( node, i )
            for i, node in enumerate( get_children( root, "Minutia" ) )
        ]

        logger.debug( "minutiae: %d" % len( minutiae ) )

        return self.build( width, height, resolution, minutiae, pattern, dpi )

    def import_minutia( self, node, i ):
        field = "minutia %d" % i

        x = get_int( node, "X", field )
        y = get_int( node, "Y", field )
        direction = get_int( node, "Direction", field )
        type = get_attribute( node, "Type", field )
        quality = get_int( node, "Quality", field, None )

        if not 0 <= direction < DIRECTION_STEPS:
            raise DecodeError( "direction out of range: %d" % direction, field )

        ridge_counts = [
            ( get_int( rc, "Neighbor", field ), get_int( rc, "Count", field ) )
            for rc in get_children( node, "RidgeCount" )
        ]

        try:
            return Minutia( x, y, direction, MinutiaType.parse( type, "minutia type" ), quality, ridge_counts )
        except ValidationError as e:
            raise DecodeError( e.msg, field ) from e
