#!/usr/bin/python
# -*- coding: UTF-8 -*-

from collections import namedtuple
from enum import IntEnum

import numbers

from .config import MAX_SIZE, MAX_RESOLUTION, MAX_QUALITY, MAX_RIDGE_COUNT, DIRECTION_STEPS
from .exceptions import ValidationError, DecodeError
from .functions import dpi2ppcm, ppcm2dpi, deg2dir

################################################################################
#
#    Checks on the values stored in the templates
#
################################################################################

def check_int( value, field, low = None, high = None ):
    """
        Check that the value is an integer in the [ low, high ] range, and
        return it as python int.

            >>> from AFIS.core import check_int
            >>> check_int( 12, "x", 0 )
            12
            >>> check_int( -1, "x", 0 )
            Traceback (most recent call last):
            ...
            AFIS.core.exceptions.ValidationError: x out of range: -1
            >>> check_int( "12", "x" )
            Traceback (most recent call last):
            ...
            AFIS.core.exceptions.ValidationError: x is not an integer: '12'
    """
    if isinstance( value, bool ) or not isinstance( value, numbers.Integral ):
        raise ValidationError( "%s is not an integer: %r" % ( field, value ), field )

    value = int( value )

    if ( low is not None and value < low ) or ( high is not None and value > high ):
        raise ValidationError( "%s out of range: %d" % ( field, value ), field )

    return value

class LabelledEnum( object ):
    """
        Mixin for the enumerations stored in templates. Each member has a
        human readable label (used in the XML format), and can be retrieved
        by member, code or label with the `parse` function.
    """
    @property
    def label( self ):
        return self.name.lower().replace( "_", " " )

    @classmethod
    def parse( cls, value, field = None ):
        field = field or cls.__name__

        if isinstance( value, cls ):
            return value

        elif isinstance( value, str ):
            try:
                return cls[ value.strip().upper().replace( " ", "_" ) ]
            except KeyError:
                raise ValidationError( "unknown %s: %r" % ( field, value ), field )

        else:
            code = check_int( value, field )
            try:
                return cls( code )
            except ValueError:
                raise ValidationError( "unknown %s code: %d" % ( field, code ), field )

class MinutiaType( LabelledEnum, IntEnum ):
    """
        Type of minutia. The codes are the one used in the ISO/IEC 19794-2
        records.

            >>> from AFIS.core import MinutiaType
            >>> MinutiaType.parse( "bifurcation" ).value
            2
            >>> MinutiaType.parse( 1 ).label
            'ending'
    """
    OTHER = 0
    ENDING = 1
    BIFURCATION = 2

class PatternClass( LabelledEnum, IntEnum ):
    """
        Henry pattern class of the fingerprint.

            >>> from AFIS.core import PatternClass
            >>> PatternClass.parse( "tented arch" ) is PatternClass.TENTED_ARCH
            True
    """
    UNKNOWN = 0
    ARCH = 1
    TENTED_ARCH = 2
    LEFT_LOOP = 3
    RIGHT_LOOP = 4
    WHORL = 5

################################################################################
#
#    Minutia objects
#
################################################################################

class RidgeCount( namedtuple( "RidgeCount", [ "neighbor", "count" ] ) ):
    """
        Number of ridges crossed between a minutia and one of its neighbors.
        The neighbor is the index of the other minutia in the template.
    """
    __slots__ = ()

    def __new__( cls, neighbor, count ):
        neighbor = check_int( neighbor, "neighbor", 0 )
        count = check_int( count, "ridge count", 0, MAX_RIDGE_COUNT )

        return super( RidgeCount, cls ).__new__( cls, neighbor, count )

class Minutia( namedtuple( "Minutia", [ "x", "y", "direction", "type", "quality", "ridge_counts" ] ) ):
    """
        Minutia; immutable value object.

        :cvar x: Horizontal position in pixels.
        :cvar y: Vertical position in pixels.
        :cvar direction: Direction in 1/256 of a turn, counter-clockwise.
        :cvar type: MinutiaType.
        :cvar quality: Quality ( 1 to 100 ), or None if not reported.
        :cvar ridge_counts: tuple of RidgeCount objects.

        Usage:

            >>> from AFIS.core import Minutia
            >>> Minutia( 10, 12, 64, "bifurcation", 80 )
            Minutia( x='10', y='12', direction='64', type='bifurcation', quality='80' )

        The direction is normalized in the [ 0, 255 ] range:

            >>> Minutia( 10, 12, 320 ).direction
            64

        The ridge counts can be passed as list of ( neighbor, count ) tuples:

            >>> m = Minutia( 10, 12, ridge_counts = [ ( 1, 4 ) ] )
            >>> m.ridge_counts
            (RidgeCount(neighbor=1, count=4),)
    """
    __slots__ = ()

    def __new__( cls, x, y, direction = 0, type = MinutiaType.ENDING, quality = None, ridge_counts = () ):
        x = check_int( x, "x", 0 )
        y = check_int( y, "y", 0 )
        direction = check_int( direction, "direction" ) % DIRECTION_STEPS
        type = MinutiaType.parse( type, "minutia type" )

        if quality is not None:
            quality = check_int( quality, "quality", 1, MAX_QUALITY )

        if ridge_counts is None:
            ridge_counts = ()

        ridge_counts = tuple(
            rc if isinstance( rc, RidgeCount ) else RidgeCount( *rc )
            for rc in ridge_counts
        )

        return super( Minutia, cls ).__new__( cls, x, y, direction, type, quality, ridge_counts )

    @classmethod
    def from_degrees( cls, x, y, angle, *args, **kwargs ):
        """
            Create a Minutia with the direction expressed in degrees.

                >>> from AFIS.core import Minutia
                >>> Minutia.from_degrees( 50, 60, 90, "bifurcation" ).direction
                64
        """
        return cls( x, y, deg2dir( angle ), *args, **kwargs )

    def __repr__( self ):
        lst = [
            ( "x", self.x ),
            ( "y", self.y ),
            ( "direction", self.direction ),
            ( "type", self.type.label )
        ]

        if self.quality is not None:
            lst.append( ( "quality", self.quality ) )

        if self.ridge_counts:
            lst.append( ( "ridge_counts", list( self.ridge_counts ) ) )

        return "%s( %s )" % ( self.__class__.__name__, ", ".join( [ "%s='%s'" % a for a in lst ] ) )

################################################################################
#
#    Template object
#
################################################################################

class Template( object ):
    """
        Format-neutral description of the features of a fingerprint. All
        the format adapters read from, and write to, this object. A Template
        is immutable; use :func:`~AFIS.core.Template.replace` to get a
        modified copy.

        :cvar width: Width of the image in pixels.
        :cvar height: Height of the image in pixels.
        :cvar resolution: Resolution in pixels per centimeter.
        :cvar pattern: PatternClass of the fingerprint.
        :cvar minutiae: tuple of Minutia objects.

        Usage:

            >>> from AFIS.core import Template, Minutia
            >>> t = Template(
            ...     200, 200, dpi = 500,
            ...     minutiae = [
            ...         Minutia.from_degrees( 10, 10, 0, "ending" ),
            ...         Minutia.from_degrees( 50, 60, 90, "bifurcation" ),
            ...         Minutia.from_degrees( 80, 20, 180, "ending" )
            ...     ]
            ... )
            >>> t
            Template( width='200', height='200', resolution='197', pattern='unknown', minutiae='3' )
            >>> t.dpi
            500
            >>> t.as_list()
            [[10, 10, 0, 1, None], [50, 60, 64, 2, None], [80, 20, 128, 1, None]]

        The minutiae have to be on the image:

            >>> Template( 100, 100, minutiae = [ Minutia( 120, 10 ) ] )
            Traceback (most recent call last):
            ...
            AFIS.core.exceptions.ValidationError: minutia 0 outside of the image: (120, 10)
    """
    __slots__ = ( "_width", "_height", "_resolution", "_pattern", "_minutiae" )

    def __init__( self, width, height, resolution = None, minutiae = (), pattern = PatternClass.UNKNOWN, dpi = None ):
        if resolution is not None and dpi is not None:
            raise ValidationError( "resolution and dpi are mutually exclusive", "resolution" )

        elif resolution is None:
            dpi = 500 if dpi is None else check_int( dpi, "dpi", 1 )
            resolution = dpi2ppcm( dpi )

        self._width = check_int( width, "width", 1, MAX_SIZE )
        self._height = check_int( height, "height", 1, MAX_SIZE )
        self._resolution = check_int( resolution, "resolution", 1, MAX_RESOLUTION )
        self._pattern = PatternClass.parse( pattern, "pattern" )

        if minutiae is None:
            minutiae = ()

        minutiae = tuple(
            m if isinstance( m, Minutia ) else Minutia( *m )
            for m in minutiae
        )

        for i, m in enumerate( minutiae ):
            if m.x >= self._width or m.y >= self._height:
                raise ValidationError( "minutia %d outside of the image: (%d, %d)" % ( i, m.x, m.y ), "minutiae" )

            for rc in m.ridge_counts:
                if rc.neighbor >= len( minutiae ) or rc.neighbor == i:
                    raise ValidationError( "invalid ridge count neighbor %d for minutia %d" % ( rc.neighbor, i ), "ridge_counts" )

        self._minutiae = minutiae

    ############################################################################
    #
    #    Read-only properties
    #
    ############################################################################

    @property
    def width( self ):
        return self._width

    @property
    def height( self ):
        return self._height

    @property
    def size( self ):
        return ( self._width, self._height )

    @property
    def resolution( self ):
        return self._resolution

    @property
    def dpi( self ):
        return ppcm2dpi( self._resolution )

    @property
    def pattern( self ):
        return self._pattern

    @property
    def minutiae( self ):
        return self._minutiae

    ############################################################################
    #
    #    Copies
    #
    ############################################################################

    def replace( self, **changes ):
        """
            Return a new Template with some fields replaced.

                >>> from AFIS.core import Template, Minutia
                >>> t = Template( 200, 200, minutiae = [ Minutia( 10, 10 ) ] )
                >>> t2 = t.replace( pattern = "whorl" )
                >>> t2.pattern.label, t.pattern.label
                ('whorl', 'unknown')
                >>> t2.minutiae == t.minutiae
                True
        """
        fields = {
            'width': self._width,
            'height': self._height,
            'resolution': self._resolution,
            'pattern': self._pattern,
            'minutiae': self._minutiae
        }

        if "dpi" in changes:
            fields.pop( "resolution" )

        fields.update( changes )

        return Template( **fields )

    def copy( self ):
        """
            Explicit structural copy of the Template.

                >>> from AFIS.core import Template, Minutia
                >>> t = Template( 200, 200, minutiae = [ Minutia( 10, 10 ) ] )
                >>> c = t.copy()
                >>> c == t, c is t
                (True, False)
        """
        return Template(
            self._width,
            self._height,
            self._resolution,
            [ Minutia( *m ) for m in self._minutiae ],
            self._pattern
        )

    def as_list( self ):
        """
            Return the minutiae as list of [ x, y, direction, type, quality ].
        """
        return [ [ m.x, m.y, m.direction, int( m.type ), m.quality ] for m in self._minutiae ]

    ############################################################################

    def __eq__( self, other ):
        if not isinstance( other, Template ):
            return NotImplemented

        return self._key() == other._key()

    def __ne__( self, other ):
        ret = self.__eq__( other )
        if ret is NotImplemented:
            return ret
        return not ret

    def __hash__( self ):
        return hash( self._key() )

    def _key( self ):
        return ( self._width, self._height, self._resolution, int( self._pattern ), self._minutiae )

    def __len__( self ):
        return len( self._minutiae )

    def __iter__( self ):
        for m in self._minutiae:
            yield m

    def __repr__( self ):
        lst = [
            ( "width", self._width ),
            ( "height", self._height ),
            ( "resolution", self._resolution ),
            ( "pattern", self._pattern.label ),
            ( "minutiae", len( self._minutiae ) )
        ]
        return "%s( %s )" % ( self.__class__.__name__, ", ".join( [ "%s='%s'" % a for a in lst ] ) )

################################################################################
#
#    Format adapters
#
################################################################################

class TemplateFormat( object ):
    """
        Base class of the format adapters. A format adapter converts a wire
        representation of a template to a Template object (`import_template`)
        and back (`export_template`). The adapters are stateless and can be
        shared between threads.
    """
    def import_template( self, data ):
        raise NotImplementedError

    def export_template( self, template ):
        raise NotImplementedError

    def build( self, *args, **kwargs ):
        """
            Build a Template object. Any validation error is reported as a
            DecodeError, so the import is all-or-nothing.
        """
        try:
            return Template( *args, **kwargs )
        except ValidationError as e:
            raise DecodeError( e.msg, field = e.field ) from e

    def check_template( self, template ):
        if not isinstance( template, Template ):
            raise TypeError( "Template object expected, got %s" % type( template ).__name__ )

    def as_bytes( self, data ):
        if isinstance( data, ( bytes, bytearray, memoryview ) ):
            return bytes( data )

        raise TypeError( "binary data expected, got %s" % type( data ).__name__ )
