#!/usr/bin/python
# -*- coding: UTF-8 -*-

import logging
import numpy as np

from ..core import TemplateFormat, Minutia, MinutiaType, PatternClass, check_int
from ..core.config import BUCKET_SIZE, MAX_SIZE, MAX_RESOLUTION, MAX_QUALITY, MAX_RIDGE_COUNT
from ..core.exceptions import DecodeError, ValidationError

logger = logging.getLogger( __name__ )

def readonly( a ):
    a.flags.writeable = False
    return a

################################################################################
#
#    Runtime template
#
################################################################################

class RuntimeTemplate( object ):
    """
        Compiled template, used by the matching engines. The minutiae are
        stored in numpy arrays, and indexed in square buckets of BUCKET_SIZE
        pixels to speed up the neighborhood queries. All the arrays are
        read-only; a RuntimeTemplate is never modified after compilation.

        :cvar positions: ( N, 2 ) array of ( x, y ) positions.
        :cvar directions: ( N, ) array of directions (1/256 of a turn).
        :cvar types: ( N, ) array of MinutiaType codes.
        :cvar qualities: ( N, ) array of qualities (0 if not reported).
        :cvar ridge_counts: ( E, 3 ) array of ( minutia, neighbor, count ).
        :cvar buckets: dictionary ( cx, cy ) -> array of minutia indices.
    """
    def __init__( self, width, height, resolution, pattern, positions, directions, types, qualities, ridge_counts ):
        self.width = check_int( width, "width", 1, MAX_SIZE )
        self.height = check_int( height, "height", 1, MAX_SIZE )
        self.resolution = check_int( resolution, "resolution", 1, MAX_RESOLUTION )
        self.pattern = PatternClass.parse( pattern, "pattern" )

        self.positions = readonly( np.asarray( positions, dtype = np.int32 ).reshape( -1, 2 ) )
        self.directions = readonly( np.asarray( directions, dtype = np.uint8 ).reshape( -1 ) )
        self.types = readonly( np.asarray( types, dtype = np.uint8 ).reshape( -1 ) )
        self.qualities = readonly( np.asarray( qualities, dtype = np.uint8 ).reshape( -1 ) )
        self.ridge_counts = readonly( np.asarray( ridge_counts, dtype = np.int32 ).reshape( -1, 3 ) )

        self.check()

        self.buckets = self.index( self.positions )

    def check( self ):
        """
            Check the consistency of the arrays; the RuntimeTemplate objects
            built by the extraction engines are not compiled from a Template.

                >>> from AFIS.runtime import RuntimeTemplate
                >>> RuntimeTemplate( 200, 200, 197, 0, [ ( 1, 1 ) ], [ 0 ], [ 1 ], [ 0 ], [ ( 5, 0, 1 ) ] )
                Traceback (most recent call last):
                ...
                AFIS.core.exceptions.ValidationError: ridge count between unknown minutiae (5, 0)
        """
        count = len( self.positions )

        for name in [ "directions", "types", "qualities" ]:
            if len( getattr( self, name ) ) != count:
                raise ValidationError( "%d %s for %d minutiae" % ( len( getattr( self, name ) ), name, count ), name )

        if count:
            x, y = self.positions[ :, 0 ], self.positions[ :, 1 ]
            if ( x < 0 ).any() or ( y < 0 ).any() or ( x >= self.width ).any() or ( y >= self.height ).any():
                raise ValidationError( "minutiae outside of the image", "positions" )

            if not np.isin( self.types, [ int( t ) for t in MinutiaType ] ).all():
                raise ValidationError( "invalid minutia type codes: %s" % sorted( set( self.types.tolist() ) ), "types" )

            if ( self.qualities > MAX_QUALITY ).any():
                raise ValidationError( "quality out of range: %d" % self.qualities.max(), "qualities" )

        for i, neighbor, value in self.ridge_counts.tolist():
            if not 0 <= i < count or not 0 <= neighbor < count or i == neighbor:
                raise ValidationError( "ridge count between unknown minutiae (%d, %d)" % ( i, neighbor ), "ridge_counts" )

            if not 0 <= value <= MAX_RIDGE_COUNT:
                raise ValidationError( "ridge count out of range: %d" % value, "ridge_counts" )

    @staticmethod
    def index( positions ):
        """
            Build the spatial index of the minutiae positions.

                >>> from AFIS.runtime import RuntimeTemplate
                >>> buckets = RuntimeTemplate.index( [ [ 10, 10 ], [ 50, 60 ], [ 20, 5 ] ] )
                >>> sorted( ( k, v.tolist() ) for k, v in buckets.items() )
                [((0, 0), [0, 2]), ((1, 1), [1])]
        """
        lst = {}

        for i, ( x, y ) in enumerate( np.asarray( positions ).reshape( -1, 2 ).tolist() ):
            lst.setdefault( ( x // BUCKET_SIZE, y // BUCKET_SIZE ), [] ).append( i )

        return dict(
            ( cell, readonly( np.array( indices, dtype = np.int32 ) ) )
            for cell, indices in lst.items()
        )

    ############################################################################
    #
    #    Queries
    #
    ############################################################################

    def neighbors( self, x, y, radius ):
        """
            Return the indices of the minutiae at a distance lower or equal
            to `radius` from the ( x, y ) point, in increasing order.

                >>> from AFIS.core import Template, Minutia
                >>> from AFIS.runtime import RuntimeFormat
                >>> t = Template( 200, 200, minutiae = [ Minutia( 10, 10 ), Minutia( 50, 60 ), Minutia( 20, 5 ), Minutia( 150, 150 ) ] )
                >>> rt = RuntimeFormat().export_template( t )
                >>> rt.neighbors( 12, 8, 15 )
                [0, 2]
                >>> rt.neighbors( 100, 100, 80 )
                [1, 3]
        """
        if len( self.positions ) == 0:
            return []

        cx0, cx1 = int( ( x - radius ) // BUCKET_SIZE ), int( ( x + radius ) // BUCKET_SIZE )
        cy0, cy1 = int( ( y - radius ) // BUCKET_SIZE ), int( ( y + radius ) // BUCKET_SIZE )

        candidates = [
            self.buckets[ ( cx, cy ) ]
            for cx in range( cx0, cx1 + 1 )
            for cy in range( cy0, cy1 + 1 )
            if ( cx, cy ) in self.buckets
        ]

        if not candidates:
            return []

        candidates = np.concatenate( candidates )
        delta = self.positions[ candidates ] - np.array( [ x, y ] )
        dist = np.hypot( delta[ :, 0 ], delta[ :, 1 ] )

        return sorted( candidates[ dist <= radius ].tolist() )

    ############################################################################
    #
    #    Copy and comparison
    #
    ############################################################################

    def clone( self ):
        """
            Deep copy of the RuntimeTemplate; the arrays of the copy do not
            share memory with the original.

                >>> import numpy as np
                >>> from AFIS.core import Template, Minutia
                >>> from AFIS.runtime import RuntimeFormat
                >>> rt = RuntimeFormat().export_template( Template( 200, 200, minutiae = [ Minutia( 10, 10 ) ] ) )
                >>> c = rt.clone()
                >>> c == rt, np.shares_memory( c.positions, rt.positions )
                (True, False)
        """
        return RuntimeTemplate(
            self.width,
            self.height,
            self.resolution,
            self.pattern,
            self.positions.copy(),
            self.directions.copy(),
            self.types.copy(),
            self.qualities.copy(),
            self.ridge_counts.copy()
        )

    def __eq__( self, other ):
        if not isinstance( other, RuntimeTemplate ):
            return NotImplemented

        return (
            ( self.width, self.height, self.resolution, self.pattern ) ==
            ( other.width, other.height, other.resolution, other.pattern ) and
            np.array_equal( self.positions, other.positions ) and
            np.array_equal( self.directions, other.directions ) and
            np.array_equal( self.types, other.types ) and
            np.array_equal( self.qualities, other.qualities ) and
            np.array_equal( self.ridge_counts, other.ridge_counts )
        )

    def __ne__( self, other ):
        ret = self.__eq__( other )
        if ret is NotImplemented:
            return ret
        return not ret

    __hash__ = None

    def __len__( self ):
        return len( self.positions )

    def __repr__( self ):
        return "%s( size='%dx%d', minutiae='%d', buckets='%d' )" % (
            self.__class__.__name__,
            self.width,
            self.height,
            len( self.positions ),
            len( self.buckets )
        )

################################################################################
#
#    Runtime format (compiler)
#
################################################################################

class RuntimeFormat( TemplateFormat ):
    """
        Compile a Template to a RuntimeTemplate (`export_template`), and
        recover the Template from a RuntimeTemplate (`import_template`).

            >>> from AFIS.core import Template, Minutia
            >>> from AFIS.runtime import RuntimeFormat
            >>> t = Template( 200, 200, minutiae = [ Minutia( 10, 10, 12, "bifurcation", 40, [ ( 1, 2 ) ] ), Minutia( 30, 10 ) ] )
            >>> rf = RuntimeFormat()
            >>> rt = rf.export_template( t )
            >>> rt
            RuntimeTemplate( size='200x200', minutiae='2', buckets='1' )
            >>> rf.import_template( rt ) == t
            True

        Two minutiae at the same position can not be compiled:

            >>> rf.export_template( Template( 200, 200, minutiae = [ Minutia( 10, 10 ), Minutia( 10, 10, 128 ) ] ) )
            Traceback (most recent call last):
            ...
            AFIS.core.exceptions.DecodeError: minutiae 0 and 1 at the same position (10, 10) (field: minutiae)
    """
    def export_template( self, template ):
        self.check_template( template )

        seen = {}
        for i, m in enumerate( template.minutiae ):
            if ( m.x, m.y ) in seen:
                raise DecodeError(
                    "minutiae %d and %d at the same position (%d, %d)" % ( seen[ ( m.x, m.y ) ], i, m.x, m.y ),
                    "minutiae"
                )
            seen[ ( m.x, m.y ) ] = i

        rt = RuntimeTemplate(
            template.width,
            template.height,
            template.resolution,
            template.pattern,
            [ ( m.x, m.y ) for m in template.minutiae ],
            [ m.direction for m in template.minutiae ],
            [ int( m.type ) for m in template.minutiae ],
            [ m.quality or 0 for m in template.minutiae ],
            [
                ( i, rc.neighbor, rc.count )
                for i, m in enumerate( template.minutiae )
                for rc in m.ridge_counts
            ]
        )

        logger.debug( "Template compiled: %r" % rt )

        return rt

    def import_template( self, runtime ):
        if not isinstance( runtime, RuntimeTemplate ):
            raise TypeError( "RuntimeTemplate object expected, got %s" % type( runtime ).__name__ )

        ridge_counts = [ [] for _ in range( len( runtime ) ) ]
        for i, neighbor, count in runtime.ridge_counts.tolist():
            ridge_counts[ i ].append( ( neighbor, count ) )

        minutiae = [
            Minutia( x, y, direction, type, quality or None, rc )
            for ( x, y ), direction, type, quality, rc in zip(
                runtime.positions.tolist(),
                runtime.directions.tolist(),
                runtime.types.tolist(),
                runtime.qualities.tolist(),
                ridge_counts
            )
        ]

        return self.build(
            runtime.width,
            runtime.height,
            runtime.resolution,
            minutiae,
            runtime.pattern
        )
