#!/usr/bin/python
# -*- coding: UTF-8 -*-

from collections import namedtuple
from PIL import Image

import logging
import numpy as np

from ..compact import CompactFormat
from ..core import Template
from ..core.config import MIN_IMAGE_SIZE
from ..core.exceptions import ValidationError
from ..ISO import IsoFormat
from ..runtime import RuntimeFormat, RuntimeTemplate
from ..XML import XmlFormat
from .labels import Finger

logger = logging.getLogger( __name__ )

################################################################################
#
#    Format adapters used by the Fingerprint objects
#
################################################################################

Formats = namedtuple( "Formats", [ "compact", "iso", "xml", "runtime" ] )

DEFAULT_FORMATS = Formats( CompactFormat(), IsoFormat(), XmlFormat(), RuntimeFormat() )

################################################################################
#
#    Image functions
#
################################################################################

def get_image_size( image ):
    """
        Return the ( width, height ) of a 2D grid of bytes (numpy array, list
        of bytes rows or list of lists of int).

            >>> from AFIS.fingerprint import get_image_size
            >>> get_image_size( [ b"\\x00" * 120 ] * 100 )
            (120, 100)
            >>> get_image_size( [ [ 0, 0 ], [ 0 ] ] )
            Traceback (most recent call last):
            ...
            AFIS.core.exceptions.ValidationError: image rows of different lengths
    """
    if isinstance( image, np.ndarray ):
        if image.ndim != 2:
            raise ValidationError( "2D image expected, got %d dimensions" % image.ndim, "image" )

        height, width = image.shape
        return ( width, height )

    elif isinstance( image, ( list, tuple ) ):
        if not all( isinstance( row, ( bytes, bytearray, list, tuple ) ) for row in image ):
            raise ValidationError( "image rows expected as bytes or lists", "image" )

        height = len( image )
        width = len( image[ 0 ] ) if height else 0

        if any( len( row ) != width for row in image ):
            raise ValidationError( "image rows of different lengths", "image" )

        return ( width, height )

    else:
        raise ValidationError( "image format not supported: %s" % type( image ).__name__, "image" )

def image_to_array( image ):
    """
        Convert a 2D grid of bytes to a numpy array of uint8 ( height, width ).
    """
    if isinstance( image, np.ndarray ):
        return np.array( image, dtype = np.uint8 )

    width, height = get_image_size( image )

    if height and isinstance( image[ 0 ], ( bytes, bytearray ) ):
        return np.frombuffer( b"".join( bytes( row ) for row in image ), dtype = np.uint8 ).reshape( height, width )

    else:
        return np.array( image, dtype = np.uint8 ).reshape( height, width )

################################################################################
#
#    Fingerprint class
#
################################################################################

class Fingerprint( object ):
    """
        Collection of fingerprint-related information: image, template,
        finger position and source name.

        The template is stored in the compiled form (RuntimeTemplate) used by
        the matching engines, and can be set and retrieved in all the
        supported formats (compact, ISO/IEC 19794-2 and XML). The conversion
        is done on each call; cache the result if needed. The finger position
        is not stored in the templates; it has to be stored separately.

        The format adapters can be passed as a `Formats` object; the default
        adapters are used otherwise.

        Usage:

            >>> from AFIS.core import Template, Minutia
            >>> from AFIS.fingerprint import Fingerprint, DEFAULT_FORMATS
            >>> fp = Fingerprint()
            >>> fp.get_template() is None
            True

            >>> t = Template( 200, 200, dpi = 500, minutiae = [ Minutia( 10, 10 ), Minutia( 50, 60, 64, "bifurcation" ) ] )
            >>> fp.set_template( DEFAULT_FORMATS.compact.export_template( t ) )
            >>> DEFAULT_FORMATS.iso.import_template( fp.get_iso_template() ) == t
            True
            >>> fp.get_template_model() == t
            True
    """
    def __init__( self, formats = None ):
        self._formats = formats if formats is not None else DEFAULT_FORMATS

        self._template = None
        self._image = None
        self._finger = Finger.ANY
        self._source_name = None

    ############################################################################
    #
    #    Image
    #
    ############################################################################

    def get_image( self, format = None ):
        """
            Return the fingerprint image, or None if not set. By default the
            image is returned as stored (not copied). The `format` argument
            can be used to get a converted copy:

                * "RAW": bytes, row-major, one byte per pixel;
                * "PIL": PIL.Image in "L" mode;
                * "ARRAY": numpy uint8 array ( height, width ).

            Usage:

                >>> from AFIS.fingerprint import Fingerprint
                >>> fp = Fingerprint()
                >>> fp.set_image( [ b"\\xff" * 120 ] * 100 )
                >>> fp.get_image( "PIL" ).size
                (120, 100)
                >>> len( fp.get_image( "RAW" ) )
                12000
        """
        if self._image is None or format is None:
            return self._image

        format = format.upper()

        if format == "ARRAY":
            return image_to_array( self._image )

        elif format == "RAW":
            return image_to_array( self._image ).tobytes()

        elif format == "PIL":
            return Image.fromarray( image_to_array( self._image ) )

        else:
            raise ValueError( "image format not supported: %s" % format )

    def set_image( self, image ):
        """
            Set the fingerprint image. The image is a 2D grid of bytes
            (image[ y ][ x ], 0 for black to 255 for white): numpy array, list
            of bytes rows or list of lists. A PIL image is converted to a
            numpy array in grayscale. None removes the image.

            The image is not copied; clone the image data before the call to
            avoid unwanted sharing.

            Images smaller than 100x100 pixels are rejected, and the current
            image is kept:

                >>> from AFIS.fingerprint import Fingerprint
                >>> fp = Fingerprint()
                >>> fp.set_image( [ [ 0 ] * 50 ] * 50 )
                Traceback (most recent call last):
                ...
                AFIS.core.exceptions.ValidationError: fingerprint image is too small: 50x50
                >>> fp.get_image() is None
                True
        """
        if image is None:
            self._image = None
            return

        if isinstance( image, Image.Image ):
            image = np.asarray( image.convert( "L" ) )

        width, height = get_image_size( image )

        if width < MIN_IMAGE_SIZE or height < MIN_IMAGE_SIZE:
            raise ValidationError( "fingerprint image is too small: %dx%d" % ( width, height ), "image" )

        logger.debug( "Fingerprint image set: %dx%d" % ( width, height ) )
        self._image = image

    ############################################################################
    #
    #    Templates
    #
    ############################################################################

    def _export( self, fmt ):
        if self._template is None:
            return None

        return fmt.export_template( self._formats.runtime.import_template( self._template ) )

    def _import( self, fmt, data ):
        if data is None:
            self._template = None

        else:
            self._template = self._formats.runtime.export_template( fmt.import_template( data ) )

    def has_template( self ):
        return self._template is not None

    def get_template( self ):
        """
            Return the template in the native compact format, or None.
        """
        return self._export( self._formats.compact )

    def set_template( self, data ):
        """
            Set the template from the native compact format. None removes the
            template. If the data can not be decoded, a DecodeError is raised
            and the current template is kept.
        """
        self._import( self._formats.compact, data )

    def get_iso_template( self ):
        """
            Return the template in the ISO/IEC 19794-2 (2005) format, or None.
        """
        return self._export( self._formats.iso )

    def set_iso_template( self, data ):
        """
            Set the template from an ISO/IEC 19794-2 (2005) single finger
            record. Multi-finger records have to be split before.
        """
        self._import( self._formats.iso, data )

    def get_xml_template( self ):
        """
            Return the template as XML document, or None.
        """
        return self._export( self._formats.xml )

    def set_xml_template( self, data ):
        """
            Set the template from an XML document (text or xmltodict tree).
        """
        self._import( self._formats.xml, data )

    def get_template_model( self ):
        """
            Return the template as Template object, or None.
        """
        if self._template is None:
            return None

        return self._formats.runtime.import_template( self._template )

    def set_template_model( self, template ):
        if template is None:
            self._template = None

        elif isinstance( template, Template ):
            self._template = self._formats.runtime.export_template( template )

        else:
            raise TypeError( "Template object expected, got %s" % type( template ).__name__ )

    def get_runtime_template( self ):
        """
            Return the compiled template (not copied), or None. Used by the
            matching engines.
        """
        return self._template

    def set_runtime_template( self, runtime ):
        """
            Set the compiled template. Used by the extraction engines.
        """
        if runtime is not None and not isinstance( runtime, RuntimeTemplate ):
            raise TypeError( "RuntimeTemplate object expected, got %s" % type( runtime ).__name__ )

        self._template = runtime

    ############################################################################
    #
    #    Finger position and source
    #
    ############################################################################

    def get_finger( self ):
        return self._finger

    def set_finger( self, finger ):
        """
            Set the position of the finger on the hand, as Finger, finger
            position code or label. The default value, Finger.ANY, is the
            unspecified position.

                >>> from AFIS.fingerprint import Fingerprint
                >>> fp = Fingerprint()
                >>> fp.get_finger()
                <Finger.ANY: 0>
                >>> fp.set_finger( "left thumb" )
                >>> fp.get_finger()
                <Finger.LEFT_THUMB: 6>
                >>> fp.set_finger( 14 )
                Traceback (most recent call last):
                ...
                AFIS.core.exceptions.ValidationError: unknown finger code: 14
        """
        self._finger = Finger.parse( finger )

    def get_source_name( self ):
        return self._source_name

    def set_source_name( self, name ):
        self._source_name = name

    ############################################################################
    #
    #    Copy
    #
    ############################################################################

    def clone( self ):
        """
            Return a copy of the Fingerprint object. The template is deep
            copied; the image and the source name are not copied.

                >>> from AFIS.core import Template, Minutia
                >>> from AFIS.fingerprint import Fingerprint
                >>> fp = Fingerprint()
                >>> fp.set_template_model( Template( 200, 200, minutiae = [ Minutia( 10, 10 ) ] ) )
                >>> fp.set_finger( "right thumb" )
                >>> c = fp.clone()
                >>> c.get_runtime_template() == fp.get_runtime_template()
                True
                >>> c.get_runtime_template() is fp.get_runtime_template()
                False
                >>> c.get_finger()
                <Finger.RIGHT_THUMB: 1>
        """
        fp = Fingerprint( self._formats )
        fp._template = self._template.clone() if self._template is not None else None
        fp._finger = self._finger

        return fp

    def __repr__( self ):
        lst = [
            ( "finger", self._finger.label ),
            ( "template", "%d minutiae" % len( self._template ) if self._template is not None else None ),
            ( "image", "%dx%d" % get_image_size( self._image ) if self._image is not None else None ),
            ( "source", self._source_name )
        ]
        return "%s( %s )" % ( self.__class__.__name__, ", ".join( [ "%s='%s'" % a for a in lst ] ) )
