#!/usr/bin/python
# -*- coding: UTF-8 -*-

class AFISError( Exception ):
    """
        Base class of all the errors raised by the AFIS package. The `field`
        attribute names the template field related to the error, if known.
    """
    def __init__( self, msg, field = None ):
        super( AFISError, self ).__init__( msg )
        self.msg = msg
        self.field = field

class ValidationError( AFISError, ValueError ):
    pass

class EncodeError( AFISError ):
    pass

class DecodeError( AFISError ):
    """
        Raised when a wire representation can not be decoded to a Template.
        The `field` and `offset` attributes locate the problem in the input
        data (None if not applicable).

            >>> from AFIS.core.exceptions import DecodeError
            >>> e = DecodeError( "too short", field = "header", offset = 0 )
            >>> str( e )
            'too short (field: header, offset: 0)'
            >>> str( DecodeError( "too short" ) )
            'too short'
    """
    def __init__( self, msg, field = None, offset = None ):
        super( DecodeError, self ).__init__( msg, field )
        self.offset = offset

    def __str__( self ):
        where = []
        if self.field is not None:
            where.append( "field: %s" % self.field )
        if self.offset is not None:
            where.append( "offset: %d" % self.offset )

        if where:
            return "%s (%s)" % ( self.msg, ", ".join( where ) )
        else:
            return self.msg
