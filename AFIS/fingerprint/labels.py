#!/usr/bin/python
# -*- coding: UTF-8 -*-

from enum import IntEnum

from ..core import LabelledEnum

FINGER_POSITION_CODE = {
    0: "unknown finger",
    1: "right thumb",
    2: "right index",
    3: "right middle",
    4: "right ring",
    5: "right little",
    6: "left thumb",
    7: "left index",
    8: "left middle",
    9: "left ring",
    10: "left little"
}

class Finger( LabelledEnum, IntEnum ):
    """
        Position of the finger on the hand. The codes are the finger position
        codes of the ISO/IEC 19794-2 and ANSI/NIST-ITL standards. `ANY` is the
        unspecified position, matching all the other positions.

            >>> from AFIS.fingerprint.labels import Finger
            >>> Finger.parse( "right index" )
            <Finger.RIGHT_INDEX: 2>
            >>> Finger.parse( 7 ).label
            'left index'
            >>> Finger.parse( "unknown finger" ) is Finger.ANY
            True
            >>> Finger.RIGHT_RING.hand
            'right'
    """
    ANY = 0
    RIGHT_THUMB = 1
    RIGHT_INDEX = 2
    RIGHT_MIDDLE = 3
    RIGHT_RING = 4
    RIGHT_LITTLE = 5
    LEFT_THUMB = 6
    LEFT_INDEX = 7
    LEFT_MIDDLE = 8
    LEFT_RING = 9
    LEFT_LITTLE = 10

    @property
    def label( self ):
        return FINGER_POSITION_CODE[ self.value ]

    @property
    def hand( self ):
        if self is Finger.ANY:
            return None
        return self.name.split( "_" )[ 0 ].lower()

    @classmethod
    def parse( cls, value, field = "finger" ):
        if isinstance( value, str ):
            for code, label in FINGER_POSITION_CODE.items():
                if value.strip().lower() == label:
                    return cls( code )

        return super( Finger, cls ).parse( value, field )
