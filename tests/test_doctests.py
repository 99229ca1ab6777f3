#!/usr/bin/python
# -*- coding: UTF-8 -*-

import doctest
import sys
import unittest

import AFIS.core
import AFIS.core.exceptions
import AFIS.core.functions

import AFIS.compact
import AFIS.ISO
import AFIS.XML
import AFIS.runtime

import AFIS.fingerprint
import AFIS.fingerprint.labels

MODULES = [
    AFIS.core,
    AFIS.core.exceptions,
    AFIS.core.functions,
    AFIS.compact,
    AFIS.ISO,
    AFIS.XML,
    AFIS.runtime,
    AFIS.fingerprint,
    AFIS.fingerprint.labels,
]

def AFIStests():
    tests = unittest.TestSuite()

    for module in MODULES:
        tests.addTests( doctest.DocTestSuite( module ) )

    return tests

class DoctestTestCase( unittest.TestCase ):
    def test_doctests( self ):
        result = unittest.TestResult()
        AFIStests().run( result )

        self.assertGreater( result.testsRun, 0 )
        self.assertEqual( result.failures, [] )
        self.assertEqual( result.errors, [] )

if __name__ == "__main__":
    ret = not unittest.TextTestRunner( verbosity = 2 ).run( AFIStests() ).wasSuccessful()
    sys.exit( ret )
