#!/usr/bin/python
# -*- coding: UTF-8 -*-

from setuptools import setup

################################################################################
#
#    Version determination
#
################################################################################

try:
    import versioneer
    version = versioneer.get_version()

except ImportError:
    version = "0.dev0"

finally:
    import os
    os.chdir( os.path.split( os.path.abspath( __file__ ) )[ 0 ] )

    with open( "AFIS/version.py", "w+" ) as fp:
        fp.write( "__version__ = '%s'" % version )

################################################################################
#
#    Setup configuration
#
################################################################################

setup(
    name = 'AFIS',
    version = version,
    description = 'Python library for encoding and decoding fingerprint templates (compact, ISO/IEC 19794-2, XML and runtime formats)',
    packages = [
        'AFIS',
        'AFIS.core',
        'AFIS.compact',
        'AFIS.ISO',
        'AFIS.XML',
        'AFIS.runtime',
        'AFIS.fingerprint'
    ],
    install_requires = [
        'numpy',
        'pillow',
        'xmltodict',
    ],
    extras_require = {
        'test': [
            'pytest',
        ],
    },
 )
