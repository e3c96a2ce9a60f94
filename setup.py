#!/usr/bin/env python3

import os
from setuptools import setup

_name = "osm_vcd"
here = os.path.abspath(os.path.dirname(__file__))
VERSION = "1.0.0"
with open(os.path.join(here, 'README.rst')) as readme_file:
    README = readme_file.read()

setup(
    name=_name,
    description='OSM vCloud Director vApp client',
    long_description=README,
    # version_command=('git describe --tags --long --dirty', 'pep440-git'),
    version=VERSION,
    python_requires='>=3.5',
    author='ETSI OSM',
    author_email='osslegalrouting@vmware.com',
    url='https://osm.etsi.org/gitweb/?p=osm/RO.git;a=summary',
    license='Apache 2.0',

    packages=[_name, _name + '.scripts', _name + '.tests'],
    include_package_data=True,
    package_data={_name: ['vcd.cfg']},
    install_requires=[
        'requests', 'lxml', 'PyYAML', 'jsonschema', 'netaddr', 'click', 'prettytable',
    ],
    extras_require={
        'test': ['mock', 'pytest'],
    },
    # test_suite='nose.collector',
    entry_points='''
        [console_scripts]
        vcd=osm_vcd.scripts.vcd:cli
        ''',
)
