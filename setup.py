from setuptools import setup

setup(
    name='cs.isobmff',
    version='20261018',
    description='Parser for the box tree of ISO Base Media File Format files such as MP4.',
    package_dir={'': 'lib/python'},
    packages=['cs.isobmff'],
    python_requires='>=3.8',
    install_requires=[
        'cs.binary>=20250501',
        'cs.buffer>=20250428',
        'cs.cmdutils>=20250531',
        'cs.deco>=20250531',
        'cs.lex>=20250414',
        'cs.logutils',
        'cs.pfx',
        'icontract',
        'typeguard',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'isobmff = cs.isobmff.__main__:main',
        ],
    },
)
