#!/usr/bin/env python
from setuptools import setup
import os


def get_version():
    curdir = os.path.dirname(__file__)
    filename = os.path.join(curdir, 'src', 'svgrender', 'version.py')
    with open(filename, 'rb') as fp:
        return fp.read().decode('utf8').split('=')[1].strip(" \n'")


def readme():
    with open('README.rst') as f:
        return f.read()


setup(
    name='svgrender',
    version=get_version(),
    description='Render SVG documents to raster images, PDF and SVG',
    long_description=readme(),
    classifiers=[
        'Development Status :: 4 - Beta',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Multimedia :: Graphics',
        'Topic :: Multimedia :: Graphics :: Graphics Conversion',
    ],
    keywords='svg render rasterize png pdf',
    license='MIT License',
    package_dir={'': 'src'},
    packages=[
        'svgrender',
        'svgrender.engine',
    ],
    python_requires='>=3.10',
    install_requires=[
        'pillow',
        'numpy',
        'resvg-py>=0.2',
    ],
    extras_require={
        'test': [
            'pytest'],
    },
    include_package_data=True,
    entry_points={
        'console_scripts': ['svgrender=svgrender.__main__:main']
    },
)
