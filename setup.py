"""
Setup configuration for PyAnalyser (K6BEZ antenna analyser driver).

This is a pure Python library. It can be installed via:
    - pip install .
    - pip install -e .[dev]  (for development)
"""

import os

from setuptools import setup, find_packages

package_name = 'pyanalyser'

setup(
    name=package_name,
    version='1.0.0',
    packages=find_packages(exclude=['test', 'tests']),

    install_requires=[
        'pyserial>=3.5',
    ],

    extras_require={
        'dev': [
            'pytest>=7.0',
            'pytest-cov',
            'pytest-timeout',
        ],
    },

    zip_safe=True,

    description='Serial driver for K6BEZ-style antenna analysers (VSWR scan and detector capture)',
    long_description=open('README.md').read() if os.path.exists('README.md') else '',
    long_description_content_type='text/markdown',
    license='MIT',

    entry_points={
        'console_scripts': [
            'pyanalyser = pyanalyser.cli:main',
        ],
    },

    python_requires='>=3.8',

    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: POSIX',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Topic :: Communications :: Ham Radio',
        'Topic :: Scientific/Engineering',
    ],
)
