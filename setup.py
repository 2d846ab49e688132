#!/usr/bin/env python3
"""
Setup script for onvifproto
"""

from setuptools import setup, find_packages
import os

# Read README for long description
def read_file(filename):
    with open(os.path.join(os.path.dirname(__file__), filename), encoding='utf-8') as f:
        return f.read()

setup(
    name='onvifproto',
    version='0.1.0',
    description='ONVIF protocol core - WS-Discovery, WS-Security SOAP transport and tolerant response parsing',
    long_description=read_file('README.md'),
    long_description_content_type='text/markdown',
    author='',
    author_email='',
    license='MIT',
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    install_requires=[
        'requests>=2.25.0',
        'urllib3>=1.26',
    ],
    extras_require={
        'test': [
            'pytest',
            'mock',
        ],
    },
    python_requires='>=3.7',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.7',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Topic :: Multimedia :: Video :: Capture',
        'Topic :: System :: Networking',
    ],
    keywords='onvif soap ws-discovery ws-security camera',
)
