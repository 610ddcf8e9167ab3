#!/usr/bin/env python3
from os.path import dirname, join
from setuptools import setup

with open(join(dirname(__file__), "README.rst"), "r") as fd:
    readme = fd.read()

setup(
    name="sigv4verify",
    version="0.1.0",
    packages=['sigv4verify'],
    install_requires=["pytz"],
    extras_require={"test": ["pytest"]},
    python_requires=">=3.6",

    # PyPI information
    description="AWS SigV4 and aws-chunked signature verification routines",
    long_description=readme,
    long_description_content_type="text/x-rst",
    license="Apache 2.0",
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development :: Libraries :: Python Modules',
    ],
    keywords = ['aws', 'signature', 'aws-sigv4', 'aws-chunked'],
    zip_safe=False,
)
