#!/usr/bin/env python
# -*- coding: utf-8 -*-
from setuptools import find_packages, setup

with open('README.md', encoding='utf8') as readme_file:
    readme = readme_file.read()


setup(
    name='hecpump',
    version='1.0.0',
    description="Delivers API analytics records to a Splunk HTTP Event Collector.",
    long_description=readme,
    long_description_content_type="text/markdown",
    packages=find_packages(include=['hecpump', 'hecpump.*']),
    entry_points={
        'console_scripts': [
            'hecpump=hecpump.cli:cli'
        ]
    },
    include_package_data=True,
    install_requires=[
        'certifi',
        'click>=8.0',
        'httpx>=0.25',
        'pydantic>=2.0',
        'rich',
        'typer>=0.9',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    python_requires=">=3.9",
    license="MIT license",
    zip_safe=False,
    keywords='splunk hec analytics',
    classifiers=[
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Natural Language :: English',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ]
)
