from setuptools import setup, find_packages

setup(
    name='rbbf-converter',
    version='1.0.0',

    package_dir={'': 'src'},
    packages=find_packages(where='src'),

    install_requires=[
        'termcolor>=1, <3',
        'colorama>=0.4.6, <2',
    ],
    extras_require={
        'test': ['pytest'],
    },

    entry_points={
        'console_scripts': [
            'rbbf2xml=rbbf_converter.cli.main:main',
        ],
    },

    zip_safe=True,

    description="Converts REALbasic/Xojo binary project files (RBBF) to XML",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Environment :: Console",
        "Typing :: Typed",
    ],
    python_requires='>=3.7',
)
