from setuptools import setup, find_packages

setup(
    name             = 'medtriage',
    version          = '1.0.0',
    description      = 'medtriage — Message Analysis & Triage Engine for patient support messages',
    author           = 'medtriage contributors',
    packages         = find_packages(exclude=['tests*']),
    install_requires = open('requirements.txt').read().splitlines(),
    extras_require   = {
        'test': ['pytest>=7.0', 'httpx>=0.24'],
    },
    entry_points     = {
        'console_scripts': [
            'medtriage = medtriage.cli:main',
        ],
    },
    python_requires  = '>=3.10',
    classifiers      = [
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
