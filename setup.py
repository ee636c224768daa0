"""
Setup script for dLive Command Core
"""
from setuptools import setup, find_packages

setup(
    name='dlive-command-core',
    version='1.0.0',
    description='Command resolution and MIDI encoding for Allen & Heath dLive consoles',
    author='MControl',
    author_email='',
    url='',
    packages=find_packages(include=['config', 'model', 'controller', 'utils']),
    py_modules=['app'],
    install_requires=[
        'mido>=1.2.10,<2.0.0',
        'python-rtmidi>=1.4.9,<2.0.0',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'dlive-command=app:main',
        ],
    },
    python_requires='>=3.7',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: End Users/Desktop',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Topic :: Multimedia :: Sound/Audio',
        'Topic :: Multimedia :: Sound/Audio :: MIDI',
    ],
)
