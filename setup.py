"""Install script for setuptools."""

import os
from setuptools import setup, find_packages

_CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))

PACKAGE_NAME = 'jannier'
VERSION = '0.0.1'
CLASSIFIERS = [
  'Intended Audience :: Science/Research',
  'Intended Audience :: Developers',
  'License :: OSI Approved :: MIT License',
  'Programming Language :: Python',
  'Programming Language :: Python :: 3',
  'Topic :: Software Development :: Libraries :: Python Modules',
  'Topic :: Scientific/Engineering',
]
LICENSE = 'MIT License'


def _read_requirements():
  with open(os.path.join(_CURRENT_DIR, 'requirements.txt')) as f:
    requirements = f.readlines()
  return [req.strip() for req in requirements if req.strip()]


setup(
  name=PACKAGE_NAME,
  version=VERSION,
  packages=find_packages(),
  description=(
    'A JAX-based Wannier interpolation toolkit: Wigner-Seitz and MDRS '
    'R-space domains, k-paths and band structure interpolation.'
  ),
  classifiers=CLASSIFIERS,
  license=LICENSE,
  author='Tianbo Li',
  author_email='li_tianbo@live.com',
  install_requires=_read_requirements(),
)
