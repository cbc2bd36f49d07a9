# setup.py


from codecs import open
from os import path
from setuptools import setup, find_packages
import sys


here = path.abspath(path.dirname(__file__))

# load configures
exec(open("./pydar/app.py").read())

# Get the long description from the relevant file
with open(path.join(here, "README.rst"), encoding='utf-8') as f:
    long_description = f.read()

# check Python version.
if sys.version_info[0] != 3 or sys.version_info[1] < 11:
    sys.exit("Sorry, only Python 3.11 or above is supported.")

reqs = ["intervaltree", "numpy", "pandas", "pysam"]

setup(
    name = "pydar",

    # Versions should comply with PEP440.  For a discussion on single-sourcing
    # the version across setup.py and the project code, see
    # https://packaging.python.org/en/latest/single_source_version.html
    version = VERSION,

    description = "pydar - Differential Allelic Representation (DAR) analysis",
    long_description = long_description,
    long_description_content_type = "text/x-rst",

    # Choose your license
    license='Apache-2.0',

    # What does your project relate to?
    keywords=['DAR', 'allele', 'genotype', 'eQTL', 'differential expression'],

    # You can just specify the packages manually here if your project is
    # simple. Or you can use find_packages().
    packages = find_packages(exclude = ["tests", "tests.*"]),

    entry_points={
        'console_scripts': [
            'pydar = pydar.main:main'
        ],
    },

    # Check Python version. Only pip >= 9.0.1 supports.
    python_requires = ">=3.11",

    # List run-time dependencies here.  These will be installed by pip when
    # your project is installed.
    install_requires = reqs,

    extras_require = {
        "test": ["pytest"]
    }
)
