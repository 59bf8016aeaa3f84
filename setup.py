# coding: utf-8
from setuptools import setup, find_packages
from codecs import open
from os import path
import sys


here = path.abspath(path.dirname(__file__))

with open(path.join(here, "DESCRIPTION.md"), encoding="utf-8") as description:
	description = long_description = description.read()

	name="ncbitaxonomy"
	version = [line.strip().split(" ")[-1].strip("\"'") for line in open(path.join(here, "ncbitaxonomy/__init__.py")) if line.startswith("__version__")][0]

	if sys.version_info.major != 3:
		raise EnvironmentError("""{toolname} is a python module that requires python3, and is not compatible with python2.""".format(toolname=name))

	setup(
		name=name,
		version=version,
		description="ncbitaxonomy - query and filter with a local copy of the NCBI Taxonomy",
		long_description=long_description,
		long_description_content_type="text/markdown",
		license="GPLv3+",
		classifiers=[
			"Development Status :: 4 - Beta",
			"Topic :: Scientific/Engineering :: Bio-Informatics",
			"License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
			"Operating System :: POSIX :: Linux",
			"Programming Language :: Python :: 3.7"
		],
		zip_safe=False,
		keywords="taxonomy ncbi kraken2 centrifuge fasta fastq",
		packages=find_packages(exclude=["tests"]),
		python_requires=">=3.8",
		install_requires=[
			"numpy",
			"pandas"
		],
		extras_require={
			"test": ["pytest"],
		},
		entry_points={
			"console_scripts": [
				"ncbitaxonomy=ncbitaxonomy.__main__:main",
			],
		},
		include_package_data=True,
		data_files=[],
	)
