"""ncbitaxonomy: work with a local copy of the NCBI taxonomy database"""

__version__ = "1.1.0"
