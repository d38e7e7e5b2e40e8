"""shelfbrowse — Virtual shelf browse over a Solr call-number index."""

__version__ = "0.1.0"
