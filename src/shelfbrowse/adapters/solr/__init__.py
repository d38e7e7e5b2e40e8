"""Apache Solr backend."""

from shelfbrowse.adapters.solr.client import SolrBackend

__all__ = ["SolrBackend"]
