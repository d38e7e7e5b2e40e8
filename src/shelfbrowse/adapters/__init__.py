"""Search backend layer — Clients for the index that holds the shelf keys.

Built-in backends:
  - solr: Apache Solr (JSON Request API + TermsComponent)
"""
