# PesaDB Catalog Package
# ======================
# The persisted list of table names.

from pesadb.catalog.catalog import Catalog
