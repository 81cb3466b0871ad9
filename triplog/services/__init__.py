"""Services for triplog: record store, import, enrichment, filters, statistics and settings."""
