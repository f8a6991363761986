"""Record store interface and backends."""
