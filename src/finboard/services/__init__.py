"""Grid engine, dashboard session, persistence and market-data services."""
