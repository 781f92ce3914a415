"""Editor services (query, commands, clipboard) and batch services (store, orchestration)."""
